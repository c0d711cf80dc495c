from __future__ import annotations

import dataclasses
from typing import Any, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..common.pagination import PageParams
from .connection import Database
from .session import session_scope

T = TypeVar("T")


class SqlRepository(Generic[T]):
    """Maps dataclass entities onto ORM rows with the same column names."""

    entity_cls: Type[T]
    table_cls: Type[Any]
    # entity field -> row attribute, for names the declarative base reserves
    renamed: Dict[str, str] = {}

    def __init__(self, database: Database):
        self._db = database

    # mapping
    def _to_entity(self, row) -> T:
        values = {f.name: getattr(row, self.renamed.get(f.name, f.name)) for f in dataclasses.fields(self.entity_cls)}
        return self.entity_cls(**values)

    def _apply(self, row, entity: T) -> None:
        for f in dataclasses.fields(self.entity_cls):
            setattr(row, self.renamed.get(f.name, f.name), getattr(entity, f.name))

    # helpers
    def _scoped(self, stmt, *, tenant_id: Optional[str], include_deleted: bool):
        table = self.table_cls
        if tenant_id is not None and hasattr(table, "tenant_id"):
            stmt = stmt.where(table.tenant_id == tenant_id)
        if not include_deleted and hasattr(table, "deleted_at"):
            stmt = stmt.where(table.deleted_at.is_(None))
        return stmt

    def _save(self, entity: T) -> T:
        with session_scope(self._db) as session:
            self._save_in(session, entity)
        return entity

    def _save_in(self, session: Session, entity: T) -> None:
        row = session.get(self.table_cls, entity.id)
        if row is None:
            row = self.table_cls()
            session.add(row)
        self._apply(row, entity)

    def _get(self, entity_id: str, *, tenant_id: Optional[str] = None, include_deleted: bool = False) -> Optional[T]:
        with session_scope(self._db) as session:
            stmt = select(self.table_cls).where(self.table_cls.id == entity_id)
            stmt = self._scoped(stmt, tenant_id=tenant_id, include_deleted=include_deleted)
            row = session.execute(stmt).scalars().first()
            return self._to_entity(row) if row is not None else None

    def _find(
        self,
        *criteria,
        tenant_id: Optional[str] = None,
        include_deleted: bool = False,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
    ) -> List[T]:
        with session_scope(self._db) as session:
            stmt = self._scoped(select(self.table_cls), tenant_id=tenant_id, include_deleted=include_deleted)
            if criteria:
                stmt = stmt.where(*criteria)
            if order_by:
                stmt = stmt.order_by(*order_by)
            if limit is not None:
                stmt = stmt.limit(limit)
            return [self._to_entity(row) for row in session.execute(stmt).scalars().all()]

    def _first(self, *criteria, **kwargs) -> Optional[T]:
        found = self._find(*criteria, limit=1, **kwargs)
        return found[0] if found else None

    def _count(self, *criteria, tenant_id: Optional[str] = None, include_deleted: bool = False) -> int:
        with session_scope(self._db) as session:
            stmt = self._scoped(
                select(func.count()).select_from(self.table_cls),
                tenant_id=tenant_id,
                include_deleted=include_deleted,
            )
            if criteria:
                stmt = stmt.where(*criteria)
            return int(session.execute(stmt).scalar_one())

    def _page(
        self,
        criteria: Iterable[Any],
        params: PageParams,
        *,
        tenant_id: Optional[str] = None,
        order_by: Sequence[Any] = (),
        include_deleted: bool = False,
    ) -> Tuple[List[T], int]:
        criteria = list(criteria)
        total = self._count(*criteria, tenant_id=tenant_id, include_deleted=include_deleted)
        with session_scope(self._db) as session:
            stmt = self._scoped(select(self.table_cls), tenant_id=tenant_id, include_deleted=include_deleted)
            if criteria:
                stmt = stmt.where(*criteria)
            if order_by:
                stmt = stmt.order_by(*order_by)
            stmt = stmt.offset(params.offset).limit(params.limit)
            items = [self._to_entity(row) for row in session.execute(stmt).scalars().all()]
        return items, total

    def _delete(self, entity_id: str) -> bool:
        with session_scope(self._db) as session:
            row = session.get(self.table_cls, entity_id)
            if row is None:
                return False
            session.delete(row)
            return True
