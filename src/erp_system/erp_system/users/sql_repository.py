from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_

from ..common.datetime_utils import utc_now
from ..common.pagination import PageParams
from ..database.sql_repository import SqlRepository
from ..database.tables import SessionRow, UserRow
from .model import Session, User


class SqlUserRepository(SqlRepository[User]):
    entity_cls = User
    table_cls = UserRow

    def save(self, user: User) -> User:
        return self._save(user)

    def get_by_id(self, *, tenant_id: str, user_id: str) -> Optional[User]:
        return self._get(user_id, tenant_id=tenant_id)

    def get_by_username(self, *, tenant_id: str, username: str, include_deleted: bool = False) -> Optional[User]:
        return self._first(
            func.lower(UserRow.username) == username.lower(), tenant_id=tenant_id, include_deleted=include_deleted
        )

    def get_by_email(self, *, tenant_id: str, email: str, include_deleted: bool = False) -> Optional[User]:
        return self._first(
            func.lower(UserRow.email) == email.lower(), tenant_id=tenant_id, include_deleted=include_deleted
        )

    def list_page(self, *, tenant_id: str, params: PageParams, search: Optional[str] = None) -> Tuple[List[User], int]:
        criteria = []
        if search:
            like = f"%{search.lower()}%"
            criteria.append(or_(func.lower(UserRow.username).like(like), func.lower(UserRow.email).like(like)))
        return self._page(criteria, params, tenant_id=tenant_id, order_by=[UserRow.username])


class SqlSessionRepository(SqlRepository[Session]):
    entity_cls = Session
    table_cls = SessionRow

    def save(self, session: Session) -> Session:
        return self._save(session)

    def get_by_id(self, *, session_id: str) -> Optional[Session]:
        return self._get(session_id)

    def list_active_for_user(self, *, tenant_id: str, user_id: str) -> List[Session]:
        return self._find(
            SessionRow.user_id == user_id,
            SessionRow.revoked_at.is_(None),
            SessionRow.expires_at > utc_now(),
            tenant_id=tenant_id,
            order_by=[SessionRow.created_at.desc()],
        )
