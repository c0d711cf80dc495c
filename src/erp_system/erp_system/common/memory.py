from __future__ import annotations

import copy
from typing import Callable, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from .pagination import PageParams, paginate

T = TypeVar("T")


class InMemoryRepository(Generic[T]):
    """Dict-backed storage shared by the in-memory repositories.

    Entities are copied on the way in and out so callers must save changes
    explicitly, the same as with the SQL repositories.
    """

    def __init__(self):
        self._items: Dict[str, T] = {}

    @property
    def items(self) -> List[T]:
        return [copy.deepcopy(e) for e in self._items.values()]

    def _save(self, entity: T) -> T:
        self._items[entity.id] = copy.deepcopy(entity)
        return entity

    def _remove(self, entity_id: str) -> bool:
        return self._items.pop(entity_id, None) is not None

    def _get(self, entity_id: str, *, tenant_id: Optional[str] = None, include_deleted: bool = False) -> Optional[T]:
        entity = self._items.get(entity_id)
        if entity is None:
            return None
        if tenant_id is not None and getattr(entity, "tenant_id", None) != tenant_id:
            return None
        if not include_deleted and getattr(entity, "deleted_at", None) is not None:
            return None
        return copy.deepcopy(entity)

    def _find(
        self,
        predicate: Callable[[T], bool] = lambda _: True,
        *,
        tenant_id: Optional[str] = None,
        include_deleted: bool = False,
        sort_key: Optional[Callable[[T], object]] = None,
        reverse: bool = False,
    ) -> List[T]:
        out = []
        for entity in self._items.values():
            if tenant_id is not None and getattr(entity, "tenant_id", None) != tenant_id:
                continue
            if not include_deleted and getattr(entity, "deleted_at", None) is not None:
                continue
            if predicate(entity):
                out.append(copy.deepcopy(entity))
        if sort_key is not None:
            out.sort(key=sort_key, reverse=reverse)
        return out

    def _first(self, predicate: Callable[[T], bool], **kwargs) -> Optional[T]:
        found = self._find(predicate, **kwargs)
        return found[0] if found else None

    @staticmethod
    def _page(items: Iterable[T], params: PageParams) -> Tuple[List[T], int]:
        return paginate(list(items), params)
