from __future__ import annotations

from typing import List, Optional, Tuple

from ..common.datetime_utils import utc_now
from ..common.memory import InMemoryRepository
from ..common.pagination import PageParams
from .model import Session, User


class InMemoryUserRepository(InMemoryRepository[User]):
    def save(self, user: User) -> User:
        return self._save(user)

    def get_by_id(self, *, tenant_id: str, user_id: str) -> Optional[User]:
        return self._get(user_id, tenant_id=tenant_id)

    def get_by_username(self, *, tenant_id: str, username: str, include_deleted: bool = False) -> Optional[User]:
        return self._first(
            lambda u: u.username.lower() == username.lower(), tenant_id=tenant_id, include_deleted=include_deleted
        )

    def get_by_email(self, *, tenant_id: str, email: str, include_deleted: bool = False) -> Optional[User]:
        return self._first(
            lambda u: u.email.lower() == email.lower(), tenant_id=tenant_id, include_deleted=include_deleted
        )

    def list_page(self, *, tenant_id: str, params: PageParams, search: Optional[str] = None) -> Tuple[List[User], int]:
        term = (search or "").lower()
        users = self._find(
            lambda u: not term or term in u.username.lower() or term in u.email.lower(),
            tenant_id=tenant_id,
            sort_key=lambda u: u.username.lower(),
        )
        return self._page(users, params)


class InMemorySessionRepository(InMemoryRepository[Session]):
    def save(self, session: Session) -> Session:
        return self._save(session)

    def get_by_id(self, *, session_id: str) -> Optional[Session]:
        return self._get(session_id)

    def list_active_for_user(self, *, tenant_id: str, user_id: str) -> List[Session]:
        now = utc_now()
        return self._find(
            lambda s: s.user_id == user_id and s.is_active(now),
            tenant_id=tenant_id,
            sort_key=lambda s: s.created_at,
            reverse=True,
        )
