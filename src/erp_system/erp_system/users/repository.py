from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

from ..common.pagination import PageParams
from .model import Session, User


class UserRepository(Protocol):
    def save(self, user: User) -> User:
        raise NotImplementedError

    def get_by_id(self, *, tenant_id: str, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, *, tenant_id: str, username: str, include_deleted: bool = False) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, *, tenant_id: str, email: str, include_deleted: bool = False) -> Optional[User]:
        raise NotImplementedError

    def list_page(self, *, tenant_id: str, params: PageParams, search: Optional[str] = None) -> Tuple[List[User], int]:
        raise NotImplementedError


class SessionRepository(Protocol):
    def save(self, session: Session) -> Session:
        raise NotImplementedError

    def get_by_id(self, *, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def list_active_for_user(self, *, tenant_id: str, user_id: str) -> List[Session]:
        raise NotImplementedError
