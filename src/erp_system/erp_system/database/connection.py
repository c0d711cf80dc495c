from __future__ import annotations

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Database:
    """Singleton-like engine and session factory.

    Note: Sessions are short-lived, one per repository operation.
    """

    _instance: Optional["Database"] = None

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        if url.startswith("sqlite"):
            # One shared connection so in-memory databases survive across sessions
            self.engine: Engine = create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(url, echo=echo, pool_pre_ping=True, pool_recycle=3600)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @classmethod
    def get_instance(cls, url: str) -> "Database":
        if cls._instance is None or cls._instance.url != url:
            cls._instance = Database(url)
        return cls._instance

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def session(self) -> Session:
        return self._session_factory()

    def dispose(self) -> None:
        self.engine.dispose()
