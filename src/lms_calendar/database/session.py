from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker


class SessionManager:
    def __init__(
        self,
        base_engine: Engine,
    ):
        self.base_engine = base_engine
        self._sessionmaker = sessionmaker(bind=base_engine, expire_on_commit=False)

    def get_session(self) -> Session:
        """
        Returns a raw session for the calendar database.
        Caller MUST manually commit/rollback and close the session.
        Use with_session() instead for automatic cleanup.
        """
        return self._sessionmaker()

    @contextmanager
    def with_session(self) -> Iterator[Session]:
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
