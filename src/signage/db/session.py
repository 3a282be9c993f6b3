"""Engine and session management."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the SQLAlchemy engine and hands out sessions.

    Usage:
        database = Database("sqlite:///./signage.db")
        database.create_all()
        with database.session() as session:
            ...
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = make_url(url)
        connect_args = {}

        if self.url.get_backend_name() == "sqlite":
            # Sessions are used from FastAPI's threadpool
            connect_args["check_same_thread"] = False
            if self.url.database and self.url.database != ":memory:":
                Path(self.url.database).parent.mkdir(parents=True, exist_ok=True)

        self.engine: Engine = create_engine(self.url, echo=echo, connect_args=connect_args)
        self._sessionmaker = sessionmaker(bind=self.engine, expire_on_commit=False)

        if self.url.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

    def create_all(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(self.engine)
        logger.info("Database ready at %s", self.url.render_as_string(hide_password=True))

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session that rolls back on error and is always closed.

        Store functions commit their own work.
        """
        session = self._sessionmaker()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
