from os import environ
from typing import Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import NullPool


def create_engine_from_env(database_url: Optional[str] = None) -> Engine:
    """
    Create the engine for the calendar database.

    DATABASE_URL is read from the environment unless a URL is given.
    SQL_ECHO=true logs every statement.
    """
    db_url = database_url or environ["DATABASE_URL"]
    echo = environ.get("SQL_ECHO", "false").lower() == "true"

    # PgBouncer pools connections itself
    if "-pooler" in db_url or "pgbouncer=true" in db_url:
        return create_engine(db_url, echo=echo, poolclass=NullPool)
    if db_url.startswith("sqlite"):
        return create_engine(db_url, echo=echo)
    return create_engine(db_url, echo=echo, pool_size=20, max_overflow=40, pool_pre_ping=True)
