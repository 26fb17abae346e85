"""SQLAlchemy engine construction for the relational credential store."""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def create_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    SQLite connections are shared across the request threadpool, so
    ``check_same_thread`` is disabled. An in-memory SQLite database keeps a
    single connection (StaticPool) or every checkout would see an empty database.
    """
    url = make_url(database_url)
    kwargs: dict = {"echo": echo}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)
    logger.info("[SQL] Engine created", extra={"backend": url.get_backend_name(), "database": url.database})
    return engine
