"""
SQLite database connection and setup
Single-file store holding the leads and page_views tables
"""
import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for ORM models
Base = declarative_base()


def resolve_database_url(value: str) -> str:
    """
    Accept either a SQLAlchemy URL or a filesystem path.
    Usage:
        resolve_database_url("waitlist.db")            -> "sqlite:///<abs>/waitlist.db"
        resolve_database_url("sqlite:////data/w.db")   -> unchanged
    """
    value = (value or "").strip()
    if "://" in value:
        return value
    if value in ("", ":memory:"):
        return "sqlite://"
    return "sqlite:///" + os.path.abspath(os.path.expanduser(value))


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    url = resolve_database_url(database_url)
    kwargs = {"echo": echo}
    if url.startswith("sqlite"):
        # Store calls run on worker threads
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 15}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite") and url not in ("sqlite://", "sqlite:///:memory:"):
        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            try:
                cur.execute("PRAGMA journal_mode=WAL")
            finally:
                cur.close()

    return engine


def make_session_factory(engine: Engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(engine: Engine):
    """
    Initialize database tables
    Call this on application startup
    """
    # Register models on Base.metadata
    from models.lead import Lead  # noqa: F401
    from models.page_view import PageView  # noqa: F401

    Base.metadata.create_all(bind=engine)
