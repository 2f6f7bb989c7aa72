"""
SQLAlchemy engine and session helpers for the relational store.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """
    Create an engine for the given database URL.

    SQLite connections are shared across FastAPI's threadpool, so the
    same-thread check is disabled for them.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create tables for all registered models"""
    # Import models to ensure they're registered with Base
    from shorturl_app.models.url import ShortUrlRecord  # noqa: F401

    Base.metadata.create_all(bind=engine)
