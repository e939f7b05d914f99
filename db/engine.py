"""
SQLAlchemy engine and session factory.

Usage:
    from db.engine import create_db_engine, create_session_factory, init_db

    engine = create_db_engine(config.database_url)
    init_db(engine)
    SessionLocal = create_session_factory(engine)

    with SessionLocal() as db:
        user = db.get(UserRow, user_id)
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for all models
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in {"sqlite://", "sqlite:///:memory:"}:
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before use
        pool_size=10,
        max_overflow=20,
        echo=echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    """Create all tables registered on Base."""
    # Import models so they register on Base.metadata
    import db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
