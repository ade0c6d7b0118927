"""
Database engine + session factory.

configure_database() binds the session factory once per app from Settings —
SQLite for local dev and tests, Supabase Postgres in production.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


SessionLocal = sessionmaker(expire_on_commit=False)
engine = None


def normalize_url(database_url: str) -> str:
    # Supabase/Railway hand out postgres:// but SQLAlchemy 2.x requires postgresql://
    return database_url.replace('postgres://', 'postgresql://', 1)


def configure_database(database_url: str):
    """Create the engine for database_url and bind SessionLocal to it."""
    global engine

    url = normalize_url(database_url)

    # SQLite needs different engine kwargs than Postgres; in-memory DBs share one connection
    if url in ('sqlite://', 'sqlite:///:memory:'):
        new_engine = create_engine(
            url, connect_args={'check_same_thread': False}, poolclass=StaticPool,
        )
    elif url.startswith('sqlite'):
        new_engine = create_engine(url, connect_args={'check_same_thread': False})
    else:
        new_engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)

    if engine is not None:
        engine.dispose()
    engine = new_engine
    SessionLocal.configure(bind=engine)
    return engine


def get_session():
    """Return a new DB session."""
    return SessionLocal()
