"""Database Connection Module

Provides the SQLAlchemy engine, session factory, and declarative base for the
lighthouse results store. Any SQLAlchemy URL works; production uses a hosted
Postgres reached with psycopg.
"""

import os

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def get_database_url() -> str:
    """Build the database URL from the environment.

    Environment variables:
        DATABASE_URL: Full SQLAlchemy URL (takes precedence)
        PGHOST: Postgres host
        PGPORT: Postgres port (default: 5432)
        PGDATABASE: Database name
        PGUSER: Database user
        PGPASSWORD: Database password (optional)

    Returns:
        SQLAlchemy connection URL

    Raises:
        ValueError: If neither DATABASE_URL nor PGHOST/PGDATABASE/PGUSER are set
    """
    database_url = os.getenv('DATABASE_URL')
    if database_url:
        return database_url

    postgres_host = os.getenv('PGHOST')
    postgres_port = os.getenv('PGPORT', '5432')
    postgres_database = os.getenv('PGDATABASE')
    postgres_user = os.getenv('PGUSER')
    postgres_password = os.getenv('PGPASSWORD', '')

    if not all([postgres_host, postgres_database, postgres_user]):
        missing = []
        if not postgres_host:
            missing.append('PGHOST')
        if not postgres_database:
            missing.append('PGDATABASE')
        if not postgres_user:
            missing.append('PGUSER')
        raise ValueError(f"Missing required configuration: DATABASE_URL or {', '.join(missing)}")

    # Hosted Postgres requires SSL
    return (
        f'postgresql+psycopg://{postgres_user}:{postgres_password}@'
        f'{postgres_host}:{postgres_port}/{postgres_database}?sslmode=require'
    )


def is_database_configured() -> bool:
    """Check if the results store is configured.

    Returns:
        True if DATABASE_URL or the PG* connection variables are set
    """
    if os.getenv('DATABASE_URL'):
        return True
    return bool(os.getenv('PGHOST') and os.getenv('PGDATABASE') and os.getenv('PGUSER'))


def create_database_engine(
    connection_string: str | None = None,
    pool_size: int = 5,
    max_overflow: int = 5,
    pool_pre_ping: bool = True,
) -> Engine:
    """Create SQLAlchemy engine for the results store.

    Args:
        connection_string: Database URL (read from the environment if None)
        pool_size: Number of connections to maintain in pool
        max_overflow: Maximum overflow connections beyond pool_size
        pool_pre_ping: Test connections before use to detect stale connections

    Returns:
        Configured SQLAlchemy engine
    """
    if connection_string is None:
        connection_string = get_database_url()

    url = make_url(connection_string)

    # SQLite (local development and tests) does not take pool sizing arguments
    if url.get_backend_name() == 'sqlite':
        if url.database in (None, '', ':memory:'):
            # One shared connection, otherwise every session sees an empty database
            return create_engine(
                connection_string,
                connect_args={'check_same_thread': False},
                poolclass=StaticPool,
            )
        return create_engine(connection_string, connect_args={'check_same_thread': False})

    return create_engine(
        connection_string,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=False
    )


# Global engine instance (lazy-initialized)
_engine: Engine | None = None


def get_engine() -> Engine:
    """Get or create global engine instance.

    Raises:
        ValueError: If the database is not configured
    """
    global _engine
    if _engine is None:
        if not is_database_configured():
            raise ValueError(
                'Results store is not configured. Set DATABASE_URL, '
                'or PGHOST, PGDATABASE and PGUSER.'
            )
        _engine = create_database_engine()
    return _engine


def reset_engine() -> None:
    """Dispose and forget the global engine (configuration changed, or tests)."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None


def get_session_factory() -> sessionmaker:
    """Get session factory for ORM operations.

    Usage:
        SessionFactory = get_session_factory()
        with SessionFactory() as session:
            scores = session.query(LighthouseScore).limit(100).all()
    """
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())

