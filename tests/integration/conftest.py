"""Integration test fixtures backed by an in-memory SQLite database."""

import pytest
from sqlalchemy.orm import sessionmaker

from speedboard.lib.database import Base, create_database_engine, get_engine, reset_engine
from speedboard.models.lighthouse_score import LighthouseScore  # noqa: F401  registers the table


@pytest.fixture
def test_db_engine():
  """In-memory SQLite engine with the schema created from the models.

  create_database_engine uses a StaticPool for in-memory URLs, so every
  session shares the same database.
  """
  engine = create_database_engine('sqlite://')
  Base.metadata.create_all(engine)

  yield engine

  engine.dispose()


@pytest.fixture
def test_db_session(test_db_engine):
  """Create a database session for each test function."""
  SessionFactory = sessionmaker(bind=test_db_engine)
  session = SessionFactory()

  yield session

  session.rollback()
  session.close()


@pytest.fixture
def configured_store(monkeypatch):
  """Point the application's global engine at a fresh in-memory database."""
  monkeypatch.setenv('DATABASE_URL', 'sqlite://')
  reset_engine()
  engine = get_engine()
  Base.metadata.create_all(engine)

  yield engine

  reset_engine()
