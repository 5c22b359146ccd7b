"""Shared test fixtures and utilities for all tests.

Provides the FastAPI app and client, sample PageSpeed documents, record
factories, and fakes for the upstream client and the results store.
"""

import sys
from pathlib import Path

# Ensure the project root is first in sys.path so `speedboard` and
# `scripts` resolve to this checkout
project_root = str(Path(__file__).parent.parent.absolute())
if project_root not in sys.path:
    sys.path.insert(0, project_root)
elif sys.path[0] != project_root:
    sys.path.remove(project_root)
    sys.path.insert(0, project_root)

import copy
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from speedboard.lib.database import reset_engine
from speedboard.lib.distributed_tracing import reset_correlation_id
from speedboard.models.pagespeed import MetricRecord
from speedboard.services.results_service import PersistResult, ResultsService

DATABASE_ENV_VARS = ('DATABASE_URL', 'PGHOST', 'PGPORT', 'PGDATABASE', 'PGUSER', 'PGPASSWORD')


SAMPLE_DOCUMENT = {
    'id': 'https://example.com/',
    'loadingExperience': {
        'metrics': {
            'FIRST_CONTENTFUL_PAINT_MS': {'percentile': 1200, 'category': 'FAST'},
            'INTERACTION_TO_NEXT_PAINT': {'percentile': 250, 'category': 'AVERAGE'},
        }
    },
    'lighthouseResult': {
        'audits': {
            'first-contentful-paint': {'displayValue': '2.3 s', 'numericValue': 2301.5},
            'speed-index': {'displayValue': '3.1 s'},
            'largest-contentful-paint': {'displayValue': '4.0 s'},
            'total-blocking-time': {'displayValue': '150 ms'},
            'interactive': {'displayValue': '5.2 s'},
        }
    },
}


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Start every test without store configuration or API key."""
    for name in DATABASE_ENV_VARS + ('PAGESPEED_API_KEY', 'PAGESPEED_API_ENDPOINT'):
        monkeypatch.delenv(name, raising=False)
    reset_engine()
    reset_correlation_id()
    yield
    reset_engine()


# ============================================================================
# FastAPI Application Fixtures
# ============================================================================

@pytest.fixture
def app():
    """The real application; dependency overrides are cleared after each test."""
    from speedboard.app import app as speedboard_app

    yield speedboard_app
    speedboard_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Fixture that provides a test client for the app."""
    return TestClient(app)


# ============================================================================
# PageSpeed Fixtures
# ============================================================================

@pytest.fixture
def sample_document():
    """A runPagespeed response with every tracked field present."""
    return copy.deepcopy(SAMPLE_DOCUMENT)


class FakePageSpeedClient:
    """Stands in for PageSpeedClient; returns a fixed document or raises."""

    def __init__(self, document=None, error: Exception | None = None):
        self.document = document
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def run_pagespeed(self, url: str, strategy: str = 'desktop'):
        self.calls.append((url, strategy))
        if self.error is not None:
            raise self.error
        return self.document


@pytest.fixture
def fake_pagespeed_client(sample_document):
    return FakePageSpeedClient(document=sample_document)


@pytest.fixture
def make_pagespeed_client():
    """Factory for FakePageSpeedClient with a custom document or error."""
    return FakePageSpeedClient


@pytest.fixture
def mock_results_service():
    """ResultsService double whose inserts succeed with id 42."""
    service = MagicMock(spec=ResultsService)
    service.save_result.return_value = PersistResult(record_id=42)
    service.list_results.return_value = []
    return service


# ============================================================================
# Record Fixtures
# ============================================================================

@pytest.fixture
def make_record():
    """Factory for MetricRecord instances with sensible defaults."""

    def _make_record(
        id: int | None = 1,
        url: str | None = 'https://example.com/',
        device_strategy: str | None = 'desktop',
        created_at: datetime | None = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        **metrics,
    ) -> MetricRecord:
        values = {
            'first_content_paint': 1.0,
            'speed_index': 2.0,
            'largest_content_paint': 3.0,
            'total_blocking_time': 100.0,
            'time_to_interactive': 4.0,
        }
        values.update(metrics)
        return MetricRecord(
            id=id,
            url=url,
            device_strategy=device_strategy,
            created_at=created_at,
            **values,
        )

    return _make_record
