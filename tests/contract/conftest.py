"""Shared test fixtures for contract tests.

Note: Common fixtures are defined in tests/conftest.py and are
automatically available to all contract tests:
- app, client
- fake_pagespeed_client, mock_results_service, sample_document
- make_record
"""

import pytest


@pytest.fixture
def configured_env(monkeypatch):
    """Mark the results store as configured without opening a connection."""
    monkeypatch.setenv('DATABASE_URL', 'sqlite://')
