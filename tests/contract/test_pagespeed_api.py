"""Contract tests for POST /api/pagespeed."""

from unittest.mock import MagicMock

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from speedboard.routers.pagespeed import get_pagespeed_client, get_results_service
from speedboard.services.pagespeed_client import PageSpeedClient, PageSpeedFetchError
from speedboard.services.results_service import PersistResult, ResultsService

pytestmark = pytest.mark.contract


@pytest.fixture
def analyze(app, client, fake_pagespeed_client, mock_results_service):
    """Wire the fakes into the app and return a POST helper."""
    app.dependency_overrides[get_pagespeed_client] = lambda: fake_pagespeed_client
    app.dependency_overrides[get_results_service] = lambda: mock_results_service

    def _post(body):
        return client.post('/api/pagespeed', json=body)

    return _post


class TestAnalyzeSuccess:
    """Successful analyses."""

    def test_returns_display_values_and_database_id(self, analyze, fake_pagespeed_client):
        response = analyze({'url': 'https://example.com/', 'strategy': 'desktop'})

        assert response.status_code == 200
        data = response.json()
        assert data['id'] == 'https://example.com/'
        assert data['cruxMetrics'] == {
            'First Contentful Paint': 'FAST',
            'Interaction to Next Paint': 'AVERAGE',
        }
        assert data['lighthouseMetrics']['First Contentful Paint'] == '2.3 s'
        assert data['databaseId'] == 42
        assert fake_pagespeed_client.calls == [('https://example.com/', 'desktop')]

    def test_strategy_defaults_to_desktop(self, analyze, fake_pagespeed_client):
        analyze({'url': 'https://example.com/'})

        assert fake_pagespeed_client.calls == [('https://example.com/', 'desktop')]

    def test_normalized_record_is_persisted(self, analyze, mock_results_service):
        analyze({'url': 'https://example.com/', 'strategy': 'mobile'})

        record = mock_results_service.save_result.call_args[0][0]
        assert record.url == 'https://example.com/'
        assert record.device_strategy == 'mobile'
        assert record.first_content_paint == pytest.approx(2.3)
        assert record.total_blocking_time == pytest.approx(150.0)

    def test_missing_total_blocking_time_persists_zero(self, analyze, sample_document, mock_results_service):
        sample_document['lighthouseResult']['audits']['total-blocking-time'] = {}

        response = analyze({'url': 'https://example.com/'})

        assert response.json()['lighthouseMetrics']['Total Blocking Time'] == 'N/A'
        record = mock_results_service.save_result.call_args[0][0]
        assert record.total_blocking_time == 0.0

    def test_sparse_document_still_succeeds(self, app, analyze, make_pagespeed_client):
        app.dependency_overrides[get_pagespeed_client] = lambda: make_pagespeed_client(document={})

        response = analyze({'url': 'https://example.com/'})

        assert response.status_code == 200
        assert set(response.json()['lighthouseMetrics'].values()) == {'N/A'}


class TestBestEffortPersistence:
    """Store failures never fail the analysis."""

    def test_store_error_omits_database_id(self, app, analyze, mock_results_service):
        mock_results_service.save_result.return_value = PersistResult(error=RuntimeError('connection refused'))

        response = analyze({'url': 'https://example.com/'})

        assert response.status_code == 200
        data = response.json()
        assert 'databaseId' not in data
        assert data['lighthouseMetrics']['First Contentful Paint'] == '2.3 s'

    def test_real_service_with_failing_connection(self, app, analyze):
        session = MagicMock()
        session.commit.side_effect = OperationalError('INSERT', {}, Exception('connection refused'))
        app.dependency_overrides[get_results_service] = lambda: ResultsService(db_session=session)

        response = analyze({'url': 'https://example.com/'})

        assert response.status_code == 200
        assert 'databaseId' not in response.json()

    def test_dropped_connection_during_rollback(self, app, analyze):
        session = MagicMock()
        session.commit.side_effect = OperationalError('INSERT', {}, Exception('server closed the connection'))
        session.rollback.side_effect = OperationalError('ROLLBACK', {}, Exception('server closed the connection'))
        app.dependency_overrides[get_results_service] = lambda: ResultsService(db_session=session)

        response = analyze({'url': 'https://example.com/'})

        assert response.status_code == 200
        assert 'databaseId' not in response.json()

    def test_unconfigured_store_omits_database_id(self, app, analyze):
        app.dependency_overrides[get_results_service] = lambda: ResultsService()

        response = analyze({'url': 'https://example.com/'})

        assert response.status_code == 200
        assert 'databaseId' not in response.json()


class TestAnalyzeErrors:
    """Failure responses."""

    def test_upstream_500_returns_generic_error(self, app, analyze):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={'error': 'boom'}))
        app.dependency_overrides[get_pagespeed_client] = lambda: PageSpeedClient(transport=transport)

        response = analyze({'url': 'https://example.com/'})

        assert response.status_code == 500
        assert response.json() == {'error': 'Failed to fetch PageSpeed data'}

    def test_upstream_failure_skips_persistence(self, app, analyze, make_pagespeed_client, mock_results_service):
        app.dependency_overrides[get_pagespeed_client] = lambda: make_pagespeed_client(
            error=PageSpeedFetchError('HTTP error! status: 503', status_code=503)
        )

        response = analyze({'url': 'https://example.com/'})

        assert response.status_code == 500
        mock_results_service.save_result.assert_not_called()

    def test_unexpected_error_returns_generic_error(self, app, analyze, make_pagespeed_client):
        app.dependency_overrides[get_pagespeed_client] = lambda: make_pagespeed_client(error=KeyError('boom'))

        response = analyze({'url': 'https://example.com/'})

        assert response.status_code == 500
        assert response.json() == {'error': 'Failed to fetch PageSpeed data'}

    @pytest.mark.parametrize('body', [{}, {'url': ''}, {'url': '   '}, {'strategy': 'mobile'}])
    def test_missing_url_returns_400(self, analyze, fake_pagespeed_client, body):
        response = analyze(body)

        assert response.status_code == 400
        assert response.json() == {'error': 'URL is required'}
        assert fake_pagespeed_client.calls == []

    def test_invalid_strategy_returns_400(self, analyze, fake_pagespeed_client):
        response = analyze({'url': 'https://example.com/', 'strategy': 'tablet'})

        assert response.status_code == 400
        assert response.json()['error'] == 'Invalid request'
        assert fake_pagespeed_client.calls == []
