"""Unit tests for display-string parsing and record building."""

import pytest

from speedboard.services.extraction import NOT_AVAILABLE, extract_metrics
from speedboard.services.history import format_fixed
from speedboard.services.normalization import build_record, parse_metric_value


class TestParseMetricValue:
    """parse_metric_value is lossy but never fails."""

    @pytest.mark.parametrize('display,expected', [
        ('2.3 s', 2.3),
        ('150 ms', 150.0),
        ('1,230 ms', 1230.0),
        ('0.8 s', 0.8),
        ('.5 s', 0.5),
        ('5.', 5.0),
        ('1.2.3', 1.2),
        ('-5 s', 5.0),
        ('0 ms', 0.0),
    ])
    def test_parses_numeric_prefix(self, display, expected):
        assert parse_metric_value(display) == pytest.approx(expected)

    @pytest.mark.parametrize('display', [NOT_AVAILABLE, '', None, 'abc', '.', '..5', 'n/a'])
    def test_unparseable_is_zero(self, display):
        assert parse_metric_value(display) == 0.0

    def test_overflow_is_zero(self):
        assert parse_metric_value('9' * 400 + ' ms') == 0.0

    @pytest.mark.parametrize('display', ['2.3 s', '-1', '1e9', '∞', '½ s', '12 345.6 ms'])
    def test_result_is_non_negative(self, display):
        assert parse_metric_value(display) >= 0.0


class TestBuildRecord:
    """build_record maps Lighthouse display values onto numeric columns."""

    def test_scenario_first_contentful_paint(self, sample_document):
        record = build_record(extract_metrics(sample_document), 'https://example.com/', 'desktop')

        assert record.first_content_paint == pytest.approx(2.3)
        assert record.speed_index == pytest.approx(3.1)
        assert record.largest_content_paint == pytest.approx(4.0)
        assert record.total_blocking_time == pytest.approx(150.0)
        assert record.time_to_interactive == pytest.approx(5.2)
        assert record.url == 'https://example.com/'
        assert record.device_strategy == 'desktop'

    def test_scenario_missing_total_blocking_time(self, sample_document):
        sample_document['lighthouseResult']['audits']['total-blocking-time']['displayValue'] = 'N/A'

        record = build_record(extract_metrics(sample_document), 'https://example.com/', 'mobile')

        assert record.total_blocking_time == 0.0
        assert record.device_strategy == 'mobile'

    def test_empty_document_gives_zeros(self):
        record = build_record(extract_metrics({}), 'https://example.com/', 'desktop')

        assert record.model_dump(exclude={'url', 'device_strategy'}) == {
            'first_content_paint': 0.0,
            'speed_index': 0.0,
            'largest_content_paint': 0.0,
            'total_blocking_time': 0.0,
            'time_to_interactive': 0.0,
        }

    @pytest.mark.parametrize('display,digits,expected', [
        ('2.345 s', 3, '2.345'),
        ('2.3 s', 3, '2.300'),
        ('1,230 ms', 0, '1230'),
        ('N/A', 3, '0.000'),
    ])
    def test_round_trip_display_precision(self, display, digits, expected):
        assert format_fixed(parse_metric_value(display), digits) == expected
