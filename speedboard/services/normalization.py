"""Normalization of Lighthouse display strings into numeric records."""

import math
import re

from speedboard.models.pagespeed import LighthouseScoreCreate
from speedboard.services.extraction import NOT_AVAILABLE, PageSpeedMetrics

_NON_NUMERIC = re.compile(r'[^0-9.]')
# Longest leading float, the way parseFloat reads "1.2.3" as 1.2
_LEADING_FLOAT = re.compile(r'\d+\.?\d*|\.\d+')

# Lighthouse display name -> record column
LIGHTHOUSE_COLUMNS = {
    'First Contentful Paint': 'first_content_paint',
    'Speed Index': 'speed_index',
    'Largest Contentful Paint': 'largest_content_paint',
    'Total Blocking Time': 'total_blocking_time',
    'Time To Interactive': 'time_to_interactive',
}


def parse_metric_value(value: str | None) -> float:
    """Parse a display string such as "2.3 s" or "1,230 ms" into a float.

    Units, separators and any other non-numeric characters are dropped. The
    sentinel, empty input, and anything without a numeric prefix give 0.0,
    so the result is always finite and non-negative.
    """
    if not value or value == NOT_AVAILABLE:
        return 0.0

    match = _LEADING_FLOAT.match(_NON_NUMERIC.sub('', value))
    if match is None:
        return 0.0

    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def build_record(metrics: PageSpeedMetrics, url: str, strategy: str) -> LighthouseScoreCreate:
    """Build the insertable record for one analysis.

    Args:
        metrics: Extracted display values
        url: URL as submitted by the user
        strategy: Device strategy the analysis ran with

    Returns:
        LighthouseScoreCreate with every numeric column filled
    """
    values = {
        column: parse_metric_value(metrics.lighthouse_metrics.get(name))
        for name, column in LIGHTHOUSE_COLUMNS.items()
    }
    return LighthouseScoreCreate(url=url, device_strategy=strategy, **values)
