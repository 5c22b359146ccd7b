"""Historical aggregation over lighthouse score records.

Pure functions: filtering by domain and device strategy, sorting, grouping
by tested hostname, chart series, and CSV export. Nothing here touches the
store; callers pass in the records they fetched.
"""

import math
import re
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal
from urllib.parse import urlsplit

from speedboard.models.pagespeed import ChartDataPoint, MetricRecord, WebsiteGroup

SortField = Literal[
    'created_at',
    'first_content_paint',
    'speed_index',
    'largest_content_paint',
    'total_blocking_time',
    'time_to_interactive',
]
SortDirection = Literal['asc', 'desc']
StrategyFilter = Literal['all', 'desktop', 'mobile']

NUMERIC_FIELDS = (
    'first_content_paint',
    'speed_index',
    'largest_content_paint',
    'total_blocking_time',
    'time_to_interactive',
)
SORT_FIELDS = ('created_at',) + NUMERIC_FIELDS
SORT_DIRECTIONS = ('asc', 'desc')

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

CSV_HEADERS = (
    'ID',
    'Created At',
    'URL',
    'Device Strategy',
    'First Content Paint (s)',
    'Speed Index (s)',
    'Largest Content Paint (s)',
    'Total Blocking Time (ms)',
    'Time to Interactive (s)',
)

# (good, needs-improvement) upper bounds per Core Web Vitals guidance
METRIC_THRESHOLDS = {
    'first_content_paint': (1.8, 3.0),
    'largest_content_paint': (2.5, 4.0),
    'speed_index': (3.4, 5.8),
    'time_to_interactive': (3.8, 7.3),
    'total_blocking_time': (200.0, 600.0),
}


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC so stored and parsed values compare."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hostname_of(url: str | None) -> str | None:
    """Hostname of an absolute URL, or None when the URL is missing or malformed."""
    if not url:
        return None
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        # Raises for an out-of-range or non-numeric port
        parts.port
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None
    return hostname


def format_domain(domain: str) -> str:
    """Display form of a hostname: a leading "www." is dropped."""
    return re.sub(r'^www\.', '', domain)


def numeric_value(record: MetricRecord, field: str) -> float:
    value = getattr(record, field, None)
    if value is None or math.isnan(value):
        return 0.0
    return float(value)


def sort_value(record: MetricRecord, field: str) -> datetime | float:
    if field == 'created_at':
        return as_utc(record.created_at) or _EPOCH
    return numeric_value(record, field)


def filter_records(
    records: Iterable[MetricRecord],
    domain: str | None = None,
    strategy: str | None = None,
) -> list[MetricRecord]:
    """Keep records whose hostname equals `domain` and whose strategy equals `strategy`.

    Hostnames are compared exactly ("www.a.com" does not match "a.com").
    Records with malformed URLs never match a domain filter. None, or
    "all" for the strategy, disables that filter.
    """
    selected = list(records)
    if domain:
        selected = [r for r in selected if hostname_of(r.url) == domain]
    if strategy and strategy != 'all':
        selected = [r for r in selected if r.device_strategy == strategy]
    return selected


def sort_records(
    records: Iterable[MetricRecord],
    field: str = 'created_at',
    direction: str = 'desc',
) -> list[MetricRecord]:
    """Sort by creation time or one of the numeric measurements.

    Missing timestamps sort as the epoch and missing measurements as zero.

    Raises:
        ValueError: If field or direction is unknown
    """
    if field not in SORT_FIELDS:
        raise ValueError(f'Unknown sort field: {field}')
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f'Unknown sort direction: {direction}')
    return sorted(records, key=lambda r: sort_value(r, field), reverse=direction == 'desc')


def results_view(
    records: Iterable[MetricRecord],
    domain: str | None = None,
    strategy: str | None = None,
    field: str = 'created_at',
    direction: str = 'desc',
) -> list[MetricRecord]:
    """Filtered and sorted list for display or export."""
    return sort_records(filter_records(records, domain, strategy), field, direction)


def group_by_website(records: Iterable[MetricRecord], now: datetime | None = None) -> list[WebsiteGroup]:
    """Group records by hostname, most recently tested website first.

    Records with malformed or missing URLs are left out. `now` anchors the
    relative "last tested" labels.
    """
    by_domain: dict[str, list[MetricRecord]] = {}
    for record in records:
        domain = hostname_of(record.url)
        if domain is None:
            continue
        by_domain.setdefault(domain, []).append(record)

    groups = []
    for domain, members in by_domain.items():
        ordered = sort_records(members, 'created_at', 'desc')
        latest = ordered[0]
        groups.append(
            WebsiteGroup(
                domain=domain,
                display_name=format_domain(domain),
                url=latest.url or domain,
                count=len(ordered),
                last_tested=latest.created_at,
                last_tested_label=relative_time(latest.created_at, now) if latest.created_at else None,
                results=ordered,
            )
        )

    return sorted(groups, key=lambda g: as_utc(g.last_tested) or _EPOCH, reverse=True)


def chart_series(records: Iterable[MetricRecord]) -> list[ChartDataPoint]:
    """Time series for charting, oldest first; missing values plot as zero."""
    points = []
    for record in sort_records(records, 'created_at', 'asc'):
        created_at = as_utc(record.created_at)
        points.append(
            ChartDataPoint(
                date=created_at.date().isoformat() if created_at else 'Unknown',
                timestamp=int(created_at.timestamp() * 1000) if created_at else 0,
                url=record.url,
                device_strategy=record.device_strategy,
                **{field: numeric_value(record, field) for field in NUMERIC_FIELDS},
            )
        )
    return points


def relative_time(timestamp: datetime, now: datetime | None = None) -> str:
    """Short "last tested" label: Just now, 5h ago, 3d ago, or the date."""
    timestamp = as_utc(timestamp)
    now = as_utc(now) or datetime.now(timezone.utc)
    hours = math.floor((now - timestamp).total_seconds() / 3600)
    if hours < 1:
        return 'Just now'
    if hours < 24:
        return f'{hours}h ago'
    days = hours // 24
    if days < 7:
        return f'{days}d ago'
    return timestamp.date().isoformat()


def rate_metric(field: str, value: float) -> str:
    """Core Web Vitals rating: good, needs-improvement, poor (or unknown)."""
    thresholds = METRIC_THRESHOLDS.get(field)
    if thresholds is None:
        return 'unknown'
    good, needs_improvement = thresholds
    if value <= good:
        return 'good'
    if value <= needs_improvement:
        return 'needs-improvement'
    return 'poor'


def format_fixed(value: float | None, digits: int) -> str:
    """Fixed-point string rounding halves up; empty for None."""
    if value is None:
        return ''
    quantum = Decimal(1).scaleb(-digits)
    return format(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP), 'f')


def format_timestamp(value: datetime | None) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    value = as_utc(value)
    if value is None:
        return ''
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _quote(value: object) -> str:
    return '"' + str(value).replace('"', '""') + '"'


def csv_row(record: MetricRecord) -> list[str]:
    return [
        str(record.id) if record.id is not None else '',
        format_timestamp(record.created_at),
        record.url or '',
        record.device_strategy or '',
        format_fixed(record.first_content_paint, 3),
        format_fixed(record.speed_index, 3),
        format_fixed(record.largest_content_paint, 3),
        format_fixed(record.total_blocking_time, 0),
        format_fixed(record.time_to_interactive, 3),
    ]


def export_csv(records: Sequence[MetricRecord]) -> str:
    """Serialize records to CSV: fixed header, every field quoted, rows joined by newlines."""
    rows = [list(CSV_HEADERS)] + [csv_row(record) for record in records]
    return '\n'.join(','.join(_quote(field) for field in row) for row in rows)


def export_filename(domain: str | None = None, strategy: str | None = None, today: date | None = None) -> str:
    """Download name such as lighthouse_results_2024-05-01_www_a_com_mobile.csv."""
    today = today or datetime.now(timezone.utc).date()
    domain_part = f"_{re.sub(r'[^a-zA-Z0-9]', '_', domain)}" if domain else ''
    strategy_part = f'_{strategy}' if strategy and strategy != 'all' else ''
    return f'lighthouse_results_{today.isoformat()}{domain_part}{strategy_part}.csv'
