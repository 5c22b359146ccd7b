"""Metric extraction from PageSpeed Insights responses.

Projects the seven tracked fields out of the raw API document. The document
shape is not trusted: every missing or unexpected segment falls back to the
"N/A" sentinel instead of raising.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

NOT_AVAILABLE = 'N/A'

# Display name -> path into the document
CRUX_METRIC_PATHS: dict[str, tuple[str, ...]] = {
    'First Contentful Paint': ('loadingExperience', 'metrics', 'FIRST_CONTENTFUL_PAINT_MS', 'category'),
    'Interaction to Next Paint': ('loadingExperience', 'metrics', 'INTERACTION_TO_NEXT_PAINT', 'category'),
}

LIGHTHOUSE_METRIC_PATHS: dict[str, tuple[str, ...]] = {
    'First Contentful Paint': ('lighthouseResult', 'audits', 'first-contentful-paint', 'displayValue'),
    'Speed Index': ('lighthouseResult', 'audits', 'speed-index', 'displayValue'),
    'Largest Contentful Paint': ('lighthouseResult', 'audits', 'largest-contentful-paint', 'displayValue'),
    'Total Blocking Time': ('lighthouseResult', 'audits', 'total-blocking-time', 'displayValue'),
    'Time To Interactive': ('lighthouseResult', 'audits', 'interactive', 'displayValue'),
}


@dataclass(frozen=True)
class PageSpeedMetrics:
    """Display values extracted from one PageSpeed response."""

    id: str | None
    crux_metrics: dict[str, str] = field(default_factory=dict)
    lighthouse_metrics: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the wire field names of the analysis endpoint."""
        return {
            'id': self.id,
            'cruxMetrics': dict(self.crux_metrics),
            'lighthouseMetrics': dict(self.lighthouse_metrics),
        }


def lookup(document: Any, path: tuple[str, ...], default: Any = NOT_AVAILABLE) -> Any:
    """Follow `path` through nested mappings.

    Returns `default` when a segment is missing, an intermediate value is not
    a mapping, or the leaf is empty.
    """
    node = document
    for segment in path:
        if not isinstance(node, Mapping):
            return default
        node = node.get(segment)
        if node is None:
            return default
    return node if node else default


def display_value(document: Any, path: tuple[str, ...]) -> str:
    """Look up a display string; numbers are stringified, anything else is N/A."""
    value = lookup(document, path)
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return NOT_AVAILABLE


def extract_metrics(document: Any) -> PageSpeedMetrics:
    """Extract CrUX categories and Lighthouse display values.

    Args:
        document: Parsed JSON body of a runPagespeed response

    Returns:
        PageSpeedMetrics with every tracked metric present (possibly "N/A")
    """
    analysis_id = lookup(document, ('id',), default=None)
    return PageSpeedMetrics(
        id=str(analysis_id) if analysis_id is not None else None,
        crux_metrics={name: display_value(document, path) for name, path in CRUX_METRIC_PATHS.items()},
        lighthouse_metrics={
            name: display_value(document, path) for name, path in LIGHTHOUSE_METRIC_PATHS.items()
        },
    )
