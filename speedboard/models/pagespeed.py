"""PageSpeed Pydantic Models.

Request/response schemas for the analysis endpoint and the record, group and
chart shapes served by the history endpoints.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DeviceStrategy(str, Enum):
    """Device profile the upstream API emulates."""
    DESKTOP = 'desktop'
    MOBILE = 'mobile'


class AnalyzeRequest(BaseModel):
    """Body of POST /api/pagespeed.

    `url` is optional at the schema level so a missing URL is reported as
    a 400 with the endpoint's own error body.
    """

    url: str | None = Field(default=None, description='URL to analyze')
    strategy: DeviceStrategy = Field(default=DeviceStrategy.DESKTOP, description='Device strategy')


class LighthouseScoreCreate(BaseModel):
    """Normalized numeric record ready for insert (no id, no created_at)."""

    url: str | None = None
    device_strategy: str | None = None
    first_content_paint: float = Field(default=0.0, ge=0)
    speed_index: float = Field(default=0.0, ge=0)
    largest_content_paint: float = Field(default=0.0, ge=0)
    total_blocking_time: float = Field(default=0.0, ge=0)
    time_to_interactive: float = Field(default=0.0, ge=0)


class MetricRecord(BaseModel):
    """A persisted lighthouse score as served by GET /api/results.

    Numeric fields stay optional so rows written by older clients (or
    partially filled rows) still load; aggregation treats None as zero.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    created_at: datetime | None = None
    url: str | None = None
    device_strategy: str | None = None
    first_content_paint: float | None = None
    speed_index: float | None = None
    largest_content_paint: float | None = None
    total_blocking_time: float | None = None
    time_to_interactive: float | None = None


class WebsiteGroup(BaseModel):
    """Records for one tested hostname, most recent first."""

    domain: str = Field(..., description='Hostname of the tested URLs')
    display_name: str = Field(..., description='Hostname without a leading www.')
    url: str = Field(..., description="Most recent record's URL")
    count: int = Field(..., ge=0)
    last_tested: datetime | None = Field(default=None, description='Most recent created_at')
    last_tested_label: str | None = Field(default=None, description='Relative time, e.g. "3h ago"')
    results: list[MetricRecord] = Field(default_factory=list)


class ChartDataPoint(BaseModel):
    """One point of the metrics time series."""

    date: str
    timestamp: int = Field(..., description='Epoch milliseconds, 0 when unknown')
    first_content_paint: float
    speed_index: float
    largest_content_paint: float
    total_blocking_time: float
    time_to_interactive: float
    url: str | None = None
    device_strategy: str | None = None
