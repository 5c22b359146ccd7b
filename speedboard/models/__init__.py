"""Models package for database entities and Pydantic models."""

from speedboard.models.lighthouse_score import LighthouseScore
from speedboard.models.pagespeed import (
    AnalyzeRequest,
    ChartDataPoint,
    DeviceStrategy,
    LighthouseScoreCreate,
    MetricRecord,
    WebsiteGroup,
)

__all__ = [
    'LighthouseScore',
    'AnalyzeRequest',
    'ChartDataPoint',
    'DeviceStrategy',
    'LighthouseScoreCreate',
    'MetricRecord',
    'WebsiteGroup',
]
