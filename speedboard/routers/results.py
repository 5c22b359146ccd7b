"""History endpoints: stored lighthouse scores as lists, groups, charts, and CSV."""

import os

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from speedboard.lib.database import is_database_configured
from speedboard.lib.structured_logger import StructuredLogger
from speedboard.models.pagespeed import MetricRecord
from speedboard.routers.pagespeed import get_results_service
from speedboard.services.history import (
  SortDirection,
  SortField,
  StrategyFilter,
  chart_series,
  export_csv,
  export_filename,
  filter_records,
  group_by_website,
  results_view,
)
from speedboard.services.results_service import ResultsService

logger = StructuredLogger(__name__)

router = APIRouter()

MAX_RESULTS_LIMIT = 1000


def default_results_limit() -> int:
  """RESULTS_DEFAULT_LIMIT clamped to 1..MAX_RESULTS_LIMIT (query defaults are not validated)."""
  configured = int(os.getenv('RESULTS_DEFAULT_LIMIT', '100'))
  return max(1, min(configured, MAX_RESULTS_LIMIT))


DEFAULT_RESULTS_LIMIT = default_results_limit()


class ResultsUnavailableError(Exception):
  """The results store cannot serve a read; rendered as {"error": message}."""

  def __init__(self, message: str, status_code: int):
    super().__init__(message)
    self.message = message
    self.status_code = status_code


async def load_records(results_service: ResultsService, limit: int) -> list[MetricRecord]:
  """Bulk-read the most recent records.

  Raises:
      ResultsUnavailableError: 503 if the store is not configured, 500 if the read fails
  """
  if not is_database_configured():
    raise ResultsUnavailableError('Results store is not configured', 503)

  try:
    rows = await run_in_threadpool(results_service.list_results, limit)
  except Exception as e:
    logger.error(f'Failed to fetch results: {e}', exc_info=True, limit=limit)
    raise ResultsUnavailableError('Failed to fetch results', 500)

  return [MetricRecord.model_validate(row) for row in rows]


@router.get('/results')
async def get_results(
  limit: int = Query(DEFAULT_RESULTS_LIMIT, ge=1, le=MAX_RESULTS_LIMIT),
  domain: str | None = Query(None, description='Exact hostname filter'),
  strategy: StrategyFilter = Query('all'),
  sort: SortField = Query('created_at'),
  direction: SortDirection = Query('desc'),
  results_service: ResultsService = Depends(get_results_service),
):
  """List stored results, newest first unless another sort is requested.

  Returns:
      {"results": MetricRecord[]}
  """
  records = await load_records(results_service, limit)
  view = results_view(records, domain, strategy, sort, direction)
  logger.info('Results listed', limit=limit, result_count=len(view))
  return {'results': [record.model_dump(mode='json') for record in view]}


@router.get('/results/export')
async def export_results(
  limit: int = Query(DEFAULT_RESULTS_LIMIT, ge=1, le=MAX_RESULTS_LIMIT),
  domain: str | None = Query(None, description='Exact hostname filter'),
  strategy: StrategyFilter = Query('all'),
  sort: SortField = Query('created_at'),
  direction: SortDirection = Query('desc'),
  results_service: ResultsService = Depends(get_results_service),
):
  """Download the filtered, sorted view as CSV."""
  records = await load_records(results_service, limit)
  view = results_view(records, domain, strategy, sort, direction)
  filename = export_filename(domain, strategy)
  return Response(
    content=export_csv(view),
    media_type='text/csv; charset=utf-8',
    headers={'Content-Disposition': f'attachment; filename="{filename}"'},
  )


@router.get('/results/chart')
async def get_chart(
  limit: int = Query(DEFAULT_RESULTS_LIMIT, ge=1, le=MAX_RESULTS_LIMIT),
  domain: str | None = Query(None, description='Exact hostname filter'),
  strategy: StrategyFilter = Query('all'),
  results_service: ResultsService = Depends(get_results_service),
):
  """Chart-ready time series, oldest first.

  Returns:
      {"points": ChartDataPoint[]}
  """
  records = await load_records(results_service, limit)
  points = chart_series(filter_records(records, domain, strategy))
  return {'points': [point.model_dump(mode='json') for point in points]}


@router.get('/websites')
async def get_websites(
  limit: int = Query(DEFAULT_RESULTS_LIMIT, ge=1, le=MAX_RESULTS_LIMIT),
  results_service: ResultsService = Depends(get_results_service),
):
  """Tested websites grouped by hostname, most recently tested first.

  Returns:
      {"websites": WebsiteGroup[]}
  """
  records = await load_records(results_service, limit)
  groups = group_by_website(records)
  return {'websites': [group.model_dump(mode='json') for group in groups]}
