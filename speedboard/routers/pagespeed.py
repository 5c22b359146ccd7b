"""Analysis endpoint: run PageSpeed Insights for a URL and store the scores."""

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from speedboard.lib.metrics import record_pagespeed_request
from speedboard.lib.structured_logger import StructuredLogger
from speedboard.models.pagespeed import AnalyzeRequest
from speedboard.services.extraction import extract_metrics
from speedboard.services.normalization import build_record
from speedboard.services.pagespeed_client import PageSpeedClient, PageSpeedFetchError
from speedboard.services.results_service import ResultsService

logger = StructuredLogger(__name__)

router = APIRouter()

FETCH_FAILED_MESSAGE = 'Failed to fetch PageSpeed data'


def get_pagespeed_client() -> PageSpeedClient:
  return PageSpeedClient()


def get_results_service() -> ResultsService:
  return ResultsService()


@router.post('/pagespeed')
async def analyze_url(
  request: AnalyzeRequest,
  client: PageSpeedClient = Depends(get_pagespeed_client),
  results_service: ResultsService = Depends(get_results_service),
):
  """Analyze a URL with PageSpeed Insights.

  Extracts the CrUX categories and Lighthouse display values, stores the
  parsed numbers, and returns the display values. Storage is best-effort:
  when the insert fails the response is still 200, just without
  `databaseId`.

  Returns:
      {id, cruxMetrics, lighthouseMetrics, databaseId?}

  Raises:
      400: URL missing
      500: Upstream request failed ({"error": "Failed to fetch PageSpeed data"})
  """
  if not request.url or not request.url.strip():
    return JSONResponse(status_code=400, content={'error': 'URL is required'})

  url = request.url.strip()
  strategy = request.strategy.value

  try:
    document = await client.run_pagespeed(url, strategy)
    metrics = extract_metrics(document)
    record = build_record(metrics, url, strategy)
  except PageSpeedFetchError as e:
    logger.error(f'PageSpeed Insights API error: {e}', url=url, strategy=strategy)
    record_pagespeed_request(strategy, 'failure')
    return JSONResponse(status_code=500, content={'error': FETCH_FAILED_MESSAGE})
  except Exception as e:
    logger.error(f'Unexpected error during analysis: {e}', exc_info=True, url=url, strategy=strategy)
    record_pagespeed_request(strategy, 'failure')
    return JSONResponse(status_code=500, content={'error': FETCH_FAILED_MESSAGE})

  payload = metrics.to_dict()

  persisted = await run_in_threadpool(results_service.save_result, record)
  # persisted.error is dropped here on purpose: it was logged by the service
  if persisted.ok:
    payload['databaseId'] = persisted.record_id

  record_pagespeed_request(strategy, 'success')
  logger.info('PageSpeed analysis completed', url=url, strategy=strategy, database_id=persisted.record_id)
  return payload
