"""FastAPI application for the PageSpeed Insights dashboard."""

import os
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from speedboard.lib.database import is_database_configured
from speedboard.lib.distributed_tracing import set_correlation_id
from speedboard.lib.metrics import record_request_duration
from speedboard.lib.structured_logger import log_event, log_request
from speedboard.routers import router
from speedboard.routers.results import ResultsUnavailableError

# .env.local overrides .env; real environment variables win over both
load_dotenv('.env.local')
load_dotenv('.env')

DEFAULT_CORS_ORIGINS = [
  'http://localhost:5173',
  'http://127.0.0.1:5173',
  'http://localhost:3000',
  'http://127.0.0.1:3000',
]


def get_cors_origins() -> list[str]:
  """CORS origins from CORS_ORIGINS (comma-separated), or local dev defaults."""
  configured = os.getenv('CORS_ORIGINS')
  if not configured:
    return DEFAULT_CORS_ORIGINS
  return [origin.strip() for origin in configured.split(',') if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
  """Manage application lifespan."""
  log_event(
    'app.startup',
    context={
      'database_configured': is_database_configured(),
      'pagespeed_api_key_configured': bool(os.getenv('PAGESPEED_API_KEY')),
    },
  )
  yield


app = FastAPI(
  title='Speedboard API',
  description='PageSpeed Insights analysis and Lighthouse score history',
  version='0.1.0',
  lifespan=lifespan,
)

app.add_middleware(
  CORSMiddleware,
  allow_origins=get_cors_origins(),
  allow_credentials=True,
  allow_methods=['*'],
  allow_headers=['*'],
)


@app.middleware('http')
async def add_correlation_id(request: Request, call_next):
  """Inject correlation ID into the request and log it with timing.

  - Extracts X-Correlation-ID header or generates new UUID
  - Sets correlation ID in context for logging
  - Adds X-Correlation-ID to response headers
  - Logs the request and records its duration
  """
  correlation_id = request.headers.get('X-Correlation-ID', str(uuid4()))
  set_correlation_id(correlation_id)
  request.state.correlation_id = correlation_id

  start_time = time.time()
  response = await call_next(request)
  duration_seconds = time.time() - start_time

  response.headers['X-Correlation-ID'] = correlation_id

  # Skip health and metrics endpoints to reduce noise
  if request.url.path not in ['/health', '/api/health', '/metrics']:
    record_request_duration(
      endpoint=request.url.path,
      method=request.method,
      status=response.status_code,
      duration_seconds=duration_seconds,
    )
    log_request(
      endpoint=request.url.path,
      method=request.method,
      status_code=response.status_code,
      duration_ms=duration_seconds * 1000,
    )

  return response


@app.get('/health')
async def health_root():
  """Health check endpoint at root level (for load balancers)."""
  return {'status': 'healthy'}


@app.get('/api/health')
async def health_api():
  """Health check endpoint under /api prefix."""
  return {'status': 'healthy'}


@app.get('/metrics')
async def metrics_root():
  """Prometheus metrics endpoint."""
  return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
  """Report malformed bodies and query parameters as 400 with an `error` field."""
  return JSONResponse(
    status_code=400,
    content={'error': 'Invalid request', 'detail': jsonable_encoder(exc.errors())},
  )


@app.exception_handler(ResultsUnavailableError)
async def results_unavailable_handler(request: Request, exc: ResultsUnavailableError):
  return JSONResponse(status_code=exc.status_code, content={'error': exc.message})


app.include_router(router, prefix='/api', tags=['api'])


# This static file mount MUST be the last route registered: it catches
# every unmatched path and serves the built frontend.
if os.path.exists('client/build'):
  app.mount('/', StaticFiles(directory='client/build', html=True), name='static')
