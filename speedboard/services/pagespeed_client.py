"""PageSpeed Insights Client

Async client for Google's PageSpeed Insights v5 runPagespeed API.
"""

import os
import time
from typing import Any

import httpx

from speedboard.lib.metrics import record_upstream_api_call
from speedboard.lib.structured_logger import StructuredLogger

logger = StructuredLogger(__name__)

DEFAULT_PAGESPEED_ENDPOINT = 'https://www.googleapis.com/pagespeedonline/v5/runPagespeed'


class PageSpeedFetchError(Exception):
    """The upstream API could not produce a usable response.

    Raised for transport errors, non-success statuses, and bodies that are
    not JSON. `status_code` is set when the upstream answered.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PageSpeedClient:
    """Client for the runPagespeed endpoint.

    One GET per analysis, no retries. The API key is optional; without it
    Google applies anonymous quota.
    """

    def __init__(
        self,
        api_key: str | None = None,
        endpoint: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize PageSpeed client.

        Args:
            api_key: API key (defaults to PAGESPEED_API_KEY)
            endpoint: API URL (defaults to PAGESPEED_API_ENDPOINT or the public v5 URL)
            timeout_seconds: Request timeout (defaults to PAGESPEED_TIMEOUT or 60)
            transport: Optional httpx transport, used by tests
        """
        self.api_key = api_key if api_key is not None else os.getenv('PAGESPEED_API_KEY')
        self.endpoint = endpoint or os.getenv('PAGESPEED_API_ENDPOINT', DEFAULT_PAGESPEED_ENDPOINT)
        self.timeout_seconds = timeout_seconds or float(os.getenv('PAGESPEED_TIMEOUT', '60'))
        self.transport = transport

    def build_params(self, url: str, strategy: str) -> dict[str, str]:
        """Query parameters for one analysis (strategy is upper-cased for the API)."""
        params = {'url': url, 'strategy': strategy.upper()}
        if self.api_key:
            params['key'] = self.api_key
        return params

    async def run_pagespeed(self, url: str, strategy: str = 'desktop') -> Any:
        """Run an analysis and return the parsed JSON document.

        Args:
            url: Page to analyze
            strategy: 'desktop' or 'mobile'

        Returns:
            Parsed response body (shape not validated)

        Raises:
            PageSpeedFetchError: On transport error, non-2xx status, or invalid JSON
        """
        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.get(self.endpoint, params=self.build_params(url, strategy))
        except httpx.HTTPError as e:
            logger.error(f'PageSpeed request failed: {e}', url=url, strategy=strategy)
            raise PageSpeedFetchError(f'PageSpeed request failed: {e}') from e
        finally:
            record_upstream_api_call('pagespeed', 'run_pagespeed', time.time() - start_time)

        if not response.is_success:
            logger.warning(
                f'PageSpeed API returned HTTP {response.status_code}',
                url=url,
                strategy=strategy,
                upstream_status=response.status_code,
            )
            raise PageSpeedFetchError(
                f'HTTP error! status: {response.status_code}', status_code=response.status_code
            )

        try:
            document = response.json()
        except ValueError as e:
            raise PageSpeedFetchError(
                'PageSpeed API returned an invalid JSON body', status_code=response.status_code
            ) from e

        logger.info(
            'PageSpeed analysis fetched',
            url=url,
            strategy=strategy,
            duration_ms=(time.time() - start_time) * 1000,
        )
        return document
