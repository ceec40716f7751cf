"""HTTP health check against a running application."""

import logging
import re
import time
from datetime import timedelta
from typing import Optional

import httpx

from .models import HealthCheckOptions, HealthCheckResult

logger = logging.getLogger(__name__)

_STATUS_DOWN = '"status":"down"'
_WHITESPACE = re.compile(r"\s+")


class HealthChecker:
    """GETs ``url + health_endpoint`` and judges the response.

    A ``transport`` may be supplied (``httpx.MockTransport`` in tests);
    otherwise httpx's default transport is used.
    """

    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self._transport = transport

    def check(self, url: str, options: Optional[HealthCheckOptions] = None) -> HealthCheckResult:
        options = options or HealthCheckOptions()
        target = url.rstrip("/") + "/" + options.health_endpoint.lstrip("/")

        start = time.monotonic()
        try:
            with httpx.Client(timeout=options.timeout, transport=self._transport) as client:
                response = client.get(target)
        except httpx.HTTPError as e:
            logger.warning(f"Health check of {target} failed: {e}")
            return HealthCheckResult(
                healthy=False,
                status_code=0,
                response_time=timedelta(),
                body="",
                issues=(f"Health check failed: {e}",),
            )
        elapsed = timedelta(seconds=time.monotonic() - start)

        issues = []
        healthy = response.status_code == options.expected_status_code
        if not healthy:
            issues.append(
                f"Expected status code {options.expected_status_code} but got {response.status_code}"
            )

        body = response.text
        if _STATUS_DOWN in _WHITESPACE.sub("", body.lower()):
            healthy = False
            issues.append("Health check endpoint reports status: down")

        logger.info(f"Health check {target}: status={response.status_code} healthy={healthy}")
        return HealthCheckResult(
            healthy=healthy,
            status_code=response.status_code,
            response_time=elapsed,
            body=body,
            issues=tuple(issues),
        )
