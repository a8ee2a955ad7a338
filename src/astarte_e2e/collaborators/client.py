# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
HTTP client for the Astarte API health endpoints.
"""

import logging
import time
from typing import Dict, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .. import __version__
from .base import HealthCheck

logger = logging.getLogger(__name__)

# Services the device SDK depends on during the scenarios
HEALTH_SERVICES = ("appengine", "pairing", "realmmanagement")


class APIClient(HealthCheck):
    """HTTP client for the Astarte API."""

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        retry: int = 0,
        services: Sequence[str] = HEALTH_SERVICES,
    ):
        """
        Initialize API client.

        Args:
            api_url: Base API url, e.g. https://api.autotest.astarte-platform.org
            timeout: Per-request timeout in seconds
            retry: Transport-level retries for a single request
            services: Service prefixes whose health endpoint must answer 200
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.retry = retry
        self.services = tuple(services)
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create HTTP session with retry logic."""
        session = requests.Session()

        retry = Retry(
            total=self.retry,
            backoff_factor=0.3,
            status_forcelist=[500, 502, 503, 504]
        )

        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            "User-Agent": f"astarte-e2e/{__version__}",
            "Accept": "application/json",
        })

        return session

    def health_url(self, service: str) -> str:
        return f"{self.api_url}/{service}/health"

    def service_health(self, timeout: Optional[float] = None) -> Dict[str, bool]:
        """
        Check every service; unreachable services count as unhealthy.

        Args:
            timeout: Total budget in seconds for all requests; each request gets
                the smaller of the client timeout and what is left of it
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        status = {}
        for service in self.services:
            url = self.health_url(service)
            request_timeout = self.timeout
            if deadline is not None:
                left = deadline - time.monotonic()
                if left <= 0:
                    logger.debug(f"{url} not checked, no time left")
                    status[service] = False
                    continue
                request_timeout = min(self.timeout, left)
            try:
                response = self.session.get(url, timeout=request_timeout)
                status[service] = response.status_code == 200
                if not status[service]:
                    logger.debug(f"{url} answered {response.status_code}")
            except requests.exceptions.RequestException as e:
                logger.debug(f"{url} unreachable: {e}")
                status[service] = False
        return status

    def check_healthy(self, timeout: Optional[float] = None) -> bool:
        """Test if every required service is healthy."""
        return all(self.service_health(timeout).values())

    def close(self) -> None:
        self.session.close()
