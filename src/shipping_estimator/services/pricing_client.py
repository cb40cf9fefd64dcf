"""
Pricing Service Client - async HTTP client for the remote pricing service.

The service accepts a package description and answers with a body in the
PricingResult shape. Every way the call can fail is raised as
PricingServiceError so callers handle a single failure kind.
"""
import logging
from typing import Optional

import httpx

from ..engine.models import PackageDescription, PricingResult

logger = logging.getLogger(__name__)

CALCULATE_PATH = "/api/calculate-shipping"


class PricingServiceError(Exception):
    """The remote pricing service could not produce a quote."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PricingServiceClient:
    """
    Client for POST /api/calculate-shipping.

    No retries; the only timeout is the transport timeout.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{CALCULATE_PATH}"

    async def fetch_quote(self, pkg: PackageDescription) -> PricingResult:
        """
        Request a quote for a package.

        Raises:
            PricingServiceError: on non-success status, transport failure,
                or a body that is not a valid pricing result.
        """
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    self.endpoint,
                    json=pkg.to_payload(),
                    headers={"Content-Type": "application/json"},
                )
                resp.raise_for_status()
                body = resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise PricingServiceError(f"HTTP error! status: {status}", status_code=status) from e
        except httpx.HTTPError as e:
            raise PricingServiceError(f"Transport error: {type(e).__name__}: {e}") from e
        except ValueError as e:
            # resp.json() on a non-JSON body
            raise PricingServiceError(f"Invalid JSON in response: {e}") from e

        try:
            result = PricingResult.from_payload(body, source="service")
        except ValueError as e:
            raise PricingServiceError(str(e)) from e

        logger.debug("Pricing service quoted %.2f for %s", result.shipping_cost, pkg.to_payload())
        return result
