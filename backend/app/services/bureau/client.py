"""Credit bureau HTTP client."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from app.config import settings
from app.core.exceptions import BureauUnavailableError
from app.core.logging import mask_ssn
from app.models.schemas.decision import BureauResult, CreditCheckRequest

logger = logging.getLogger(__name__)


class BureauClient:
    """Client for one external bureau connector."""

    def __init__(self, name: str, base_url: str, timeout: Optional[float] = None):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    async def check(self, request: CreditCheckRequest) -> BureauResult:
        """
        Request a credit check from the bureau.

        Raises:
            BureauUnavailableError: On timeout, HTTP errors, or invalid response
        """
        logger.info(f"Calling {self.name} for SSN: {mask_ssn(request.ssn)}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/check",
                    json=request.model_dump(mode="json"),
                )
                response.raise_for_status()
                data = response.json()
                data.setdefault("bureau_name", self.name)
                return BureauResult.model_validate(data)

            except httpx.TimeoutException as e:
                raise BureauUnavailableError(f"{self.name} timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise BureauUnavailableError(f"{self.name} error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise BureauUnavailableError(f"{self.name} unreachable: {e}") from e
            except (ValueError, TypeError, AttributeError, ValidationError) as e:
                raise BureauUnavailableError(f"Invalid response from {self.name}: {e}") from e
