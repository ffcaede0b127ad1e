"""Scatter-gather over the configured credit bureaus."""

import asyncio
import logging
from typing import List, Optional, Sequence

from app.config import settings
from app.core.enums import BureauName, BureauStatus
from app.models.schemas.decision import BureauResult, CreditCheckRequest
from app.services.bureau.client import BureauClient

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Service unavailable"


def default_clients() -> List[BureauClient]:
    """Clients for the bureaus configured in settings."""
    return [
        BureauClient(BureauName.EXPERIAN.value, settings.EXPERIAN_URL),
        BureauClient(BureauName.EQUIFAX.value, settings.EQUIFAX_URL),
    ]


class BureauAggregator:
    """
    Fans a credit check out to every bureau and joins all outcomes.

    Each call runs as its own task and absorbs its own failure, so one
    bureau going down never affects the others. No retries.
    """

    def __init__(self, clients: Optional[Sequence[BureauClient]] = None):
        self.clients = list(clients) if clients is not None else default_clients()

    async def gather(self, request: CreditCheckRequest) -> List[BureauResult]:
        """
        Query all bureaus concurrently and wait for every one to settle.

        Returns:
            One BureauResult per client, in client order
        """
        results = await asyncio.gather(*(self._call(client, request) for client in self.clients))
        succeeded = sum(1 for r in results if r.status == BureauStatus.SUCCESS)
        logger.info(f"Bureau responses collected: {succeeded}/{len(results)} successful")
        return list(results)

    async def _call(self, client: BureauClient, request: CreditCheckRequest) -> BureauResult:
        try:
            return await client.check(request)
        except Exception as e:
            logger.error(f"Error calling {client.name} service: {e}")
            return BureauResult(
                bureau_name=client.name,
                credit_score=None,
                status=BureauStatus.FAILED,
                error_message=UNAVAILABLE_MESSAGE,
            )
