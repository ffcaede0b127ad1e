"""Fire-and-forget client for the audit log service."""

import asyncio
import logging
from typing import Any, Optional, Set

import httpx
from fastapi.encoders import jsonable_encoder

from app.config import settings

logger = logging.getLogger(__name__)


class AuditClient:
    """
    Sends audit events without blocking the caller.

    Each event is posted from a background task; delivery failures are
    logged and never raised.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (settings.AUDIT_URL if base_url is None else base_url).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._pending: Set[asyncio.Task] = set()

    def log(self, request_id: str, service_name: str, action: str, details: Any = None) -> None:
        """Schedule an audit event and return immediately."""
        if not self.base_url:
            logger.debug(f"Audit sink not configured, dropping {action} for {request_id}")
            return

        payload = {
            "request_id": request_id,
            "service_name": service_name,
            "action": action,
            "details": jsonable_encoder(details),
        }
        task = asyncio.create_task(self._send(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, payload: dict) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(f"{self.base_url}/log", json=payload)
                response.raise_for_status()
                logger.debug(f"Audit log created for request: {payload['request_id']}")
            except httpx.HTTPError as e:
                logger.error(f"Error creating audit log: {e}")

    async def drain(self) -> None:
        """Wait for in-flight audit events, e.g. at shutdown."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
