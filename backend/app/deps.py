"""Dependency injection for FastAPI endpoints."""

from functools import lru_cache
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db.session import get_db
from app.services.audit_client import AuditClient
from app.services.bureau.aggregator import BureauAggregator
from app.services.llm.providers import LLMProvider, build_provider

__all__ = [
    "get_db",
    "get_session",
    "get_llm_provider",
    "get_bureau_aggregator",
    "get_audit_client",
]


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session dependency.

    This is an alias for get_db for clarity in endpoint signatures.
    """
    async for session in get_db():
        yield session


@lru_cache
def _provider() -> LLMProvider:
    return build_provider(settings.LLM_PROVIDER)


def get_llm_provider() -> Optional[LLMProvider]:
    """LLM provider from settings, or None when LLM features are off."""
    if not (settings.LLM_ENABLED or settings.rule_inference_enabled):
        return None
    return _provider()


@lru_cache
def get_bureau_aggregator() -> BureauAggregator:
    return BureauAggregator()


@lru_cache
def get_audit_client() -> AuditClient:
    return AuditClient()
