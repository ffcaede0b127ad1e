"""LLM provider status, connection test, and model listing endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.config import settings
from app.core.enums import LLMProviderName
from app.core.exceptions import DecisionEvaluationError
from app.deps import get_llm_provider
from app.models.schemas.decision import (
    LLMConnectionTestResponse,
    LLMModelsResponse,
    LLMStatusResponse,
)
from app.services.llm.providers import LLMProvider

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/status",
    response_model=LLMStatusResponse,
    summary="LLM status",
    description="Report the configured LLM provider and whether it is reachable",
)
async def llm_status(
    llm_provider: Annotated[Optional[LLMProvider], Depends(get_llm_provider)],
) -> LLMStatusResponse:
    available = await llm_provider.is_available() if llm_provider is not None else False
    return LLMStatusResponse(
        enabled=settings.LLM_ENABLED,
        provider=settings.LLM_PROVIDER.value,
        model=settings.LLM_MODEL,
        available=available,
        decision_mode=settings.DECISION_MODE.value,
    )


@router.get(
    "/test",
    response_model=LLMConnectionTestResponse,
    summary="Test LLM connection",
    description="Check that the configured LLM provider answers",
)
async def test_llm_connection(
    llm_provider: Annotated[Optional[LLMProvider], Depends(get_llm_provider)],
) -> LLMConnectionTestResponse:
    if not settings.LLM_ENABLED:
        return LLMConnectionTestResponse(success=False, message="LLM is not enabled")

    available = await llm_provider.is_available() if llm_provider is not None else False
    if available:
        message = "LLM connection successful"
    else:
        message = "LLM connection failed. Check configuration and service availability."
    return LLMConnectionTestResponse(
        success=available,
        message=message,
        provider=settings.LLM_PROVIDER.value,
        model=settings.LLM_MODEL,
    )


@router.get(
    "/models",
    response_model=LLMModelsResponse,
    summary="List Ollama models",
    description="List the models installed on the configured Ollama server",
)
async def list_llm_models(
    llm_provider: Annotated[Optional[LLMProvider], Depends(get_llm_provider)],
) -> LLMModelsResponse:
    if settings.LLM_PROVIDER != LLMProviderName.OLLAMA:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Model listing is only available for the Ollama provider",
        )

    if llm_provider is None or not await llm_provider.is_available():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Ollama is not available",
        )

    try:
        models = await llm_provider.list_models()
    except DecisionEvaluationError as e:
        logger.warning(f"Failed to list Ollama models: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return LLMModelsResponse(provider=LLMProviderName.OLLAMA.value, models=models)
