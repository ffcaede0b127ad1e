"""Decision evaluation and reasoning endpoints."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DecisionEvaluationError, LLMConfigurationError
from app.deps import get_llm_provider, get_session
from app.models.schemas.decision import DecisionReasoning, DecisionRequest, DecisionResult
from app.services.decision_service import DecisionService
from app.services.llm.providers import LLMProvider

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/evaluate",
    response_model=DecisionResult,
    summary="Evaluate loan decision",
    description="Evaluate a loan using bureau results and loan data, returning a decision with reasoning",
)
async def evaluate_decision(
    request: DecisionRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    llm_provider: Annotated[Optional[LLMProvider], Depends(get_llm_provider)],
) -> DecisionResult:
    """
    Evaluate a loan decision.

    The decision mode is configured via DECISION_MODE:
    - rules: rule-based only
    - llm: LLM-based only, falls back to rules when the LLM is disabled
    - hybrid: both must approve

    Evaluating the same request_id again returns the stored decision with
    regenerated reasoning.
    """
    try:
        service = DecisionService(db, llm_provider=llm_provider)
        return await service.evaluate(request)

    except LLMConfigurationError as e:
        logger.error(f"LLM unavailable for request {request.request_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    except DecisionEvaluationError as e:
        logger.error(f"LLM evaluation failed for request {request.request_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )
    except Exception as e:
        logger.error(f"Error evaluating decision: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to evaluate decision",
        )


@router.get(
    "/reasoning/{request_id}",
    response_model=DecisionReasoning,
    summary="Get decision reasoning",
    description="Retrieve reasoning for a stored decision by request ID",
)
async def get_reasoning(
    request_id: str,
    db: Annotated[AsyncSession, Depends(get_session)],
) -> DecisionReasoning:
    """Retrieve reasoning for a previously made decision."""
    service = DecisionService(db)
    reasoning = await service.get_reasoning(request_id)

    if reasoning is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Decision not found for request: {request_id}",
        )

    return reasoning
