"""Credit check orchestration endpoint."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DecisionEvaluationError, LLMConfigurationError
from app.deps import get_audit_client, get_bureau_aggregator, get_llm_provider, get_session
from app.models.schemas.decision import CreditCheckRequest, CreditCheckResponse
from app.services.audit_client import AuditClient
from app.services.bureau.aggregator import BureauAggregator
from app.services.credit_check_service import CreditCheckService
from app.services.llm.providers import LLMProvider

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/check",
    response_model=CreditCheckResponse,
    summary="Run a credit check",
    description="Query all credit bureaus in parallel and return a loan decision",
)
async def credit_check(
    request: CreditCheckRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    aggregator: Annotated[BureauAggregator, Depends(get_bureau_aggregator)],
    audit: Annotated[AuditClient, Depends(get_audit_client)],
    llm_provider: Annotated[Optional[LLMProvider], Depends(get_llm_provider)],
) -> CreditCheckResponse:
    """
    Process a credit check.

    Bureau failures do not fail the request; they show up as FAILED
    bureau responses and are handled by the decision rules.
    """
    try:
        service = CreditCheckService(db, aggregator, audit, llm_provider=llm_provider)
        return await service.process_credit_check(request)

    except LLMConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except DecisionEvaluationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing credit check: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process credit check",
        )
