"""End-to-end credit check: bureaus, decision, audit."""

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import BureauName
from app.core.logging import mask_ssn
from app.models.schemas.decision import (
    CreditCheckRequest,
    CreditCheckResponse,
    DecisionRequest,
)
from app.services.audit_client import AuditClient
from app.services.bureau.aggregator import BureauAggregator
from app.services.decision_service import DecisionService
from app.services.llm.providers import LLMProvider

logger = logging.getLogger(__name__)

SERVICE_NAME = "ORCHESTRATOR"


class CreditCheckService:
    """Orchestrates a credit check from intake to response."""

    def __init__(
        self,
        db: AsyncSession,
        aggregator: BureauAggregator,
        audit: AuditClient,
        llm_provider: Optional[LLMProvider] = None,
    ):
        self.aggregator = aggregator
        self.audit = audit
        self.decisions = DecisionService(db, llm_provider=llm_provider)

    async def process_credit_check(self, request: CreditCheckRequest) -> CreditCheckResponse:
        """
        Run a credit check for an applicant.

        Assigns a request id, queries all bureaus in parallel, evaluates the
        decision and records an audit event.

        Args:
            request: Applicant and loan data

        Returns:
            CreditCheckResponse with bureau results, decision and reasoning
        """
        request_id = str(uuid.uuid4())
        logger.info(f"Processing credit check request: {request_id}")

        bureau_results = await self.aggregator.gather(request)

        decision_request = DecisionRequest(
            request_id=request_id,
            loan_amount=request.loan_amount,
            bureau_responses=bureau_results,
            annual_income=request.annual_income,
            total_debt=request.total_debt,
            monthly_cashflow=request.monthly_cashflow,
            applicant_age=request.applicant_age if request.applicant_age else None,
        )
        decision = await self.decisions.evaluate(decision_request)

        self.audit.log(
            request_id,
            SERVICE_NAME,
            "CREDIT_CHECK",
            {
                **request.model_dump(mode="json", exclude={"ssn"}),
                "ssn": mask_ssn(request.ssn),
                "decision": decision.decision.value,
            },
        )

        by_name = {result.bureau_name: result for result in bureau_results}
        return CreditCheckResponse(
            request_id=request_id,
            status=decision.decision,
            credit_score=decision.credit_score,
            loan_amount=request.loan_amount,
            decision_reason=decision.reason,
            timestamp=decision.timestamp,
            experian_response=by_name.get(BureauName.EXPERIAN.value),
            equifax_response=by_name.get(BureauName.EQUIFAX.value),
            reasoning=decision.reasoning,
        )
