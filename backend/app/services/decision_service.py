"""Decision service: idempotent, cached decisions with fresh reasoning."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import DecisionMode
from app.models.domain.decision import Decision
from app.models.schemas.decision import (
    CalculatedValues,
    DecisionReasoning,
    DecisionRequest,
    DecisionResult,
)
from app.repositories.decision_repository import DecisionRepository
from app.services.hybrid_service import HybridDecisionService
from app.services.llm.decision_adapter import LLMDecisionAdapter
from app.services.llm.providers import LLMProvider
from app.services.reasoning_service import ReasoningGenerator
from app.services.rule_engine import RuleEngine
from app.services.rule_store import RuleStore
from app.services.signals import AggregatedSignals

logger = logging.getLogger(__name__)


class DecisionService:
    """
    Decision service for evaluating and retrieving loan decisions.

    One decision is stored per request id. Repeat evaluations return the
    stored decision, score and reason, with reasoning regenerated from the
    current request and the current rules.
    """

    def __init__(
        self,
        db: AsyncSession,
        llm_provider: Optional[LLMProvider] = None,
        mode: Optional[DecisionMode] = None,
        llm_enabled: Optional[bool] = None,
    ):
        """
        Initialize the decision service.

        Args:
            db: Async database session
            llm_provider: Provider for LLM and hybrid modes
            mode: Decision mode (defaults to settings)
            llm_enabled: Override for the LLM enabled flag (defaults to settings)
        """
        self.db = db
        self.repo = DecisionRepository(db)
        self.rule_store = RuleStore(db)
        engine = RuleEngine()
        self.reasoning = ReasoningGenerator(engine)
        self.combinator = HybridDecisionService(
            LLMDecisionAdapter(llm_provider, enabled=llm_enabled),
            engine=engine,
            mode=mode,
        )

    async def evaluate(self, request: DecisionRequest) -> DecisionResult:
        """
        Evaluate a decision request.

        Args:
            request: Loan amount, bureau results and optional financial data

        Returns:
            DecisionResult with freshly generated reasoning

        Raises:
            CreditDecisionError: If the LLM path fails in llm mode
        """
        logger.info(f"Evaluating decision for request: {request.request_id}")
        rules = await self.rule_store.get_active_rules()

        cached = await self.repo.get_by_request_id(request.request_id)
        if cached is not None:
            logger.info(f"Returning cached decision for request: {request.request_id}")
            return self._to_result(cached, request, rules)

        signals = AggregatedSignals.from_request(request)
        combined = await self.combinator.decide(request, signals, rules)

        stored, created = await self.repo.insert_if_absent(
            request_id=request.request_id,
            decision=combined.decision,
            credit_score=combined.credit_score,
            loan_amount=request.loan_amount,
            reason=combined.reason,
            timestamp=datetime.now(timezone.utc),
        )
        await self.db.commit()

        if created:
            logger.info(
                f"Decision made for request {request.request_id}: "
                f"{combined.decision.value} via {combined.mode.value}"
            )
        else:
            logger.info(f"Concurrent decision already stored for request: {request.request_id}")

        return self._to_result(stored, request, rules)

    def _to_result(self, decision: Decision, request: DecisionRequest, rules) -> DecisionResult:
        average = decision.credit_score
        if average is None:
            average = AggregatedSignals.from_request(request).average_score

        reasoning = self.reasoning.explain(request, average, rules, decision.decision)
        logger.debug(f"Decision reasoning: {reasoning.summary}")

        return DecisionResult(
            request_id=decision.request_id,
            decision=decision.decision,
            credit_score=decision.credit_score,
            loan_amount=decision.loan_amount,
            reason=decision.reason,
            timestamp=decision.timestamp,
            reasoning=reasoning,
        )

    async def get_decision(self, request_id: str) -> Optional[Decision]:
        return await self.repo.get_by_request_id(request_id)

    async def get_reasoning(self, request_id: str) -> Optional[DecisionReasoning]:
        """
        Retrieve reasoning for a stored decision.

        The original request data is not stored, so only a basic reasoning
        built from the persisted decision is available.

        Returns:
            DecisionReasoning, or None if no decision exists for the id
        """
        decision = await self.repo.get_by_request_id(request_id)
        if decision is None:
            return None

        logger.warning("Reasoning retrieval requires original request data. Returning basic reasoning.")
        return DecisionReasoning(
            summary=decision.reason or "",
            calculated=CalculatedValues(average_credit_score=decision.credit_score),
            decision_path=f"Decision stored at: {decision.timestamp}",
        )
