"""Hybrid combinator: rules, LLM, or both must agree."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from app.config import settings
from app.core.enums import DecisionMode, DecisionOutcome
from app.core.exceptions import CreditDecisionError, LLMConfigurationError
from app.models.schemas.decision import DecisionRequest
from app.services.llm.decision_adapter import LLMDecisionAdapter
from app.services.rule_engine import RuleDecision, RuleDefinition, RuleEngine
from app.services.signals import AggregatedSignals

logger = logging.getLogger(__name__)

BOTH_APPROVED_REASON = "Both rule-based and LLM evaluations approved the loan"


@dataclass
class CombinedDecision:
    """
    Decision produced by the combinator.

    Attributes:
        decision: Final decision
        reason: Reason to persist with the decision
        credit_score: Average credit score used
        mode: Path that actually produced the decision
    """

    decision: DecisionOutcome
    reason: str
    credit_score: Decimal
    mode: DecisionMode


def combine_reasons(rule_result: RuleDecision, llm_approved: bool, llm_reason: str) -> str:
    """Composite rejection reason naming the side(s) that failed."""
    reason = "Loan rejected: "
    if not rule_result.approved:
        reason += "Rule-based evaluation failed. "
    if not llm_approved:
        reason += "LLM evaluation failed. "
    reason += f"Rule reason: {rule_result.reason}"
    reason += f" LLM reason: {llm_reason}"
    return reason


class HybridDecisionService:
    """
    Dispatches a decision by the configured mode.

    - rules: rule engine only
    - llm: LLM only, falling back to rules when the LLM is off
    - hybrid: approve only if both approve; an LLM failure falls back to rules
    """

    def __init__(
        self,
        llm_adapter: LLMDecisionAdapter,
        engine: Optional[RuleEngine] = None,
        mode: Optional[DecisionMode] = None,
    ):
        self.llm_adapter = llm_adapter
        self.engine = engine or RuleEngine()
        self.mode = DecisionMode(mode or settings.DECISION_MODE)

    async def decide(
        self,
        request: DecisionRequest,
        signals: AggregatedSignals,
        rules: Sequence[RuleDefinition],
    ) -> CombinedDecision:
        """
        Produce a decision for the request.

        Args:
            request: The decision request
            signals: Signals derived from the request
            rules: Active rule snapshot

        Returns:
            CombinedDecision

        Raises:
            CreditDecisionError: In llm mode, when the LLM path fails
        """
        if self.mode == DecisionMode.LLM:
            return await self._decide_llm(request, signals, rules)
        if self.mode == DecisionMode.HYBRID:
            return await self._decide_hybrid(request, signals, rules)
        return self._decide_rules(signals, rules)

    def _decide_rules(
        self, signals: AggregatedSignals, rules: Sequence[RuleDefinition]
    ) -> CombinedDecision:
        result = self.engine.evaluate(signals, rules)
        return CombinedDecision(
            decision=result.decision,
            reason=result.reason,
            credit_score=signals.average_score,
            mode=DecisionMode.RULES,
        )

    async def _decide_llm(
        self,
        request: DecisionRequest,
        signals: AggregatedSignals,
        rules: Sequence[RuleDefinition],
    ) -> CombinedDecision:
        try:
            result = await self.llm_adapter.evaluate_with_model(request, signals.average_score, rules)
        except LLMConfigurationError as e:
            logger.warning(f"LLM mode requested but LLM is not usable ({e}). Falling back to rules.")
            return self._decide_rules(signals, rules)

        return CombinedDecision(
            decision=result.decision,
            reason=result.reason,
            credit_score=signals.average_score,
            mode=DecisionMode.LLM,
        )

    async def _decide_hybrid(
        self,
        request: DecisionRequest,
        signals: AggregatedSignals,
        rules: Sequence[RuleDefinition],
    ) -> CombinedDecision:
        rule_result = self.engine.evaluate(signals, rules)
        fallback = CombinedDecision(
            decision=rule_result.decision,
            reason=rule_result.reason,
            credit_score=signals.average_score,
            mode=DecisionMode.RULES,
        )

        try:
            llm_result = await self.llm_adapter.evaluate_with_model(
                request, signals.average_score, rules
            )
        except LLMConfigurationError as e:
            logger.debug(f"LLM not available for hybrid mode ({e}). Using rule-based decision only.")
            return fallback
        except CreditDecisionError as e:
            logger.error(
                f"LLM evaluation failed in hybrid mode. Using rule-based decision only: {e}"
            )
            return fallback

        if rule_result.approved and llm_result.approved:
            decision = DecisionOutcome.APPROVED
            reason = BOTH_APPROVED_REASON
        else:
            decision = DecisionOutcome.REJECTED
            reason = combine_reasons(rule_result, llm_result.approved, llm_result.reason)

        logger.info(
            f"Hybrid decision for request {request.request_id}: {decision.value} "
            f"(Rules: {rule_result.decision.value}, LLM: {llm_result.decision.value})"
        )
        return CombinedDecision(
            decision=decision,
            reason=reason,
            credit_score=signals.average_score,
            mode=DecisionMode.HYBRID,
        )
