"""LLM decision adapter: asks a language model for a loan decision."""

import json
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from app.config import settings
from app.core.enums import DecisionOutcome
from app.core.exceptions import (
    CreditDecisionError,
    DecisionEvaluationError,
    LLMConfigurationError,
    LLMResponseParseError,
)
from app.models.schemas.decision import DecisionRequest
from app.services.llm.prompts import DECISION_RESPONSE_INSTRUCTIONS, DECISION_SYSTEM_PROMPT
from app.services.llm.providers import LLMProvider
from app.services.rule_engine import RuleDefinition
from app.services.signals import AggregatedSignals

logger = logging.getLogger(__name__)

DEFAULT_LLM_REASON = "LLM decision based on configured rules"

_DECISION_FIELD = re.compile(r'"decision"\s*:\s*"(APPROVED?|REJECT(?:ED)?)"', re.IGNORECASE)
_REASON_FIELD = re.compile(r'"reason"\s*:\s*"((?:[^"\\]|\\.)*)"')
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass
class LLMDecision:
    """Decision parsed from a model reply."""

    decision: DecisionOutcome
    reason: str
    confidence: Optional[Decimal] = None
    raw_response: str = ""

    @property
    def approved(self) -> bool:
        return self.decision == DecisionOutcome.APPROVED


def _extract_json(text: str) -> Optional[dict]:
    match = _JSON_OBJECT.search(text)
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _normalize_decision(value) -> Optional[DecisionOutcome]:
    """Map APPROVE/APPROVED/REJECT/REJECTED in any case onto an outcome."""
    value = str(value or "").strip().upper()
    if value.startswith("APPROV"):
        return DecisionOutcome.APPROVED
    if value.startswith("REJECT"):
        return DecisionOutcome.REJECTED
    return None


def _find_decision(text: str, data: Optional[dict]) -> Optional[DecisionOutcome]:
    if data is not None:
        decision = _normalize_decision(data.get("decision"))
        if decision is not None:
            return decision

    match = _DECISION_FIELD.search(text)
    if match:
        return _normalize_decision(match.group(1))

    # Lone token: only trust it when the other one is absent
    has_approved = "APPROVED" in text
    has_rejected = "REJECTED" in text
    if has_approved != has_rejected:
        return DecisionOutcome.APPROVED if has_approved else DecisionOutcome.REJECTED

    lowered = text.lower()
    approve = "approve" in lowered
    reject = "reject" in lowered
    if approve != reject:
        return DecisionOutcome.APPROVED if approve else DecisionOutcome.REJECTED
    return None


def _find_reason(text: str, data: Optional[dict]) -> str:
    if data is not None and data.get("reason"):
        return str(data["reason"])

    match = _REASON_FIELD.search(text)
    if match and match.group(1):
        return match.group(1)

    for line in text.splitlines():
        lowered = line.lower()
        if "reason" in lowered or "because" in lowered:
            return line.strip()
    return DEFAULT_LLM_REASON


def _find_confidence(data: Optional[dict]) -> Optional[Decimal]:
    if data is None or data.get("confidence") is None:
        return None
    try:
        return Decimal(str(data["confidence"]))
    except InvalidOperation:
        return None


def parse_decision_response(text: str) -> LLMDecision:
    """
    Read a decision out of a model reply, tolerating loose formatting.

    Tries a JSON object first, then a "decision" field, then a lone
    APPROVED/REJECTED token, then the words approve/reject.

    Raises:
        LLMResponseParseError: If no decision can be determined
    """
    data = _extract_json(text)
    decision = _find_decision(text, data)
    if decision is None:
        raise LLMResponseParseError("Could not determine a decision from LLM response", text)

    return LLMDecision(
        decision=decision,
        reason=_find_reason(text, data),
        confidence=_find_confidence(data),
        raw_response=text,
    )


def build_decision_prompt(
    request: DecisionRequest,
    average_score: Decimal,
    rules: Sequence[RuleDefinition],
) -> str:
    """Build the user prompt embedding the rules and application data."""
    signals = AggregatedSignals.from_request(request, average=average_score)
    lines = ["## Decision Rules:"]
    for rule in rules:
        lines.append(
            f"- {rule.rule_name}: {rule.description} "
            f"(Threshold: {rule.threshold_value} {rule.operator.value}, "
            f"Importance: {rule.importance.value})"
        )

    lines.append("")
    lines.append("## Loan Application Data:")
    lines.append(f"- Average Credit Score: {average_score:.2f}")
    lines.append(f"- Loan Amount: {request.loan_amount}")
    if request.applicant_age is not None:
        lines.append(f"- Applicant Age: {request.applicant_age}")
    if request.annual_income is not None:
        lines.append(f"- Annual Income: {request.annual_income}")
    if request.total_debt is not None:
        lines.append(f"- Total Debt: {request.total_debt}")
    if request.monthly_cashflow is not None:
        lines.append(f"- Monthly Cashflow: {request.monthly_cashflow}")
    if signals.debt_to_income_pct is not None:
        lines.append(f"- Debt-to-Income Ratio: {signals.debt_to_income_pct:.2f}%")

    lines.append("- Credit Bureau Responses:")
    for result in request.bureau_responses:
        score = result.credit_score if result.credit_score is not None else "N/A"
        lines.append(f"  - {result.bureau_name}: Score={score}, Status={result.status.value}")

    lines.append("")
    lines.append(DECISION_RESPONSE_INSTRUCTIONS)
    return "\n".join(lines)


class LLMDecisionAdapter:
    """Delegates the decision question to an LLM provider."""

    def __init__(
        self,
        provider: Optional[LLMProvider],
        enabled: Optional[bool] = None,
        model: Optional[str] = None,
        temperature: float = 0.1,
        max_tokens: int = 500,
    ):
        """
        Initialize the adapter.

        Args:
            provider: Chat provider, None when no provider is configured
            enabled: Whether LLM decisioning is on (defaults to settings)
            model: Model name (defaults to settings)
            temperature: Sampling temperature, low for rule-following answers
            max_tokens: Maximum tokens in the reply
        """
        self.provider = provider
        self.enabled = settings.LLM_ENABLED if enabled is None else enabled
        self.model = model or settings.LLM_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def is_enabled(self) -> bool:
        """True when enabled, a provider exists and it is available."""
        if not self.enabled or self.provider is None:
            return False
        return await self.provider.is_available()

    async def evaluate_with_model(
        self,
        request: DecisionRequest,
        average_score: Decimal,
        rules: Sequence[RuleDefinition],
    ) -> LLMDecision:
        """
        Ask the model for a decision using the active rules as context.

        Args:
            request: The decision request
            average_score: Average of valid bureau scores
            rules: Active rules to include in the prompt

        Returns:
            Parsed LLMDecision

        Raises:
            LLMConfigurationError: If disabled, unconfigured or unavailable
            LLMResponseParseError: If the reply has no recognisable decision
            DecisionEvaluationError: If the provider call fails
        """
        if not self.enabled:
            raise LLMConfigurationError("LLM service is not enabled")
        if self.provider is None:
            raise LLMConfigurationError("LLM provider is not configured")
        if not await self.provider.is_available():
            raise LLMConfigurationError(f"LLM provider {self.provider.name} is not available")

        logger.info(f"Evaluating decision with LLM ({self.provider.name}) for request: {request.request_id}")

        try:
            response = await self.provider.chat(
                self.model,
                DECISION_SYSTEM_PROMPT,
                build_decision_prompt(request, average_score, rules),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
        except CreditDecisionError:
            raise
        except Exception as e:
            logger.error(f"Error calling LLM for request {request.request_id}: {e}", exc_info=True)
            raise DecisionEvaluationError("LLM decision evaluation failed") from e

        logger.debug(f"LLM response: {response}")
        result = parse_decision_response(response)
        logger.info(f"LLM decision for request {request.request_id}: {result.decision.value}")
        return result
