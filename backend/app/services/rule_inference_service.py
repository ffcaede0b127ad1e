"""Advisory rule inference from historical decisions."""

import json
import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import CreditDecisionError, DecisionEvaluationError, LLMConfigurationError
from app.models.domain.decision import Decision
from app.models.schemas.rule import InferredRuleCandidate, RuleInferenceResponse, RuleResponse
from app.repositories.decision_repository import DecisionRepository
from app.services.llm.prompts import INFERENCE_INSTRUCTIONS, INFERENCE_SYSTEM_PROMPT
from app.services.llm.providers import LLMProvider
from app.services.rule_store import RuleStore

logger = logging.getLogger(__name__)

NO_HISTORY_MESSAGE = (
    "No historical decisions available yet. "
    "Run credit checks to accumulate data before inferring rules."
)


def _safe(value) -> str:
    return str(value) if value is not None else "N/A"


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()


class RuleInferenceService:
    """
    Proposes rules from recent decisions using the LLM provider.

    Accepted candidates are upserted into the rule store with MODEL
    provenance. Stored decisions are never touched.
    """

    def __init__(
        self,
        db: AsyncSession,
        llm_provider: Optional[LLMProvider],
        enabled: Optional[bool] = None,
        model: Optional[str] = None,
    ):
        self.decisions = DecisionRepository(db)
        self.rule_store = RuleStore(db)
        self.provider = llm_provider
        self.enabled = settings.rule_inference_enabled if enabled is None else enabled
        self.model = model or settings.LLM_MODEL

    async def propose_rules(self, sample_size: int = 50) -> RuleInferenceResponse:
        """
        Infer rules from the most recent decisions.

        Args:
            sample_size: Number of recent decisions to show the model

        Returns:
            Persisted rules, skipped candidates and a summary message

        Raises:
            LLMConfigurationError: If inference is disabled or no provider is usable
            DecisionEvaluationError: If the provider call fails
        """
        if not self.enabled:
            raise LLMConfigurationError(
                "Rule inference is disabled. Enable LLM_RULES_ENABLED or LLM_ENABLED."
            )

        decisions = await self.decisions.get_recent(max(sample_size, 1))
        if not decisions:
            logger.info("Skipping rule inference: no historical decisions available")
            return RuleInferenceResponse(message=NO_HISTORY_MESSAGE)

        raw_response = await self._call_model(self._build_prompt(decisions))
        return await self._parse_and_persist(raw_response)

    @staticmethod
    def _build_prompt(decisions: List[Decision]) -> str:
        lines = [
            f"- decision: {d.decision.value} | creditScore: {_safe(d.credit_score)} | "
            f"loanAmount: {_safe(d.loan_amount)} | "
            f"timestamp: {d.timestamp.isoformat() if d.timestamp else 'N/A'} | "
            f"reason: {_safe(d.reason)}"
            for d in decisions
        ]
        return INFERENCE_INSTRUCTIONS.format(decisions="\n".join(lines))

    async def _call_model(self, prompt: str) -> str:
        if self.provider is None:
            raise LLMConfigurationError("LLM provider not configured for rule inference.")
        if not await self.provider.is_available():
            raise LLMConfigurationError(
                f"{self.provider.name} provider selected but not available."
            )

        try:
            return await self.provider.chat(
                self.model,
                INFERENCE_SYSTEM_PROMPT,
                prompt,
                temperature=0.2,
                max_tokens=800,
                json_mode=True,
            )
        except CreditDecisionError:
            raise
        except Exception as e:
            logger.error(f"Rule inference model call failed: {e}", exc_info=True)
            raise DecisionEvaluationError("Rule inference model call failed") from e

    async def _parse_and_persist(self, raw_response: str) -> RuleInferenceResponse:
        try:
            root = json.loads(_strip_code_fence(raw_response))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse model response: {raw_response}")
            return RuleInferenceResponse(
                message=f"Failed to parse model response: {e}",
                raw_model_response=raw_response,
            )

        candidates = root.get("rules") if isinstance(root, dict) else None
        if not isinstance(candidates, list):
            logger.warning("Model response missing rules array")
            return RuleInferenceResponse(
                message="Model response missing rules array",
                raw_model_response=raw_response,
            )

        persisted: List[RuleResponse] = []
        skipped: List[str] = []
        for node in candidates:
            try:
                candidate = InferredRuleCandidate.model_validate(node)
            except ValidationError as e:
                logger.warning(f"Skipping rule due to parsing error: {e.error_count()} validation errors")
                skipped.append(json.dumps(node, default=str))
                continue

            rule = await self.rule_store.upsert_model_rule(
                rule_name=candidate.rule_name,
                rule_type=candidate.rule_type,
                threshold_value=candidate.threshold_value,
                operator=candidate.operator,
                description=candidate.description,
                failure_message=candidate.failure_message,
                priority=candidate.priority,
                importance=candidate.importance,
                confidence_score=candidate.confidence,
                model_version=self.model,
                rule_metadata=node,
            )
            persisted.append(RuleResponse.model_validate(rule))

        message = f"Persisted {len(persisted)} rules, skipped {len(skipped)}"
        logger.info(f"Rule inference complete: {message}")
        return RuleInferenceResponse(
            persisted=persisted,
            skipped=skipped,
            message=message,
            raw_model_response=raw_response,
        )
