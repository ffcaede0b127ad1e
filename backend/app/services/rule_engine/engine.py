"""Rule engine orchestrator for priority-ordered threshold rules."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from app.core.enums import DecisionOutcome, RuleType
from app.services.rule_engine.base import (
    EvaluationContext,
    EvaluationResult,
    RuleDefinition,
    RuleEvaluator,
)
from app.services.rule_engine.evaluators import (
    AgeLimitEvaluator,
    BureauResponseEvaluator,
    CreditScoreEvaluator,
    LoanAmountEvaluator,
)
from app.services.signals import AggregatedSignals

logger = logging.getLogger(__name__)

ALL_RULES_PASSED = "All rules passed"


@dataclass
class RuleDecision:
    """
    Outcome of a short-circuiting rule evaluation.

    Attributes:
        decision: APPROVED or REJECTED
        reason: Failure message of the first failing rule, or "All rules passed"
        failed_rule: Name of the first failing rule, if any
    """

    decision: DecisionOutcome
    reason: str
    failed_rule: Optional[str] = None

    @property
    def approved(self) -> bool:
        return self.decision == DecisionOutcome.APPROVED


class RuleEngine:
    """
    Rule engine orchestrator.

    This class:
    - Maintains a registry of rule evaluators keyed by rule type
    - Evaluates rules in ascending priority order
    - Stops at the first failing rule when producing a decision
    """

    def __init__(self):
        """Initialize the rule engine with evaluator registry."""
        self._evaluators: Dict[RuleType, RuleEvaluator] = {}
        self._register_default_evaluators()

    def _register_default_evaluators(self):
        """Register default evaluators for all rule types."""
        self._evaluators[RuleType.CREDIT_SCORE] = CreditScoreEvaluator()
        self._evaluators[RuleType.LOAN_AMOUNT] = LoanAmountEvaluator()
        self._evaluators[RuleType.BUREAU_RESPONSE] = BureauResponseEvaluator()
        self._evaluators[RuleType.AGE_LIMIT] = AgeLimitEvaluator()

    def register_evaluator(self, rule_type: RuleType, evaluator: RuleEvaluator) -> None:
        """
        Register a custom evaluator for a specific rule type.

        Args:
            rule_type: The rule type to handle
            evaluator: The evaluator instance
        """
        self._evaluators[rule_type] = evaluator

    @staticmethod
    def order_rules(rules: Iterable[RuleDefinition]) -> List[RuleDefinition]:
        """Sort rules by ascending priority, keeping input order for ties."""
        return sorted(rules, key=lambda rule: rule.priority)

    def evaluate_rule(
        self, rule: RuleDefinition, signals: AggregatedSignals
    ) -> EvaluationResult:
        """
        Evaluate a single rule.

        A rule type without a registered evaluator passes with a warning.
        """
        evaluator = self._evaluators.get(rule.rule_type)
        if evaluator is None:
            logger.warning(f"Unknown rule type: {rule.rule_type!r} on rule {rule.rule_name}")
            return EvaluationResult(passed=True, lenient=True)

        return evaluator.evaluate(EvaluationContext(rule=rule, signals=signals))

    def evaluate(
        self, signals: AggregatedSignals, rules: Sequence[RuleDefinition]
    ) -> RuleDecision:
        """
        Decide by evaluating rules until one fails.

        Args:
            signals: Values derived from the request
            rules: Active rules

        Returns:
            REJECTED with the first failing rule's reason, otherwise APPROVED
        """
        for rule in self.order_rules(rules):
            result = self.evaluate_rule(rule, signals)
            if not result.passed:
                logger.debug(f"Rule {rule.rule_name} failed (actual={result.actual_value})")
                return RuleDecision(
                    decision=DecisionOutcome.REJECTED,
                    reason=rule.rejection_reason,
                    failed_rule=rule.rule_name,
                )

        return RuleDecision(decision=DecisionOutcome.APPROVED, reason=ALL_RULES_PASSED)

    def evaluate_all(
        self, signals: AggregatedSignals, rules: Sequence[RuleDefinition]
    ) -> List[tuple[RuleDefinition, EvaluationResult]]:
        """
        Evaluate every rule without short-circuiting.

        Returns:
            (rule, result) pairs in evaluation order
        """
        return [(rule, self.evaluate_rule(rule, signals)) for rule in self.order_rules(rules)]
