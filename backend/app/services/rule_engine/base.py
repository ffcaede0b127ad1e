"""Rule engine foundation with rule snapshots, evaluation context, results, and base evaluator."""

import logging
import operator as op
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Optional
from uuid import UUID

from app.core.enums import Importance, Operator, RuleType
from app.models.domain.rule import RuleConfiguration
from app.services.signals import AggregatedSignals

logger = logging.getLogger(__name__)

# Exact Decimal comparison, no tolerance
COMPARATORS: Dict[Operator, Callable[[Decimal, Decimal], bool]] = {
    Operator.GTE: op.ge,
    Operator.LTE: op.le,
    Operator.GT: op.gt,
    Operator.LT: op.lt,
    Operator.EQ: op.eq,
}


@dataclass(frozen=True)
class RuleDefinition:
    """
    Immutable copy of a rule used during evaluation.

    Detached from the ORM session so a cached snapshot can be shared
    between concurrent requests.
    """

    rule_name: str
    rule_type: RuleType
    threshold_value: Decimal
    operator: Operator
    description: Optional[str] = None
    priority: int = 1
    importance: Importance = Importance.CRITICAL
    failure_message: Optional[str] = None
    id: Optional[UUID] = None

    @classmethod
    def from_model(cls, rule: RuleConfiguration) -> "RuleDefinition":
        return cls(
            id=rule.id,
            rule_name=rule.rule_name,
            rule_type=rule.rule_type,
            threshold_value=rule.threshold_value,
            operator=rule.operator,
            description=rule.description,
            priority=rule.priority,
            importance=rule.importance,
            failure_message=rule.failure_message,
        )

    @property
    def rejection_reason(self) -> str:
        """Configured failure message, or a generated one."""
        if self.failure_message:
            return self.failure_message
        return f"Rule '{self.rule_name}' failed: {self.description}"


@dataclass
class EvaluationContext:
    """
    Everything an evaluator needs to judge one rule.

    Attributes:
        rule: The rule being evaluated
        signals: Values derived from the decision request
    """

    rule: RuleDefinition
    signals: AggregatedSignals


@dataclass
class EvaluationResult:
    """
    Result of evaluating a single rule.

    Attributes:
        passed: Whether the rule passed
        actual_value: The value compared against the threshold, None if missing
        lenient: True when the rule passed only because its type or
            operator could not be evaluated
    """

    passed: bool
    actual_value: Optional[Decimal] = None
    lenient: bool = False

    @property
    def value_missing(self) -> bool:
        return self.actual_value is None and not self.lenient


def compare(actual: Decimal, operator: Operator, threshold: Decimal) -> Optional[bool]:
    """Apply a rule operator. Returns None for an unknown operator."""
    comparator = COMPARATORS.get(operator)
    if comparator is None:
        return None
    return comparator(actual, threshold)


class RuleEvaluator(ABC):
    """
    Abstract base class for rule evaluators using the Strategy pattern.

    Each concrete evaluator selects the input value for one rule type;
    the threshold comparison is shared.
    """

    @abstractmethod
    def select_value(self, context: EvaluationContext) -> Optional[Decimal]:
        """
        Pick the value the rule's threshold applies to.

        Returns:
            The value, or None when the request did not supply it
        """

    def evaluate(self, context: EvaluationContext) -> EvaluationResult:
        """
        Evaluate a rule against the provided context.

        A missing input fails the rule. An unknown operator passes it
        and logs a warning.
        """
        rule = context.rule
        actual = self.select_value(context)

        if actual is None:
            logger.warning(
                f"Rule {rule.rule_name} expects value for type "
                f"{rule.rule_type.value} but it was not provided"
            )
            return EvaluationResult(passed=False)

        outcome = compare(actual, rule.operator, rule.threshold_value)
        if outcome is None:
            logger.warning(f"Unknown operator {rule.operator!r} on rule {rule.rule_name}")
            return EvaluationResult(passed=True, actual_value=actual, lenient=True)

        return EvaluationResult(passed=outcome, actual_value=actual)
