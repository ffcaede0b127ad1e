"""Rule engine for evaluating decision requests against threshold rules."""

from .base import EvaluationContext, EvaluationResult, RuleDefinition, RuleEvaluator
from .engine import ALL_RULES_PASSED, RuleDecision, RuleEngine

__all__ = [
    "ALL_RULES_PASSED",
    "EvaluationContext",
    "EvaluationResult",
    "RuleDecision",
    "RuleDefinition",
    "RuleEngine",
    "RuleEvaluator",
]
