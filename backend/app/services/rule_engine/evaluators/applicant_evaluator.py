"""Applicant attribute rule evaluators."""

from decimal import Decimal
from typing import Optional

from app.services.rule_engine.base import EvaluationContext, RuleEvaluator


class AgeLimitEvaluator(RuleEvaluator):
    """AGE_LIMIT: compares the applicant's age. Fails when age is not supplied."""

    def select_value(self, context: EvaluationContext) -> Optional[Decimal]:
        return context.signals.applicant_age
