"""Evaluators for rules on bureau-derived signals."""

from decimal import Decimal
from typing import Optional

from app.services.rule_engine.base import EvaluationContext, RuleEvaluator


class CreditScoreEvaluator(RuleEvaluator):
    """CREDIT_SCORE: compares the average of valid bureau scores."""

    def select_value(self, context: EvaluationContext) -> Optional[Decimal]:
        return context.signals.average_score


class BureauResponseEvaluator(RuleEvaluator):
    """BUREAU_RESPONSE: compares the number of successful bureau calls."""

    def select_value(self, context: EvaluationContext) -> Optional[Decimal]:
        return Decimal(context.signals.success_count)
