"""Loan amount rule evaluator."""

from decimal import Decimal
from typing import Optional

from app.services.rule_engine.base import EvaluationContext, RuleEvaluator


class LoanAmountEvaluator(RuleEvaluator):
    """LOAN_AMOUNT: compares the requested loan amount."""

    def select_value(self, context: EvaluationContext) -> Optional[Decimal]:
        return context.signals.loan_amount
