"""Rule evaluators for each rule type."""

from .applicant_evaluator import AgeLimitEvaluator
from .credit_evaluator import BureauResponseEvaluator, CreditScoreEvaluator
from .loan_evaluator import LoanAmountEvaluator

__all__ = [
    "AgeLimitEvaluator",
    "BureauResponseEvaluator",
    "CreditScoreEvaluator",
    "LoanAmountEvaluator",
]
