"""Signals derived from a decision request's bureau results."""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from app.core.enums import BureauStatus
from app.models.schemas.decision import BureauResult, DecisionRequest

TWO_PLACES = Decimal("0.01")


def average_score(results: list[BureauResult]) -> Decimal:
    """
    Average the scores of successful bureau results.

    Only SUCCESS results carrying a score count. The mean is rounded
    half-up to two decimal places, and is 0.00 when nothing is valid.
    """
    valid = valid_scores(results)
    if not valid:
        return Decimal("0.00")
    return (sum(valid) / Decimal(len(valid))).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def valid_scores(results: list[BureauResult]) -> list[Decimal]:
    return [
        r.credit_score
        for r in results
        if r.status == BureauStatus.SUCCESS and r.credit_score is not None
    ]


@dataclass(frozen=True)
class AggregatedSignals:
    """
    Values rules are evaluated against.

    Attributes:
        valid_scores: Scores from SUCCESS results with a present score
        average_score: Mean of valid_scores, 2 dp half-up, 0 when empty
        success_count: Number of SUCCESS results, with or without a score
        loan_amount: Requested amount
        applicant_age: Applicant age if supplied
        annual_income: Annual income if supplied
        total_debt: Total debt if supplied
        monthly_cashflow: Monthly cashflow if supplied
        bureau_results: Raw bureau results in source order
    """

    valid_scores: tuple[Decimal, ...]
    average_score: Decimal
    success_count: int
    loan_amount: Optional[Decimal]
    applicant_age: Optional[Decimal] = None
    annual_income: Optional[Decimal] = None
    total_debt: Optional[Decimal] = None
    monthly_cashflow: Optional[Decimal] = None
    bureau_results: tuple[BureauResult, ...] = field(default_factory=tuple)

    @classmethod
    def from_request(
        cls,
        request: DecisionRequest,
        average: Optional[Decimal] = None,
    ) -> "AggregatedSignals":
        """
        Build signals from a decision request.

        Args:
            request: The decision request
            average: Use this average instead of recomputing it (e.g. the
                score stored with a cached decision)
        """
        results = list(request.bureau_responses)
        return cls(
            valid_scores=tuple(valid_scores(results)),
            average_score=average if average is not None else average_score(results),
            success_count=sum(1 for r in results if r.status == BureauStatus.SUCCESS),
            loan_amount=request.loan_amount,
            applicant_age=request.applicant_age,
            annual_income=request.annual_income,
            total_debt=request.total_debt,
            monthly_cashflow=request.monthly_cashflow,
            bureau_results=tuple(results),
        )

    @property
    def valid_count(self) -> int:
        return len(self.valid_scores)

    @property
    def min_score(self) -> Optional[Decimal]:
        return min(self.valid_scores) if self.valid_scores else None

    @property
    def max_score(self) -> Optional[Decimal]:
        return max(self.valid_scores) if self.valid_scores else None

    @property
    def score_range(self) -> Optional[str]:
        """Range of valid scores as "min - max", None when there are none."""
        if not self.valid_scores:
            return None
        return f"{self.min_score} - {self.max_score}"

    @property
    def debt_to_income_pct(self) -> Optional[Decimal]:
        """Debt-to-income ratio in percent, when income is positive and debt known."""
        if self.annual_income is None or self.total_debt is None:
            return None
        if self.annual_income <= 0:
            return None
        ratio = (self.total_debt / self.annual_income).quantize(
            Decimal("0.0001"), rounding=ROUND_HALF_UP
        )
        return ratio * Decimal("100")
