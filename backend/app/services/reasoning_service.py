"""Reasoning generator: explains a decision rule by rule."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from app.core.enums import DecisionOutcome, RuleType
from app.models.schemas.decision import (
    BureauInput,
    CalculatedValues,
    DecisionInputs,
    DecisionReasoning,
    DecisionRequest,
    RuleEvaluationRecord,
)
from app.services.rule_engine import RuleDefinition, RuleEngine
from app.services.rule_engine.base import EvaluationResult
from app.services.signals import TWO_PLACES, AggregatedSignals

logger = logging.getLogger(__name__)


class ReasoningGenerator:
    """
    Builds a DecisionReasoning for a request.

    Unlike the rule engine's decision path, every rule is evaluated so the
    explanation lists all passes and failures. Reasoning is a point-in-time
    re-derivation against the rules passed in, not a record of what ran
    when the decision was first made.
    """

    def __init__(self, engine: Optional[RuleEngine] = None):
        self.engine = engine or RuleEngine()

    def explain(
        self,
        request: DecisionRequest,
        average_score: Decimal,
        rules: Sequence[RuleDefinition],
        final_decision: DecisionOutcome,
    ) -> DecisionReasoning:
        """
        Generate reasoning for a decision.

        Args:
            request: The decision request
            average_score: Average credit score the decision used
            rules: Active rules to explain against
            final_decision: The decision being explained

        Returns:
            DecisionReasoning with summary, per-rule records and decision path
        """
        signals = AggregatedSignals.from_request(request, average=average_score)

        inputs = DecisionInputs(
            loan_amount=request.loan_amount,
            bureau_response_count=len(request.bureau_responses),
            applicant_age=request.applicant_age,
            bureau_inputs=[
                BureauInput(
                    bureau_name=result.bureau_name,
                    credit_score=result.credit_score,
                    status=result.status,
                )
                for result in request.bureau_responses
            ],
        )
        calculated = CalculatedValues(
            average_credit_score=average_score,
            valid_bureau_count=signals.valid_count,
            credit_score_range=signals.score_range,
        )

        records = [
            self._to_record(rule, result, signals)
            for rule, result in self.engine.evaluate_all(signals, rules)
        ]
        summary = self._summarize(records, final_decision, average_score, request.loan_amount)

        return DecisionReasoning(
            summary=summary,
            rule_evaluations=records,
            inputs=inputs,
            calculated=calculated,
            decision_path=self._decision_path(records, summary),
        )

    def _to_record(
        self,
        rule: RuleDefinition,
        result: EvaluationResult,
        signals: AggregatedSignals,
    ) -> RuleEvaluationRecord:
        if result.value_missing:
            explanation = f"Required value for {rule.rule_type.value} was not provided"
        else:
            explanation = self._explanation(rule, result)

        return RuleEvaluationRecord(
            rule_name=rule.rule_name,
            description=rule.description,
            passed=result.passed,
            actual_value=self._actual_value_text(rule, signals),
            threshold=str(rule.threshold_value),
            operator=rule.operator,
            explanation=explanation,
            importance=rule.importance,
        )

    @staticmethod
    def _actual_value_text(rule: RuleDefinition, signals: AggregatedSignals) -> str:
        if rule.rule_type == RuleType.CREDIT_SCORE:
            return str(signals.average_score.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))
        if rule.rule_type == RuleType.LOAN_AMOUNT:
            return str(signals.loan_amount) if signals.loan_amount is not None else "N/A"
        if rule.rule_type == RuleType.BUREAU_RESPONSE:
            return str(signals.success_count)
        if rule.rule_type == RuleType.AGE_LIMIT:
            return format(signals.applicant_age, "f") if signals.applicant_age is not None else "N/A"
        return "N/A"

    @staticmethod
    def _explanation(rule: RuleDefinition, result: EvaluationResult) -> str:
        rule_type = rule.rule_type.value
        operator = rule.operator.value
        if result.actual_value is None:
            return f"{rule_type} could not be evaluated - Rule passed"
        actual = _two_dp(result.actual_value)
        threshold = _two_dp(rule.threshold_value)
        if result.passed:
            return f"{rule_type} {actual} {operator} threshold {threshold} - Rule passed"
        return (
            f"{rule_type} {actual} does not meet requirement: "
            f"{operator} {threshold} - Rule failed"
        )

    @staticmethod
    def _summarize(
        records: List[RuleEvaluationRecord],
        final_decision: DecisionOutcome,
        average_score: Decimal,
        loan_amount: Optional[Decimal],
    ) -> str:
        passed = sum(1 for record in records if record.passed)
        if final_decision == DecisionOutcome.APPROVED:
            return (
                f"Loan APPROVED: All {passed} critical rules passed. "
                f"Credit score of {_two_dp(average_score)} and loan amount of "
                f"{loan_amount} meet all requirements."
            )

        failed_names = [record.rule_name for record in records if not record.passed]
        return (
            f"Loan REJECTED: {len(records) - passed} out of {len(records)} rules failed. "
            f"Failed rules: {', '.join(failed_names)}. "
            f"Credit score: {_two_dp(average_score)}, Loan amount: {loan_amount}"
        )

    @staticmethod
    def _decision_path(records: List[RuleEvaluationRecord], summary: str) -> str:
        steps = [
            "1. Received credit bureau responses",
            "2. Calculated average credit score from valid responses",
        ]
        for record in records:
            status = "PASSED" if record.passed else "FAILED"
            steps.append(
                f"{len(steps) + 1}. Evaluated {record.rule_name}: {status} - {record.explanation}"
            )
        steps.append(f"{len(steps) + 1}. Final decision: {summary}")
        return "\n".join(steps)


def _two_dp(value: Decimal) -> str:
    return str(Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))
