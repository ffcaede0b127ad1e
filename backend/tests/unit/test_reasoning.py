"""Unit tests for decision reasoning"""

from decimal import Decimal

import pytest

from app.core.enums import DecisionOutcome, Operator, RuleType
from app.services.reasoning_service import ReasoningGenerator
from app.services.rule_engine import RuleDefinition
from helpers import bureau, default_rule_definitions, failed, make_request


@pytest.fixture
def generator() -> ReasoningGenerator:
    return ReasoningGenerator()


def test_approved_reasoning(generator):
    request = make_request(bureaus=[bureau("EXPERIAN", 720), bureau("EQUIFAX", 700)])

    reasoning = generator.explain(
        request, Decimal("710.00"), default_rule_definitions(), DecisionOutcome.APPROVED
    )

    assert reasoning.summary == (
        "Loan APPROVED: All 3 critical rules passed. Credit score of 710.00 and "
        "loan amount of 50000 meet all requirements."
    )
    credit, loan, bureaus = reasoning.rule_evaluations
    assert credit.rule_name == "MINIMUM_CREDIT_SCORE"
    assert credit.actual_value == "710.00"
    assert credit.threshold == "650"
    assert credit.explanation == "CREDIT_SCORE 710.00 >= threshold 650.00 - Rule passed"
    assert loan.actual_value == "50000"
    assert loan.explanation == "LOAN_AMOUNT 50000.00 <= threshold 1000000.00 - Rule passed"
    assert bureaus.actual_value == "2"
    assert bureaus.explanation == "BUREAU_RESPONSE 2.00 >= threshold 1.00 - Rule passed"


def test_rejected_reasoning_lists_every_failure(generator):
    request = make_request(
        loan_amount="2000000",
        bureaus=[failed("EXPERIAN"), bureau("EQUIFAX", 600)],
    )

    reasoning = generator.explain(
        request, Decimal("600.00"), default_rule_definitions(), DecisionOutcome.REJECTED
    )

    assert reasoning.summary == (
        "Loan REJECTED: 2 out of 3 rules failed. "
        "Failed rules: MINIMUM_CREDIT_SCORE, MAXIMUM_LOAN_AMOUNT. "
        "Credit score: 600.00, Loan amount: 2000000"
    )
    credit = reasoning.rule_evaluations[0]
    assert not credit.passed
    assert credit.explanation == (
        "CREDIT_SCORE 600.00 does not meet requirement: >= 650.00 - Rule failed"
    )


def test_inputs_and_calculated_values(generator):
    request = make_request(
        bureaus=[bureau("EXPERIAN", 720), failed("EQUIFAX")],
        applicant_age=Decimal("42"),
    )

    reasoning = generator.explain(
        request, Decimal("720.00"), default_rule_definitions(), DecisionOutcome.APPROVED
    )

    assert reasoning.inputs.loan_amount == Decimal("50000")
    assert reasoning.inputs.bureau_response_count == 2
    assert reasoning.inputs.applicant_age == Decimal("42")
    assert [b.bureau_name for b in reasoning.inputs.bureau_inputs] == ["EXPERIAN", "EQUIFAX"]
    assert reasoning.calculated.average_credit_score == Decimal("720.00")
    assert reasoning.calculated.valid_bureau_count == 1
    assert reasoning.calculated.credit_score_range == "720 - 720"


def test_decision_path_steps(generator):
    reasoning = generator.explain(
        make_request(), Decimal("710.00"), default_rule_definitions(), DecisionOutcome.APPROVED
    )

    steps = reasoning.decision_path.split("\n")
    assert steps[0] == "1. Received credit bureau responses"
    assert steps[1] == "2. Calculated average credit score from valid responses"
    assert steps[2].startswith("3. Evaluated MINIMUM_CREDIT_SCORE: PASSED - ")
    assert steps[4].startswith("5. Evaluated BUREAU_RESPONSE_VALIDATION: PASSED - ")
    assert steps[5] == f"6. Final decision: {reasoning.summary}"


def test_missing_age_explanation(generator):
    rule = RuleDefinition("MINIMUM_AGE", RuleType.AGE_LIMIT, Decimal("18"), Operator.GTE)

    reasoning = generator.explain(make_request(), Decimal("710.00"), [rule], DecisionOutcome.REJECTED)

    record = reasoning.rule_evaluations[0]
    assert not record.passed
    assert record.actual_value == "N/A"
    assert record.explanation == "Required value for AGE_LIMIT was not provided"


def test_age_actual_value_is_plain(generator):
    rule = RuleDefinition("MINIMUM_AGE", RuleType.AGE_LIMIT, Decimal("18"), Operator.GTE)
    request = make_request(applicant_age=Decimal("3E+1"))

    reasoning = generator.explain(request, Decimal("710.00"), [rule], DecisionOutcome.APPROVED)

    assert reasoning.rule_evaluations[0].actual_value == "30"
