"""Integration tests for rule inference from decision history"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.core.enums import DecisionOutcome, RuleSource
from app.core.exceptions import LLMConfigurationError
from app.repositories.decision_repository import DecisionRepository
from app.services.rule_inference_service import NO_HISTORY_MESSAGE, RuleInferenceService
from app.services.rule_store import RuleStore
from helpers import FakeLLMProvider

VALID_RULE = {
    "ruleName": "MINIMUM_CREDIT_SCORE_INFERRED",
    "ruleType": "CREDIT_SCORE",
    "description": "Approved applicants scored at least 680",
    "operator": ">=",
    "thresholdValue": 680,
    "failureMessage": "Credit score below inferred threshold",
    "confidence": 0.8,
}
INVALID_RULE = {"ruleName": "MIN_INCOME", "ruleType": "INCOME", "operator": ">=", "thresholdValue": 1}


@pytest.fixture
async def history(db_session):
    repo = DecisionRepository(db_session)
    for i, (outcome, score) in enumerate(
        [(DecisionOutcome.APPROVED, "720"), (DecisionOutcome.REJECTED, "610")]
    ):
        await repo.insert_if_absent(
            request_id=f"hist-{i}",
            decision=outcome,
            credit_score=Decimal(score),
            loan_amount=Decimal("25000"),
            reason="All rules passed" if outcome == DecisionOutcome.APPROVED else "Low score",
            timestamp=datetime.now(timezone.utc),
        )
    await db_session.commit()


def inference_service(db_session, provider, enabled: bool = True) -> RuleInferenceService:
    return RuleInferenceService(db_session, provider, enabled=enabled, model="test-model")


@pytest.mark.asyncio
async def test_disabled_inference_raises(db_session):
    with pytest.raises(LLMConfigurationError):
        await inference_service(db_session, FakeLLMProvider(), enabled=False).propose_rules()


@pytest.mark.asyncio
async def test_missing_provider_raises(db_session, history):
    with pytest.raises(LLMConfigurationError):
        await inference_service(db_session, None).propose_rules()


@pytest.mark.asyncio
async def test_no_history_skips_model_call(db_session):
    provider = FakeLLMProvider(reply="{}")

    response = await inference_service(db_session, provider).propose_rules()

    assert response.message == NO_HISTORY_MESSAGE
    assert response.persisted == []
    assert provider.calls == []


@pytest.mark.asyncio
async def test_valid_candidates_persisted_invalid_skipped(db_session, history):
    provider = FakeLLMProvider(reply=json.dumps({"rules": [VALID_RULE, INVALID_RULE]}))

    response = await inference_service(db_session, provider).propose_rules(sample_size=10)

    assert response.message == "Persisted 1 rules, skipped 1"
    assert [r.rule_name for r in response.persisted] == ["MINIMUM_CREDIT_SCORE_INFERRED"]
    assert json.loads(response.skipped[0])["ruleType"] == "INCOME"

    stored = await RuleStore(db_session).get_rule_by_name("MINIMUM_CREDIT_SCORE_INFERRED")
    assert stored.source == RuleSource.MODEL
    assert stored.confidence_score == Decimal("0.8")
    assert stored.model_version == "test-model"
    assert stored.rule_metadata["thresholdValue"] == 680

    call = provider.calls[0]
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 800
    assert call["json_mode"] is True
    assert "decision: APPROVED" in call["user_prompt"]
    assert "decision: REJECTED" in call["user_prompt"]


@pytest.mark.asyncio
async def test_code_fenced_reply_is_accepted(db_session, history):
    fenced = "```json\n" + json.dumps({"rules": [VALID_RULE]}) + "\n```"

    response = await inference_service(db_session, FakeLLMProvider(reply=fenced)).propose_rules()

    assert len(response.persisted) == 1


@pytest.mark.asyncio
async def test_reply_without_rules_array(db_session, history):
    response = await inference_service(
        db_session, FakeLLMProvider(reply='{"suggestions": []}')
    ).propose_rules()

    assert response.message == "Model response missing rules array"
    assert response.raw_model_response == '{"suggestions": []}'


@pytest.mark.asyncio
async def test_unparseable_reply(db_session, history):
    response = await inference_service(
        db_session, FakeLLMProvider(reply="not json")
    ).propose_rules()

    assert response.message.startswith("Failed to parse model response")
    assert response.persisted == []


@pytest.mark.asyncio
async def test_inferred_rules_take_part_in_decisions(db_session, history):
    provider = FakeLLMProvider(reply=json.dumps({"rules": [VALID_RULE]}))
    await inference_service(db_session, provider).propose_rules()

    active = await RuleStore(db_session).get_active_rules()

    assert [r.rule_name for r in active] == ["MINIMUM_CREDIT_SCORE_INFERRED"]
