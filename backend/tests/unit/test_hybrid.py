"""Unit tests for mode dispatch and the hybrid combinator"""

from decimal import Decimal

import pytest

from app.core.enums import DecisionMode, DecisionOutcome
from app.core.exceptions import DecisionEvaluationError
from app.services.hybrid_service import BOTH_APPROVED_REASON, HybridDecisionService
from app.services.llm.decision_adapter import LLMDecisionAdapter
from app.services.rule_engine import ALL_RULES_PASSED
from app.services.signals import AggregatedSignals
from helpers import FakeLLMProvider, bureau, default_rule_definitions, make_request

APPROVE = '{"decision": "APPROVED", "reason": "Looks fine"}'
REJECT = '{"decision": "REJECTED", "reason": "Debt burden too high"}'


def service_for(mode: DecisionMode, provider=None, enabled: bool = True) -> HybridDecisionService:
    return HybridDecisionService(LLMDecisionAdapter(provider, enabled=enabled), mode=mode)


async def decide(service: HybridDecisionService, **request_kwargs):
    request = make_request(**request_kwargs)
    signals = AggregatedSignals.from_request(request)
    return await service.decide(request, signals, default_rule_definitions())


class TestRulesMode:
    @pytest.mark.asyncio
    async def test_rules_mode_ignores_llm(self):
        provider = FakeLLMProvider(reply=REJECT)
        result = await decide(service_for(DecisionMode.RULES, provider))

        assert result.decision == DecisionOutcome.APPROVED
        assert result.reason == ALL_RULES_PASSED
        assert result.credit_score == Decimal("710.00")
        assert result.mode == DecisionMode.RULES
        assert provider.calls == []


class TestLLMMode:
    @pytest.mark.asyncio
    async def test_llm_decides(self):
        result = await decide(service_for(DecisionMode.LLM, FakeLLMProvider(reply=REJECT)))

        assert result.decision == DecisionOutcome.REJECTED
        assert result.reason == "Debt burden too high"
        assert result.mode == DecisionMode.LLM

    @pytest.mark.asyncio
    async def test_disabled_llm_falls_back_to_rules(self):
        result = await decide(service_for(DecisionMode.LLM, FakeLLMProvider(reply=REJECT), enabled=False))

        assert result.decision == DecisionOutcome.APPROVED
        assert result.mode == DecisionMode.RULES

    @pytest.mark.asyncio
    async def test_llm_failure_propagates(self):
        service = service_for(DecisionMode.LLM, FakeLLMProvider(error=RuntimeError("down")))

        with pytest.raises(DecisionEvaluationError):
            await decide(service)


class TestHybridMode:
    @pytest.mark.asyncio
    async def test_both_approve(self):
        result = await decide(service_for(DecisionMode.HYBRID, FakeLLMProvider(reply=APPROVE)))

        assert result.decision == DecisionOutcome.APPROVED
        assert result.reason == BOTH_APPROVED_REASON
        assert result.mode == DecisionMode.HYBRID

    @pytest.mark.asyncio
    async def test_llm_rejects_rules_approve(self):
        result = await decide(service_for(DecisionMode.HYBRID, FakeLLMProvider(reply=REJECT)))

        assert result.decision == DecisionOutcome.REJECTED
        assert result.reason == (
            "Loan rejected: LLM evaluation failed. "
            "Rule reason: All rules passed LLM reason: Debt burden too high"
        )

    @pytest.mark.asyncio
    async def test_rules_reject_llm_approves(self):
        result = await decide(
            service_for(DecisionMode.HYBRID, FakeLLMProvider(reply=APPROVE)),
            bureaus=[bureau("EXPERIAN", 600)],
        )

        assert result.decision == DecisionOutcome.REJECTED
        assert result.reason == (
            "Loan rejected: Rule-based evaluation failed. "
            "Rule reason: Credit score below minimum threshold LLM reason: Looks fine"
        )

    @pytest.mark.asyncio
    async def test_both_reject(self):
        result = await decide(
            service_for(DecisionMode.HYBRID, FakeLLMProvider(reply=REJECT)),
            bureaus=[bureau("EXPERIAN", 600)],
        )

        assert "Rule-based evaluation failed. LLM evaluation failed." in result.reason

    @pytest.mark.asyncio
    async def test_llm_error_falls_back_to_rules(self):
        service = service_for(DecisionMode.HYBRID, FakeLLMProvider(error=RuntimeError("down")))

        result = await decide(service)

        assert result.decision == DecisionOutcome.APPROVED
        assert result.reason == ALL_RULES_PASSED
        assert result.mode == DecisionMode.RULES

    @pytest.mark.asyncio
    async def test_unparseable_reply_falls_back_to_rules(self):
        result = await decide(
            service_for(DecisionMode.HYBRID, FakeLLMProvider(reply="I cannot say.")),
            bureaus=[bureau("EXPERIAN", 600)],
        )

        assert result.decision == DecisionOutcome.REJECTED
        assert result.reason == "Credit score below minimum threshold"
        assert result.mode == DecisionMode.RULES

    @pytest.mark.asyncio
    async def test_unavailable_llm_uses_rules(self):
        result = await decide(
            service_for(DecisionMode.HYBRID, FakeLLMProvider(reply=REJECT, available=False))
        )

        assert result.decision == DecisionOutcome.APPROVED
        assert result.mode == DecisionMode.RULES

    @pytest.mark.asyncio
    async def test_short_form_rejection_is_honoured(self):
        reply = '{"decision": "REJECT", "reason": "Cannot approve: debt too high"}'
        result = await decide(service_for(DecisionMode.HYBRID, FakeLLMProvider(reply=reply)))

        assert result.decision == DecisionOutcome.REJECTED
        assert result.mode == DecisionMode.HYBRID
        assert result.reason.endswith("LLM reason: Cannot approve: debt too high")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", [DecisionMode.HYBRID, DecisionMode.LLM])
    async def test_availability_checked_once_per_decision(self, mode):
        provider = FakeLLMProvider(reply=APPROVE)

        await decide(service_for(mode, provider))

        assert provider.availability_checks == 1
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_unavailable_llm_checked_once(self):
        provider = FakeLLMProvider(reply=REJECT, available=False)

        await decide(service_for(DecisionMode.HYBRID, provider))

        assert provider.availability_checks == 1
        assert provider.calls == []
