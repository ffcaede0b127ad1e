"""Shared builders and fakes for the test suite."""

from decimal import Decimal
from typing import List, Optional

from app.core.enums import BureauStatus
from app.models.schemas.decision import BureauResult, DecisionRequest
from app.services.rule_engine import RuleDefinition
from app.services.rule_store import DEFAULT_RULES


class FakeLLMProvider:
    """In-memory LLM provider returning a canned reply."""

    name = "fake"

    def __init__(
        self,
        reply: str = "",
        error: Optional[Exception] = None,
        available: bool = True,
        models: Optional[List[str]] = None,
    ):
        self.reply = reply
        self.error = error
        self.available = available
        self.models = models or []
        self.calls: List[dict] = []
        self.availability_checks = 0

    async def chat(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.1,
        max_tokens: int = 500,
        json_mode: bool = False,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "json_mode": json_mode,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply

    async def is_available(self) -> bool:
        self.availability_checks += 1
        return self.available

    async def list_models(self) -> List[str]:
        return list(self.models)


def bureau(name: str, score=None, status: BureauStatus = BureauStatus.SUCCESS) -> BureauResult:
    return BureauResult(
        bureau_name=name,
        credit_score=Decimal(str(score)) if score is not None else None,
        status=status,
    )


def failed(name: str) -> BureauResult:
    return BureauResult(
        bureau_name=name,
        status=BureauStatus.FAILED,
        error_message="Service unavailable",
    )


def make_request(
    request_id: str = "req-1",
    loan_amount="50000",
    bureaus: Optional[List[BureauResult]] = None,
    **extra,
) -> DecisionRequest:
    if bureaus is None:
        bureaus = [bureau("EXPERIAN", 720), bureau("EQUIFAX", 700)]
    return DecisionRequest(
        request_id=request_id,
        loan_amount=Decimal(str(loan_amount)),
        bureau_responses=bureaus,
        **extra,
    )


def default_rule_definitions() -> List[RuleDefinition]:
    return [RuleDefinition(**fields) for fields in DEFAULT_RULES]
