"""Unit tests for the LLM provider backends"""

import json

import httpx
import pytest
import respx

from app.core.enums import LLMProviderName
from app.core.exceptions import DecisionEvaluationError, LLMConfigurationError
from app.services.llm.providers import OllamaProvider, OpenAIProvider, build_provider

OLLAMA_URL = "http://ollama.test"
OPENAI_URL = "http://openai.test/v1"


def completion(content: str) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-4",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_without_key_is_unavailable(self):
        provider = OpenAIProvider(api_key="")

        assert not await provider.is_available()
        with pytest.raises(LLMConfigurationError):
            await provider.chat("gpt-4", "system", "user")

    @pytest.mark.asyncio
    async def test_chat_returns_content(self):
        provider = OpenAIProvider(api_key="sk-test", base_url=OPENAI_URL)

        with respx.mock(base_url=OPENAI_URL, assert_all_mocked=True) as router:
            route = router.post("/chat/completions").respond(
                200, json=completion('{"decision": "APPROVED"}')
            )
            content = await provider.chat("gpt-4", "system", "user", json_mode=True)

        assert content == '{"decision": "APPROVED"}'
        body = json.loads(route.calls.last.request.content)
        assert body["response_format"] == {"type": "json_object"}
        assert body["messages"][0] == {"role": "system", "content": "system"}

    @pytest.mark.asyncio
    async def test_rate_limit_maps_to_evaluation_error(self):
        provider = OpenAIProvider(api_key="sk-test", base_url=OPENAI_URL)

        with respx.mock(base_url=OPENAI_URL, assert_all_mocked=True) as router:
            router.post("/chat/completions").respond(
                429, json={"error": {"message": "slow down", "type": "rate_limit"}}
            )
            with pytest.raises(DecisionEvaluationError):
                await provider.chat("gpt-4", "system", "user")

    def test_requests_go_through_httpx_client(self):
        provider = OpenAIProvider(api_key="sk-test", base_url=OPENAI_URL, timeout=5.0)

        assert isinstance(provider.client._client, httpx.AsyncClient)
        assert provider.client._client.timeout == httpx.Timeout(5.0)


class TestOllamaProvider:
    @pytest.mark.asyncio
    async def test_chat_posts_non_streaming_request(self):
        provider = OllamaProvider(base_url=OLLAMA_URL, timeout=1.0)

        with respx.mock(base_url=OLLAMA_URL, assert_all_mocked=True) as router:
            route = router.post("/api/chat").respond(
                200, json={"message": {"role": "assistant", "content": "REJECTED"}}
            )
            content = await provider.chat(
                "llama3", "system", "user", temperature=0.2, max_tokens=800, json_mode=True
            )

        assert content == "REJECTED"
        body = json.loads(route.calls.last.request.content)
        assert body["stream"] is False
        assert body["format"] == "json"
        assert body["options"] == {"temperature": 0.2, "num_predict": 800}

    @pytest.mark.asyncio
    async def test_chat_errors_map_to_evaluation_error(self):
        provider = OllamaProvider(base_url=OLLAMA_URL, timeout=1.0)

        with respx.mock(base_url=OLLAMA_URL, assert_all_mocked=True) as router:
            router.post("/api/chat").respond(200, json={"unexpected": True})
            with pytest.raises(DecisionEvaluationError):
                await provider.chat("llama3", "system", "user")

    @pytest.mark.asyncio
    async def test_availability_check(self):
        provider = OllamaProvider(base_url=OLLAMA_URL, timeout=1.0)

        with respx.mock(base_url=OLLAMA_URL, assert_all_mocked=True) as router:
            router.get("/api/tags").respond(200, json={"models": []})
            assert await provider.is_available()

        with respx.mock(base_url=OLLAMA_URL, assert_all_mocked=True) as router:
            router.get("/api/tags").mock(side_effect=httpx.ConnectError("refused"))
            assert not await provider.is_available()

    @pytest.mark.asyncio
    async def test_list_models(self):
        provider = OllamaProvider(base_url=OLLAMA_URL, timeout=1.0)
        tags = {"models": [{"name": "llama3.2:latest", "size": 1}, {"name": "mistral:7b", "size": 2}]}

        with respx.mock(base_url=OLLAMA_URL, assert_all_mocked=True) as router:
            router.get("/api/tags").respond(200, json=tags)
            assert await provider.list_models() == ["llama3.2:latest", "mistral:7b"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "side_effect",
        [httpx.Response(500), httpx.ConnectError("refused"), httpx.Response(200, json=["x"])],
    )
    async def test_list_models_errors_map_to_evaluation_error(self, side_effect):
        provider = OllamaProvider(base_url=OLLAMA_URL, timeout=1.0)

        with respx.mock(base_url=OLLAMA_URL, assert_all_mocked=True) as router:
            router.get("/api/tags").mock(side_effect=[side_effect])
            with pytest.raises(DecisionEvaluationError):
                await provider.list_models()


def test_build_provider_selects_backend():
    assert isinstance(build_provider(LLMProviderName.OLLAMA), OllamaProvider)
    assert isinstance(build_provider(LLMProviderName.OPENAI), OpenAIProvider)
