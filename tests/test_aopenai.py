from types import SimpleNamespace
from typing import Any

import httpx
import openai
import pytest

from domain.aopenai import OpenAIModelClient
from domain.errors import ModelUnavailableError


class FakeCompletions:
    def __init__(self, result: Any) -> None:
        self.result = result
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def fake_openai_client(result: Any) -> Any:
    completions = FakeCompletions(result)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def completion(content: str | None) -> Any:
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


@pytest.mark.asyncio
async def test_complete_sends_one_user_message() -> None:
    client = fake_openai_client(completion("| Ingredient | Quantity |"))
    model = OpenAIModelClient(client, model="test-model")

    got = await model.complete("Recipe for tea")

    assert got == "| Ingredient | Quantity |"
    (call,) = client.chat.completions.calls
    assert call["model"] == "test-model"
    assert call["messages"] == [{"role": "user", "content": "Recipe for tea"}]


@pytest.mark.asyncio
async def test_missing_content_is_empty_text() -> None:
    model = OpenAIModelClient(fake_openai_client(completion(None)))
    assert await model.complete("Recipe for tea") == ""


@pytest.mark.parametrize(
    "exc",
    (
        openai.APIConnectionError(request=REQUEST),
        openai.APITimeoutError(request=REQUEST),
        openai.RateLimitError(
            "quota",
            response=httpx.Response(429, request=REQUEST),
            body=None,
        ),
    ),
)
@pytest.mark.asyncio
async def test_sdk_errors_become_model_unavailable(exc: Exception) -> None:
    model = OpenAIModelClient(fake_openai_client(exc))

    with pytest.raises(ModelUnavailableError):
        await model.complete("Recipe for tea")
