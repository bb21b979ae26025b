import logging
from typing import Protocol

import openai

from domain.errors import ModelUnavailableError


logger = logging.getLogger(__name__)


DEFAULT_MODEL = "gpt-4o-mini"
TIMEOUT = 30
MAX_TOKENS = 3000


class ModelClient(Protocol):
    async def complete(self, prompt: str) -> str:
        ...


def openai_client_factory(
    token: str | None = None,
    *,
    base_url: str | None = None,
    timeout: float = TIMEOUT,
) -> openai.AsyncClient:
    return openai.AsyncClient(api_key=token, base_url=base_url, timeout=timeout)


async def quick_chat(
    msg: str,
    *,
    openai_client: openai.AsyncClient,
    model: str | None = None,
    max_tokens: int = MAX_TOKENS,
) -> str:
    model = DEFAULT_MODEL if model is None else model
    resp = await openai_client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": msg}],
        max_tokens=max_tokens,
    )
    if not resp.choices:
        return ""
    return resp.choices[0].message.content or ""


class OpenAIModelClient:
    """Text completion against an OpenAI compatible chat endpoint.

    Whatever goes wrong on the way out comes back as `ModelUnavailableError`.
    The SDK's own retries still apply.
    """

    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        model: str | None = None,
        max_tokens: int = MAX_TOKENS,
    ) -> None:
        self.openai_client = (
            openai_client_factory() if openai_client is None else openai_client
        )
        self.model = DEFAULT_MODEL if model is None else model
        self.max_tokens = max_tokens

    async def complete(self, prompt: str) -> str:
        try:
            return await quick_chat(
                prompt,
                openai_client=self.openai_client,
                model=self.model,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            logger.error("Model call failed: %r", e)
            raise ModelUnavailableError("Model call failed.") from e

    async def close(self) -> None:
        await self.openai_client.close()
