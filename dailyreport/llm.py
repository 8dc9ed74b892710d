"""OpenAI chat-completions wrapper used for the monthly report rewrite."""

from __future__ import annotations

from dataclasses import dataclass

from openai import OpenAI

from dailyreport.config import Config
from dailyreport.exceptions import GenerationError


@dataclass(slots=True)
class LLM:
    """Lightweight wrapper around OpenAI chat completions to minimise boilerplate."""

    client: OpenAI
    model: str

    def __call__(self, messages: list[dict[str, str]], *, max_tokens: int = 2000, temperature: float = 0.3) -> str:
        resp = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if not resp.choices:
            raise GenerationError("Model returned no choices")
        return (resp.choices[0].message.content or "").strip()


def build_llm(config: Config) -> LLM | None:
    """Client for ``config``, or ``None`` when no API key is configured.

    Requests are bounded by ``config.request_timeout`` and never retried.
    """
    if not config.api_key:
        return None
    client = OpenAI(
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.request_timeout,
        max_retries=0,
    )
    return LLM(client, config.model_id)
