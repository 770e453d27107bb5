from __future__ import annotations

import logging
from typing import Optional, Sequence

from openai import AsyncOpenAI

from app.ai.types import ChatMessage, EvaluatorConfigError

logger = logging.getLogger(__name__)


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


class OpenAIEvaluator:
    """JSON-mode chat completions against the OpenAI API.

    A missing key does not fail construction; it surfaces as
    ``EvaluatorConfigError`` on the first call.
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        max_retries: int = 0,
    ):
        self.model = model
        key = (api_key or "").strip()
        self._client: AsyncOpenAI | None = None
        if not key or _looks_like_placeholder(key):
            logger.warning("openai_evaluator_unconfigured model=%s", model)
            return

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=base_url or None,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete_json(
        self, messages: Sequence[ChatMessage], *, temperature: float
    ) -> str:
        if self._client is None:
            raise EvaluatorConfigError("OPENAI_API_KEY is missing")

        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": m.role, "content": m.content} for m in messages],
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
