"""
Primary backend — OpenAI chat completions.
"""

from __future__ import annotations

import httpx
from openai import AsyncOpenAI

from award_interpreter.core.tracing import traceable_step
from award_interpreter.interpretation.base import InterpretationBackend
from award_interpreter.interpretation.prompts import SYSTEM_PROMPT


class OpenAIBackend(InterpretationBackend):
    label = "openai"
    api_key_setting = "OPENAI_API_KEY"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        *,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
        **kwargs,
    ) -> None:
        super().__init__(api_key, model, **kwargs)
        self.base_url = base_url
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=10.0),
            )
        return self._client

    @traceable_step(
        name="openai_generate",
        run_type="llm",
        tags=["interpretation", "llm", "openai"],
    )
    async def generate(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ValueError("OpenAI returned empty content")
        return content
