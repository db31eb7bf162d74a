"""
Secondary backend — Google Gemini via google-genai.
"""

from __future__ import annotations

from google import genai

from award_interpreter.core.tracing import traceable_step
from award_interpreter.interpretation.base import InterpretationBackend
from award_interpreter.interpretation.prompts import SYSTEM_PROMPT


class GeminiBackend(InterpretationBackend):
    label = "gemini"
    api_key_setting = "GOOGLE_API_KEY"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        *,
        client: genai.Client | None = None,
        **kwargs,
    ) -> None:
        super().__init__(api_key, model, **kwargs)
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self.api_key,
                # google-genai timeouts are in milliseconds
                http_options=genai.types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._client

    @traceable_step(
        name="gemini_generate",
        run_type="llm",
        tags=["interpretation", "llm", "gemini"],
    )
    async def generate(self, prompt: str) -> str:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=genai.types.GenerateContentConfig(
                system_instruction=SYSTEM_PROMPT,
                temperature=self.temperature,
                max_output_tokens=self.max_tokens,
            ),
        )
        text = response.text
        if not text:
            raise ValueError("Gemini returned empty content")
        return text
