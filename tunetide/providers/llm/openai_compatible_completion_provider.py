"""OpenAI-compatible text-completion provider adapter.

Uses the legacy ``/v1/completions`` endpoint (plain prompt in, text out)
that vLLM and most self-hosted servers expose.  The ``openai`` client is
pointed at the configured base URL, the same way a local Ollama or vLLM
server is reached through the OpenAI SDK.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from tunetide.config.settings import Settings
from tunetide.interfaces.text_generation_provider import ITextGenerationProvider
from tunetide.utils.errors import ProviderUnavailableError, TextGenerationError

logger = structlog.get_logger(logger_name=__name__)


class OpenAICompatibleCompletionProvider(ITextGenerationProvider):
    """Text generation through an OpenAI-compatible completions API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.text_generation_base_url.rstrip("/")
        self._model = settings.text_generation_model
        self._client = openai.AsyncOpenAI(
            base_url=self._base_url,
            api_key=settings.text_generation_api_key or "not-needed",
            timeout=settings.text_generation_timeout_seconds,
            max_retries=0,
        )

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 100,
        temperature: float = 0.7,
        stop: list[str] | None = None,
    ) -> str:
        try:
            response = await self._client.completions.create(
                model=self._model,
                prompt=prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                stop=stop,
            )
        except (openai.APITimeoutError, openai.APIConnectionError) as exc:
            raise ProviderUnavailableError(
                message=f"Completion endpoint unreachable at {self._base_url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise TextGenerationError(
                message=f"Completion API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.choices:
            raise TextGenerationError(
                message="Completion endpoint returned no choices",
                provider_name=self.get_provider_name(),
            )
        text = (response.choices[0].text or "").strip()
        if not text:
            raise TextGenerationError(
                message="Completion endpoint returned empty text",
                provider_name=self.get_provider_name(),
            )
        logger.info("text_completion", model=self._model, chars=len(text))
        return text

    def get_provider_name(self) -> str:
        return "openai_compatible_completion"

    def is_available(self) -> bool:
        return bool(self._base_url and self._model)

    async def check_health(self) -> bool:
        if not self.is_available():
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self._base_url}/models")
                return response.status_code == 200
        except httpx.HTTPError:
            return False
