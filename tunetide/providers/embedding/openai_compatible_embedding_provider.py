"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`
against any server that speaks the ``/v1/embeddings`` protocol (vLLM,
Infinity, text-embeddings-inference, OpenAI itself).  The base URL, model
and vector dimension all come from :class:`~tunetide.config.settings.Settings`.

Retries are disabled on the client: callers fall back to a local hash
embedding instead of waiting out a retry ladder.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from tunetide.config.settings import Settings
from tunetide.interfaces.embedding_provider import IEmbeddingProvider
from tunetide.utils.errors import EmbeddingError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_OPENAI_BATCH_LIMIT = 2048

# vLLM answers 400/404 with this wording when the served model is a
# generative model started without an embedding task.
_UNSUPPORTED_MARKERS = ("does not support", "not support embedding", "embeddings api")


class OpenAICompatibleEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.embedding_base_url.rstrip("/")
        self._model = settings.embedding_model
        self._dimension = settings.embedding_dimension
        self._timeout = settings.embedding_timeout_seconds
        self._client = openai.AsyncOpenAI(
            base_url=self._base_url,
            # Self-hosted servers ignore the key, but the SDK requires one.
            api_key=settings.embedding_api_key or "not-needed",
            timeout=self._timeout,
            max_retries=0,
        )

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        all_embeddings: list[list[float]] = []
        for start in range(0, len(texts), _OPENAI_BATCH_LIMIT):
            batch = texts[start : start + _OPENAI_BATCH_LIMIT]
            try:
                response = await self._client.embeddings.create(input=batch, model=self._model)
            except (openai.APITimeoutError, openai.APIConnectionError) as exc:
                raise ProviderUnavailableError(
                    message=f"Embedding endpoint unreachable at {self._base_url}: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            except openai.APIStatusError as exc:
                detail = str(exc).lower()
                if any(marker in detail for marker in _UNSUPPORTED_MARKERS):
                    raise EmbeddingError(
                        message=f"Model {self._model} does not support embeddings",
                        provider_name=self.get_provider_name(),
                    ) from exc
                raise EmbeddingError(
                    message=f"Embedding API error ({exc.status_code}): {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            except openai.APIError as exc:
                raise EmbeddingError(
                    message=f"Embedding API error: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

            batch_embeddings = [list(item.embedding) for item in response.data]
            if len(batch_embeddings) != len(batch):
                raise EmbeddingError(
                    message=(
                        f"Embedding endpoint returned {len(batch_embeddings)} vectors "
                        f"for {len(batch)} inputs"
                    ),
                    provider_name=self.get_provider_name(),
                )
            for vector in batch_embeddings:
                if len(vector) != self._dimension:
                    raise EmbeddingError(
                        message=(
                            f"Model {self._model} returned {len(vector)}-dim vectors; "
                            f"index expects {self._dimension}"
                        ),
                        provider_name=self.get_provider_name(),
                    )
            all_embeddings.extend(batch_embeddings)
            logger.debug(
                "embedding_batch",
                model=self._model,
                batch_size=len(batch),
                tokens=response.usage.total_tokens if response.usage else None,
            )
        return all_embeddings

    async def embed_single(self, text: str) -> list[float]:
        result = await self.embed([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "openai_compatible_embedding"

    def is_available(self) -> bool:
        return bool(self._base_url and self._model)

    async def check_health(self) -> bool:
        """Probe ``GET {base_url}/models``; any HTTP 200 counts as healthy."""
        if not self.is_available():
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self._base_url}/models")
                return response.status_code == 200
        except httpx.HTTPError:
            return False
