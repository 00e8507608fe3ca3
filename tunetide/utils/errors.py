"""Custom exception hierarchy for TuneTide.

All application exceptions inherit from :class:`TuneTideError`, which
carries an optional ``provider_name`` so log lines can identify which
external service (e.g. "openai_embedding", "chromadb", "sqlite_catalog")
caused the failure.

    TuneTideError  (base)
    +-- ConfigurationError       (startup / invalid tuning values)
    +-- ProviderUnavailableError (external service down / unreachable)
    +-- EmbeddingError           (embedding endpoint failure)
    +-- TextGenerationError      (description generation failure)
    +-- VectorIndexError         (vector index read/write failure)
    +-- CatalogError             (relational store failure)
    +-- InvalidQueryError        (caller supplied an unusable query)

Providers raise these; the service that owns a fallback catches them.
Only ``InvalidQueryError`` is meant to reach a synchronous caller.
"""


class TuneTideError(Exception):
    """Base exception for all TuneTide errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[chromadb] query failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class ConfigurationError(TuneTideError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(TuneTideError):
    """Raised when an external service is unreachable or timed out."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(TuneTideError):
    """Raised when the embedding endpoint fails or returns an unusable vector.

    Also covers the case where the served model does not support
    embeddings at all.
    """

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class TextGenerationError(TuneTideError):
    """Raised when the text-generation endpoint fails or returns no text."""

    def __init__(
        self,
        message: str = "Text generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VectorIndexError(TuneTideError):
    """Raised when a vector index operation fails."""

    def __init__(
        self,
        message: str = "Vector index operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CatalogError(TuneTideError):
    """Raised when the relational catalog store fails."""

    def __init__(
        self,
        message: str = "Catalog operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Caller errors
# ---------------------------------------------------------------------------

class InvalidQueryError(TuneTideError):
    """Raised when a search query or limit cannot be served (e.g. blank text)."""

    def __init__(
        self,
        message: str = "Search query is required",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
