"""Utility modules for TuneTide.

- **errors** -- exception hierarchy rooted at ``TuneTideError``.
- **logging** -- structlog setup with console/JSON dual rendering.
- **text** -- tokenisation and song-document assembly used by the search
  and indexing paths.
"""

from tunetide.utils.errors import (
    CatalogError,
    ConfigurationError,
    EmbeddingError,
    InvalidQueryError,
    ProviderUnavailableError,
    TextGenerationError,
    TuneTideError,
    VectorIndexError,
)
from tunetide.utils.logging import configure_logging, get_logger
from tunetide.utils.text import build_song_text, tokenize

__all__ = [
    "CatalogError",
    "ConfigurationError",
    "EmbeddingError",
    "InvalidQueryError",
    "ProviderUnavailableError",
    "TextGenerationError",
    "TuneTideError",
    "VectorIndexError",
    "build_song_text",
    "configure_logging",
    "get_logger",
    "tokenize",
]
