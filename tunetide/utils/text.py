"""Text helpers shared by indexing and lexical search."""

from __future__ import annotations

import re

_TOKEN_RE = re.compile(r"[a-z0-9]+(?:'[a-z]+)?")

# Short English stopword list; mirrors what a full-text "english" parser
# discards so filler words in natural-language queries don't match everything.
STOPWORDS: frozenset[str] = frozenset({
    "a", "about", "an", "and", "are", "as", "at", "be", "but", "by", "for",
    "from", "i", "i'm", "im", "in", "into", "is", "it", "its", "me", "my",
    "of", "on", "or", "so", "some", "something", "that", "the", "this", "to",
    "want", "with", "you",
})


def tokenize(text: str, *, drop_stopwords: bool = True) -> list[str]:
    """Lower-case *text* and split it into word tokens."""
    tokens = _TOKEN_RE.findall(text.lower())
    if drop_stopwords:
        return [t for t in tokens if t not in STOPWORDS]
    return tokens


def build_song_text(
    title: str,
    artist_name: str,
    album_title: str | None,
    genre: str | None,
    description: str | None,
) -> str:
    """Concatenate the searchable fields of a song into one document.

    Missing album/genre/description contribute empty segments so the field
    order stays stable across songs.
    """
    parts = [title, artist_name, album_title or "", genre or "", description or ""]
    return " ".join(parts)
