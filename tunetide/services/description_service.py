"""Natural-language song descriptions.

Songs are embedded from their title, artist, album, genre *and* a short
free-text description of mood, energy and style, which is what lets a query
like "need a party song" land near the right tracks.  When a song has no
description, one is generated by the completion model; if that fails, a
fixed template is used so indexing never stalls on text generation.
"""

from __future__ import annotations

import asyncio

from tunetide.interfaces.text_generation_provider import ITextGenerationProvider
from tunetide.models.song import Song
from tunetide.utils.logging import get_logger

_MAX_TOKENS = 100
_TEMPERATURE = 0.7
# The completions API accepts at most four stop sequences.
_STOP_SEQUENCES = ["\n\n", ".", "!", "?"]


def build_description_prompt(song: Song) -> str:
    """Return the completion prompt asking for a description of *song*."""
    return (
        "Generate a natural language description for this song that captures "
        "its mood, energy, and style.\n\n"
        f'Song: "{song.title}" by {song.artist_name}\n'
        f"Album: {song.album_title or 'Unknown Album'}\n"
        f"Genre: {song.genre or 'Unknown Genre'}\n\n"
        "Write a description that would help someone find this song when "
        "searching with natural language queries like \"I'm feeling sad\" or "
        '"need a party song". Focus on the emotional tone, energy level, and '
        "style of the music.\n\n"
        "Description:"
    )


def template_description(song: Song) -> str:
    """Fallback description used when generation is unavailable."""
    return f"A {song.genre or 'music'} song by {song.artist_name}"


class DescriptionService:
    """Returns an existing description or produces a new one."""

    def __init__(
        self,
        text_generator: ITextGenerationProvider | None,
        timeout: float = 20.0,
    ) -> None:
        self._generator = text_generator
        self._timeout = timeout
        self._logger = get_logger(__name__)

    async def ensure_description(self, song: Song) -> str:
        """Return ``song.description`` if set, else generate one.

        Never raises; the template description is the last resort.
        """
        if song.has_description:
            return song.description.strip()
        return await self.generate_description(song)

    async def generate_description(self, song: Song) -> str:
        if self._generator is None or not self._generator.is_available():
            return template_description(song)

        try:
            text = await asyncio.wait_for(
                self._generator.generate(
                    build_description_prompt(song),
                    max_tokens=_MAX_TOKENS,
                    temperature=_TEMPERATURE,
                    stop=_STOP_SEQUENCES,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            self._logger.warning("description_timeout", song_id=song.id, timeout=self._timeout)
            return template_description(song)
        except Exception as exc:
            self._logger.warning("description_generation_failed", song_id=song.id, error=str(exc))
            return template_description(song)

        text = text.strip()
        if not text:
            return template_description(song)
        self._logger.info("description_generated", song_id=song.id, chars=len(text))
        return text

    async def check_health(self) -> bool:
        if self._generator is None:
            return False
        try:
            return await self._generator.check_health()
        except Exception as exc:
            self._logger.warning("text_generation_health_check_failed", error=str(exc))
            return False
