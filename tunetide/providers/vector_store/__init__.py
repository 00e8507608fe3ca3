"""Vector index implementations."""

from tunetide.providers.vector_store.chromadb_song_index import ChromaDBSongIndex

__all__ = ["ChromaDBSongIndex"]
