"""Operator CLI for the recommendation and search pipeline.

Usage::

    python -m tunetide.cli init-db
    python -m tunetide.cli play --user 1 --song 42
    python -m tunetide.cli recommend --user 1 --limit 10
    python -m tunetide.cli regenerate --user 1
    python -m tunetide.cli profile --user 1
    python -m tunetide.cli search "need a party song" --limit 5
    python -m tunetide.cli index-song 42
    python -m tunetide.cli index-all
    python -m tunetide.cli describe-missing
    python -m tunetide.cli health

Exit status is 0 on success and 1 on invalid input (unknown song, blank
query, non-positive limit).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from tunetide.config.settings import Settings
from tunetide.utils.errors import InvalidQueryError, TuneTideError


async def _handle_init_db(args: argparse.Namespace, components: dict[str, Any]) -> int:
    print(f"Database ready: {components['settings'].database_path}")
    print(f"Vector collection ready: {components['settings'].chromadb_collection}")
    return 0


async def _handle_play(args: argparse.Namespace, components: dict[str, Any]) -> int:
    record = await components["play_tracker"].record_play(args.user, args.song)
    if record is None:
        print(f"Error: song {args.song} not found.", file=sys.stderr)
        return 1
    print(f"Recorded play #{record.id}: user {record.user_id} -> song {record.song_id}")
    return await _handle_recommend(args, components)


async def _handle_recommend(args: argparse.Namespace, components: dict[str, Any]) -> int:
    limit = getattr(args, "limit", 20)
    if limit < 1:
        print("Error: --limit must be positive.", file=sys.stderr)
        return 1
    recs = await components["recommendation_service"].get_recommendations(args.user, limit)
    if not recs:
        print(f"No recommendations cached for user {args.user}.")
        return 0
    print(f"Recommendations for user {args.user}:")
    for rank, rec in enumerate(recs, start=1):
        print(
            f"  {rank:>2}. [{rec.score:.2f}] {rec.song.title} - {rec.song.artist_name}"
            f"  ({rec.reason})"
        )
    return 0


async def _handle_regenerate(args: argparse.Namespace, components: dict[str, Any]) -> int:
    ranked = await components["recommendation_service"].regenerate(args.user)
    print(f"Rebuilt cache for user {args.user}: {len(ranked)} songs.")
    return 0


async def _handle_profile(args: argparse.Namespace, components: dict[str, Any]) -> int:
    service = components["recommendation_service"]
    artists = await service.get_top_artists(args.user)
    genres = await service.get_top_genres(args.user)
    print(f"Top artists for user {args.user}:")
    for artist in artists:
        print(f"  {artist.artist_name:<30} {artist.score:.2f}  ({artist.play_count} plays)")
    print(f"Top genres for user {args.user}:")
    for genre in genres:
        print(f"  {genre.genre:<30} {genre.score:.2f}  ({genre.play_count} plays)")
    return 0


async def _handle_search(args: argparse.Namespace, components: dict[str, Any]) -> int:
    try:
        response = await components["search_service"].search_natural_language(
            args.query, args.limit
        )
    except InvalidQueryError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"{response.count} result(s) via {response.source} search:")
    for rank, song in enumerate(response.songs, start=1):
        genre = f" [{song.genre}]" if song.genre else ""
        print(f"  {rank:>2}. {song.title} - {song.artist_name}{genre}")
    return 0


async def _handle_index_song(args: argparse.Namespace, components: dict[str, Any]) -> int:
    result = await components["song_indexer"].reindex_song(args.song_id)
    if result is None:
        print(f"Error: song {args.song_id} not found.", file=sys.stderr)
        return 1
    action = "created" if result.created else "updated"
    print(f"Song {result.song_id} {action} (record {result.record_id}).")
    if result.description_generated:
        print("  Description generated.")
    if result.embedding_fallback:
        print("  Warning: embedding service unavailable, hash embedding used.")
    return 0


async def _handle_index_all(args: argparse.Namespace, components: dict[str, Any]) -> int:
    report = await components["song_indexer"].index_all_songs()
    _print_report("Indexing", report)
    return 0


async def _handle_describe_missing(args: argparse.Namespace, components: dict[str, Any]) -> int:
    report = await components["song_indexer"].index_missing_descriptions()
    _print_report("Description backfill", report)
    return 0


async def _handle_health(args: argparse.Namespace, components: dict[str, Any]) -> int:
    status = await components["search_service"].health()
    print(json.dumps(status, indent=2))
    return 0


def _print_report(label: str, report: Any) -> None:
    print(f"{label} complete:")
    print(f"  Songs:   {report.total}")
    print(f"  Indexed: {report.indexed}")
    print(f"  Failed:  {report.failed}")
    if report.failed_song_ids:
        print(f"  Failed ids: {', '.join(str(i) for i in report.failed_song_ids)}")


_HANDLERS = {
    "init-db": _handle_init_db,
    "play": _handle_play,
    "recommend": _handle_recommend,
    "regenerate": _handle_regenerate,
    "profile": _handle_profile,
    "search": _handle_search,
    "index-song": _handle_index_song,
    "index-all": _handle_index_all,
    "describe-missing": _handle_describe_missing,
    "health": _handle_health,
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tunetide",
        description="TuneTide recommendation and search operator tools.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables and the vector collection")

    play_parser = subparsers.add_parser("play", help="Record a play and show fresh recommendations")
    play_parser.add_argument("--user", type=int, required=True)
    play_parser.add_argument("--song", type=int, required=True)

    rec_parser = subparsers.add_parser("recommend", help="Show a user's cached recommendations")
    rec_parser.add_argument("--user", type=int, required=True)
    rec_parser.add_argument("--limit", type=int, default=20)

    regen_parser = subparsers.add_parser("regenerate", help="Rebuild a user's recommendations")
    regen_parser.add_argument("--user", type=int, required=True)

    profile_parser = subparsers.add_parser("profile", help="Show a user's top artists and genres")
    profile_parser.add_argument("--user", type=int, required=True)

    search_parser = subparsers.add_parser("search", help="Natural-language song search")
    search_parser.add_argument("query")
    search_parser.add_argument("--limit", type=int, default=10)

    index_parser = subparsers.add_parser("index-song", help="(Re)index one song")
    index_parser.add_argument("song_id", type=int)

    subparsers.add_parser("index-all", help="Index every song in the catalog")
    subparsers.add_parser("describe-missing", help="Describe and index songs lacking a description")
    subparsers.add_parser("health", help="Probe the vector index and model endpoints")

    return parser


async def _run_command(args: argparse.Namespace, app_settings: Settings) -> int:
    # Deferred: pulls in chromadb and openai.
    from tunetide.main import build_components, shutdown, startup

    components = build_components(app_settings)
    await startup(components, start_workers=False)
    try:
        return await _HANDLERS[args.command](args, components)
    finally:
        await shutdown(components)


def run(argv: list[str] | None = None, app_settings: Settings | None = None) -> int:
    """Parse *argv*, run the command and return its exit status."""
    from tunetide.utils.logging import configure_logging

    args = _build_parser().parse_args(argv)
    app_settings = app_settings or Settings()
    configure_logging(log_level=app_settings.log_level)

    try:
        return asyncio.run(_run_command(args, app_settings))
    except TuneTideError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
