# =============================================================================
# tunetide/cli/__init__.py -- CLI Package
# =============================================================================
#
# Operator tooling for a TuneTide deployment, run as ``python -m tunetide.cli``.
# Subcommands cover schema creation, recording plays, reading and rebuilding
# recommendation caches, natural-language search, indexing (single song,
# full backfill, missing-description backfill) and a health probe.
#
# Heavy imports (chromadb, openai) are deferred into the command handlers so
# ``--help`` stays fast.
# =============================================================================

"""Command-line tools for TuneTide (``python -m tunetide.cli``)."""
