# =============================================================================
# src/cli/dig.py -- Operator CLI for the album collection
# =============================================================================
#
# Subcommands:
#
#   run    -- Start the long-running ingestion worker (same as python -m src.main)
#   sweep  -- Run exactly one sweep over the configured tags, no warm-up/cycle
#   seed   -- Load the fixed starter catalog (no Last.fm key needed)
#   stats  -- Print how many albums are stored
#
# Usage examples:
#   python -m src.cli seed
#   python -m src.cli.dig sweep --tags jazz "hip hop"
#   python -m src.cli.dig stats
# =============================================================================

"""Operator CLI for seeding, sweeping and inspecting the album collection.

Usage::

    python -m src.cli.dig seed
    python -m src.cli.dig sweep --tags jazz soul
    python -m src.cli.dig stats
    python -m src.cli.dig run
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx

from src.config.loader import DiggingConfig, clean_tags, load_digging_config
from src.config.settings import Settings
from src.utils.errors import ConfigurationError, CrateDiggerError
from src.utils.logging import configure_logging


async def _handle_seed(app_settings: Settings) -> int:
    from src.main import build_embedding_provider, build_vector_store
    from src.services.ingestion.seed_loader import SeedLoader, seed_message

    loader = SeedLoader(
        embedding_provider=build_embedding_provider(app_settings),
        vector_store=build_vector_store(app_settings),
    )
    count = await loader.seed()
    print(seed_message(count))
    return 0


async def _handle_sweep(args: argparse.Namespace, app_settings: Settings) -> int:
    from src.main import build_embedding_provider, build_scheduler, build_vector_store

    digging = load_digging_config(app_settings)
    if args.tags is not None:
        tags = clean_tags(args.tags)
        if not tags:
            raise ConfigurationError(message="--tags needs at least one non-blank tag")
        digging = DiggingConfig.model_validate({**digging.model_dump(), "tags": tags})

    # Key check first, so nothing is opened for a doomed sweep.
    if not digging.api_key:
        raise ConfigurationError(
            message="LASTFM_API_KEY is not set; cannot sweep Last.fm",
            provider_name="lastfm",
        )

    vector_store = build_vector_store(app_settings)
    embedding_provider = build_embedding_provider(app_settings)
    async with httpx.AsyncClient(timeout=app_settings.http_timeout_seconds) as http_client:
        scheduler = build_scheduler(
            app_settings, digging, http_client, embedding_provider, vector_store
        )
        report = await scheduler.sweep()

    print(
        f"Swept {report.tags} tag(s): {report.stored} stored, "
        f"{report.skipped_embedding} skipped (embedding), "
        f"{report.skipped_incomplete} skipped (incomplete)"
    )
    return 0


async def _handle_stats(app_settings: Settings) -> int:
    from src.main import build_vector_store

    vector_store = build_vector_store(app_settings)
    count = await vector_store.count()
    print(f"Collection '{app_settings.chromadb_collection}': {count} album(s)")
    return 0


async def _handle_run(app_settings: Settings) -> int:
    from src.main import run_worker

    await run_worker(app_settings)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the operator CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.dig",
        description="Seed, sweep and inspect the cratedigger album collection.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("run", help="Run the ingestion worker until interrupted")

    sweep_parser = subparsers.add_parser("sweep", help="Run a single sweep and exit")
    sweep_parser.add_argument(
        "--tags",
        nargs="+",
        default=None,
        help="Override the configured tag list for this sweep",
    )

    subparsers.add_parser("seed", help="Load the starter catalog")
    subparsers.add_parser("stats", help="Show the number of stored albums")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    app_settings = Settings()
    configure_logging(log_level=app_settings.log_level, app_env=app_settings.app_env)

    handlers = {
        "run": lambda: _handle_run(app_settings),
        "sweep": lambda: _handle_sweep(args, app_settings),
        "seed": lambda: _handle_seed(app_settings),
        "stats": lambda: _handle_stats(app_settings),
    }
    try:
        return asyncio.run(handlers[args.command]())
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except CrateDiggerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
