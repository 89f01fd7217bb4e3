"""cratedigger ingestion worker entry point.

Wires together the Last.fm provider, the Ollama embedding provider, the
ChromaDB album collection and the ingestion scheduler, then runs the
scheduler until SIGINT/SIGTERM.  Settings come from ``.env`` / environment
variables; sweep behaviour comes from ``config/config.yaml``.

Run with::

    python -m src.main
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
import sys

import httpx
import structlog

from src.config.loader import DiggingConfig, load_digging_config
from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.vector_store_provider import IVectorStoreProvider
from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from src.providers.music_db.lastfm_provider import LastFmProvider
from src.providers.vector_store.chromadb_provider import ChromaDBProvider
from src.services.ingestion.album_ingestor import AlbumIngestor
from src.services.ingestion.scheduler import IngestionScheduler
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component builders
# ---------------------------------------------------------------------------


def build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """Return the nomic-embed-text provider (768-dim, via Ollama)."""
    provider = NomicEmbeddingProvider(settings=app_settings)
    if not provider.is_available():
        # Not fatal: Ollama often starts after the worker.  Albums are
        # skipped until it answers.
        _logger.warning("embedding_provider_unreachable", base_url=app_settings.ollama_base_url)
    return provider


def build_vector_store(app_settings: Settings) -> IVectorStoreProvider:
    """Open (or create) the ChromaDB album collection."""
    return ChromaDBProvider(
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.chromadb_collection,
        dimension=app_settings.embedding_dimension,
    )


def build_scheduler(
    app_settings: Settings,
    digging: DiggingConfig,
    http_client: httpx.AsyncClient,
    embedding_provider: IEmbeddingProvider,
    vector_store: IVectorStoreProvider,
    stop_event: asyncio.Event | None = None,
) -> IngestionScheduler:
    """Assemble the scheduler and its per-album ingestor.

    Raises:
        ConfigurationError: If no Last.fm API key is configured.
    """
    if not digging.api_key:
        raise ConfigurationError(
            message="LASTFM_API_KEY is not set; the ingestion worker cannot start",
            provider_name="lastfm",
        )

    metadata_provider = LastFmProvider(
        http_client=http_client,
        api_key=digging.api_key,
        base_url=app_settings.lastfm_base_url,
        page_size=digging.page_size,
        timeout=digging.http_timeout_seconds,
    )
    ingestor = AlbumIngestor(
        metadata_provider=metadata_provider,
        embedding_provider=embedding_provider,
        vector_store=vector_store,
    )
    return IngestionScheduler(
        config=digging,
        metadata_provider=metadata_provider,
        ingestor=ingestor,
        vector_store=vector_store,
        stop_event=stop_event,
    )


def _install_signal_handlers(scheduler: IngestionScheduler) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # add_signal_handler is unavailable on Windows event loops.
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, scheduler.stop)


# ---------------------------------------------------------------------------
# Worker
# ---------------------------------------------------------------------------


async def run_worker(app_settings: Settings) -> None:
    """Build every component and run the scheduler until stopped.

    The API key is checked before anything else is opened, so a
    half-configured worker never starts.
    """
    app_settings.require_api_key()
    digging = load_digging_config(app_settings)
    vector_store = build_vector_store(app_settings)
    embedding_provider = build_embedding_provider(app_settings)

    async with httpx.AsyncClient(timeout=app_settings.http_timeout_seconds) as http_client:
        scheduler = build_scheduler(
            app_settings, digging, http_client, embedding_provider, vector_store
        )
        _install_signal_handlers(scheduler)
        _logger.info(
            "worker_startup",
            version="0.1.0",
            environment=app_settings.app_env,
            embedding=embedding_provider.get_provider_name(),
            vector_store=vector_store.get_provider_name(),
            tags=len(digging.tags),
        )
        await scheduler.run()

    _logger.info("worker_shutdown", message="HTTP client closed")


def main() -> None:
    app_settings = Settings()
    configure_logging(
        log_level=app_settings.log_level,
        json_output=(app_settings.app_env == "production"),
        app_env=app_settings.app_env,
    )
    try:
        asyncio.run(run_worker(app_settings))
    except ConfigurationError as exc:
        _logger.error("worker_startup_failed", error=str(exc))
        sys.exit(2)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
