"""Album ingestion: description building, per-album pipeline, scheduler, seeding."""

from src.services.ingestion.album_ingestor import AlbumIngestor, IngestOutcome
from src.services.ingestion.description_builder import build_description
from src.services.ingestion.scheduler import IngestionScheduler, SchedulerState, SweepReport
from src.services.ingestion.seed_loader import STARTER_CATALOG, SeedLoader, seed_message

__all__ = [
    "STARTER_CATALOG",
    "AlbumIngestor",
    "IngestOutcome",
    "IngestionScheduler",
    "SchedulerState",
    "SeedLoader",
    "SweepReport",
    "build_description",
    "seed_message",
]
