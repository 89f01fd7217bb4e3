"""One-shot seeding of the album collection with a fixed starter catalog.

Used to bootstrap a fresh install or a demo without waiting for the first
Last.fm sweep.  No Last.fm key is needed: descriptions are hand-written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.models.album import AlbumRecord
from src.utils.identity import album_id

if TYPE_CHECKING:
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


def _starter(artist: str, title: str, description: str) -> AlbumRecord:
    return AlbumRecord(
        id=album_id(artist, title),
        artist=artist,
        title=title,
        description=description,
    )


STARTER_CATALOG: tuple[AlbumRecord, ...] = (
    _starter(
        "Nas",
        "Illmatic",
        "Raw 90s boom-bap hip-hop, gritty new york streets, poetic lyricism, "
        "jazz samples, urban storytelling",
    ),
    _starter(
        "Joy Division",
        "Unknown Pleasures",
        "Post-punk, gothic rock, melancholic, dark atmosphere, industrial textures, "
        "bass-heavy, minimalist",
    ),
    _starter(
        "Portishead",
        "Dummy",
        "Trip-hop, cinematic, noir, bristol sound, haunting female vocals, "
        "spy movie vibes, downtempo, experimental",
    ),
    _starter(
        "Daft Punk",
        "Homework",
        "French house, raw techno, chicago house influence, lo-fi dance, "
        "repetitive beats, funk samples, basement party vibes",
    ),
    _starter(
        "Metallica",
        "Ride the Lightning",
        "Thrash metal, aggressive, fast tempo, complex guitar solos, electric, "
        "angry, 80s metal",
    ),
    _starter(
        "Miles Davis",
        "Kind of Blue",
        "Cool jazz, modal jazz, relaxing, sophisticated, trumpet, saxophone, "
        "smoke-filled lounge vibe, masterpiece",
    ),
    _starter(
        "Fleetwood Mac",
        "Rumours",
        "Soft rock, pop rock, emotional, relationship drama, harmonies, "
        "acoustic guitar, california 70s vibes",
    ),
    _starter(
        "Tame Impala",
        "Currents",
        "Psychedelic pop, synth-pop, dreamy, hazy, psychedelic rock, "
        "introspective, modern indie",
    ),
    _starter(
        "Aphex Twin",
        "Selected Ambient Works 85-92",
        "Ambient techno, idm, electronic, atmospheric, ethereal, warm analog synths, "
        "relaxing focus music",
    ),
    _starter(
        "A Tribe Called Quest",
        "The Low End Theory",
        "Jazz rap, conscious hip-hop, groovy basslines, afrocentric, positive vibes, "
        "90s classic",
    ),
)


def seed_message(count: int) -> str:
    """Return the operator-facing summary for a seeding run."""
    return f"Successfully seeded {count} albums into the crates!"


class SeedLoader:
    """Embeds and upserts :data:`STARTER_CATALOG` (or a custom catalog).

    Vectors are reused where possible: a catalog entry that already carries
    one is stored as-is, and a stored record with the same description keeps
    its vector instead of being re-embedded.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        catalog: tuple[AlbumRecord, ...] | list[AlbumRecord] = STARTER_CATALOG,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._catalog = tuple(catalog)

    async def _vector_for(self, record: AlbumRecord) -> list[float]:
        if record.has_vector:
            return list(record.vector)

        stored = await self._vector_store.get(record.id)
        if stored is not None and stored.has_vector and stored.description == record.description:
            logger.debug("seed_vector_reused", album_id=str(record.id), title=record.title)
            return list(stored.vector)

        logger.info("seed_generating_vector", album_id=str(record.id), title=record.title)
        return await self._embedding_provider.embed_single(record.description)

    async def seed(self) -> int:
        """Ensure the collection exists and upsert every catalog album.

        Returns the number of albums written.  Errors propagate: seeding is
        an operator action, and a partial seed should be visible as a failure.
        """
        await self._vector_store.ensure_collection()

        count = 0
        for entry in self._catalog:
            # Ids are recomputed so hand-built catalogs cannot drift from the key scheme.
            record = entry.model_copy(update={"id": album_id(entry.artist, entry.title)})
            vector = await self._vector_for(record)
            await self._vector_store.upsert(record.model_copy(update={"vector": vector}))
            count += 1

        logger.info("seed_complete", count=count)
        return count
