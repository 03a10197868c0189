import logging
from collections.abc import Iterable

from catalog_search.errors import SeedItemFailure
from catalog_search.ingestion.catalog import MENU_ITEMS
from catalog_search.ingestion.embedder import SentenceEmbedderABC
from catalog_search.ingestion.models import CatalogEntry
from catalog_search.ingestion.vector_store import VectorStoreABC

logger = logging.getLogger(__name__)


class CatalogSeeder:
    """Writes the canonical catalog, with embeddings, into a vector store.

    Seeding is not transactional: the first entry that fails stops the run and
    entries already written stay in the store. Entries whose key already exists
    are overwritten; nothing is deleted.
    """

    def __init__(
        self,
        entries: Iterable[CatalogEntry] = MENU_ITEMS,
        key_prefix: str = "item:",
        vector_field: str = "embedding",
    ):
        self.entries = list(entries)
        self.key_prefix = key_prefix
        self.vector_field = vector_field

    def seed(self, store: VectorStoreABC, embedder: SentenceEmbedderABC) -> int:
        logger.info("Seeding %d catalog entries...", len(self.entries))
        for entry in self.entries:
            try:
                embedding = embedder.embed_text(entry.embedding_text())
                fields = entry.model_dump(exclude={"embedding"})
                fields[self.vector_field] = embedding
                store.put_document(self.key_prefix, entry.key, fields)
            except Exception as e:
                raise SeedItemFailure(entry.key, e) from e
            logger.debug("Seeded %s%s", self.key_prefix, entry.key)
        logger.info("Catalog seeded with %d entries.", len(self.entries))
        return len(self.entries)
