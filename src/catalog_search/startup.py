"""Startup sequence: connect, load the model, ensure the index, seed if empty."""

import logging
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel

from catalog_search.config import Settings
from catalog_search.errors import (
    CatalogSearchError,
    ConnectionFailure,
    IndexSetupFailure,
    ModelLoadFailure,
)
from catalog_search.ingestion.embedder import SBERTEmbedder, SentenceEmbedderABC
from catalog_search.ingestion.models import (
    IndexSchema,
    SearchAlgorithm,
    StorageLayout,
    VectorEncoding,
)
from catalog_search.ingestion.redis_store import RedisVectorStore
from catalog_search.ingestion.seeder import CatalogSeeder
from catalog_search.ingestion.vector_store import (
    InMemoryVectorStore,
    QdrantVectorStore,
    VectorStoreABC,
)
from catalog_search.retrieval.retriever import Retriever

logger = logging.getLogger(__name__)


class InitState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    MODEL_LOADING = "model_loading"
    MODEL_READY = "model_ready"
    SCHEMA_ENSURED = "schema_ensured"
    POPULATION_CHECKED = "population_checked"
    SEEDING = "seeding"
    SEEDED = "seeded"
    SKIPPED_SEED = "skipped_seed"
    READY = "ready"


class InitReport(BaseModel):
    index_created: bool
    seeded: bool
    document_count: int | None  # None when the store could not report a count


class InitializationSequencer:
    def __init__(
        self,
        store: VectorStoreABC,
        embedder: SentenceEmbedderABC,
        seeder: CatalogSeeder,
        index_name: str = "menu-index",
        schema: IndexSchema | None = None,
        reseed: bool = False,
    ):
        self.store = store
        self.embedder = embedder
        self.seeder = seeder
        self.index_name = index_name
        self.schema = schema or IndexSchema()
        self.reseed = reseed
        self.state = InitState.DISCONNECTED
        self.history: list[InitState] = [InitState.DISCONNECTED]

    def _advance(self, state: InitState) -> None:
        logger.debug("Initialization: %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def run(self) -> InitReport:
        if self.state != InitState.DISCONNECTED:
            raise RuntimeError("Initialization has already run")

        try:
            self.store.connect()
        except ConnectionFailure:
            raise
        except Exception as e:
            raise ConnectionFailure(f"Could not connect to the vector store: {e}") from e
        self._advance(InitState.CONNECTED)

        self._advance(InitState.MODEL_LOADING)
        try:
            self.embedder.load()
        except ModelLoadFailure:
            raise
        except Exception as e:
            raise ModelLoadFailure(f"Could not load the embedding model: {e}") from e
        dim = self.embedder.get_embedding_dimension()
        if dim != self.schema.dim:
            raise ModelLoadFailure(
                f"Embedding model produces {dim}-dimensional vectors, "
                f"index '{self.index_name}' declares {self.schema.dim}"
            )
        self._advance(InitState.MODEL_READY)

        try:
            if self.reseed:
                logger.info("Dropping index '%s' before reseeding.", self.index_name)
                self.store.drop_index(self.index_name)
            index_created = self.store.ensure_index(self.index_name, self.schema)
        except CatalogSearchError:
            raise
        except Exception as e:
            raise IndexSetupFailure(f"Could not set up index '{self.index_name}': {e}") from e
        self._advance(InitState.SCHEMA_ENSURED)

        try:
            count: int | None = self.store.count_documents(self.index_name)
        except Exception as e:
            # An empty, unusable index is worse than a duplicate seed
            logger.error("Error checking index data, seeding anyway: %s", e)
            count = None
        self._advance(InitState.POPULATION_CHECKED)

        seeded = False
        if count:
            logger.info("Index contains %d items. Skipping seed.", count)
            self._advance(InitState.SKIPPED_SEED)
        else:
            logger.info("Index is empty! Starting seeding process...")
            self._advance(InitState.SEEDING)
            written = self.seeder.seed(self.store, self.embedder)
            seeded = True
            if count is not None:
                count = written
            self._advance(InitState.SEEDED)

        self._advance(InitState.READY)
        return InitReport(index_created=index_created, seeded=seeded, document_count=count)


@dataclass
class Components:
    store: VectorStoreABC
    embedder: SentenceEmbedderABC
    seeder: CatalogSeeder
    schema: IndexSchema
    index_name: str
    default_k: int

    def sequencer(self, reseed: bool = False) -> InitializationSequencer:
        return InitializationSequencer(
            self.store,
            self.embedder,
            self.seeder,
            index_name=self.index_name,
            schema=self.schema,
            reseed=reseed,
        )

    def retriever(self) -> Retriever:
        return Retriever(
            self.store,
            self.embedder,
            index_name=self.index_name,
            schema=self.schema,
            default_k=self.default_k,
        )


def schema_from_settings(settings: Settings) -> IndexSchema:
    return IndexSchema(
        dim=settings.EMBEDDING_DIM,
        algorithm=SearchAlgorithm(settings.SEARCH_ALGORITHM.lower()),
        encoding=VectorEncoding(settings.VECTOR_ENCODING.lower()),
        layout=StorageLayout(settings.STORAGE_LAYOUT.lower()),
        key_prefix=settings.KEY_PREFIX,
    )


def create_store(settings: Settings) -> VectorStoreABC:
    backend = settings.VECTOR_STORE_BACKEND.lower()
    if backend == "qdrant":
        return QdrantVectorStore(url=settings.VECTOR_DB_URL)
    if backend == "redis":
        return RedisVectorStore(url=settings.REDIS_URL)
    if backend == "memory":
        return InMemoryVectorStore()
    raise ValueError(f"Unknown vector store backend: {settings.VECTOR_STORE_BACKEND}")


def build_components(settings: Settings) -> Components:
    """Construct the shared store and model once; nothing is connected or loaded yet."""
    schema = schema_from_settings(settings)
    return Components(
        store=create_store(settings),
        embedder=SBERTEmbedder(
            model_id=settings.EMBEDDING_MODEL_ID,
            cache_folder=settings.EMBEDDING_CACHE_DIR,
        ),
        seeder=CatalogSeeder(key_prefix=schema.key_prefix, vector_field=schema.vector_field),
        schema=schema,
        index_name=settings.INDEX_NAME,
        default_k=settings.DEFAULT_TOP_K,
    )
