"""Public API for the catalog_search package."""

from .errors import (
    CatalogSearchError,
    ConnectionFailure,
    IndexSetupFailure,
    InferenceFailure,
    ModelLoadFailure,
    ModelNotReady,
    QueryNotReady,
    SchemaCreateConflict,
    SearchFailure,
    SeedItemFailure,
    VectorEncodingError,
)
from .ingestion.catalog import MENU_ITEMS
from .ingestion.embedder import SBERTEmbedder, SentenceEmbedderABC
from .ingestion.models import (
    CatalogEntry,
    IndexSchema,
    IndexStats,
    SearchAlgorithm,
    SearchHit,
    StorageLayout,
    VectorEncoding,
)
from .ingestion.seeder import CatalogSeeder
from .ingestion.vector_store import InMemoryVectorStore, QdrantVectorStore, VectorStoreABC
from .retrieval.retriever import Retriever
from .startup import InitializationSequencer, InitReport, InitState, build_components

__all__ = [
    "CatalogSearchError",
    "ConnectionFailure",
    "ModelLoadFailure",
    "ModelNotReady",
    "QueryNotReady",
    "InferenceFailure",
    "SchemaCreateConflict",
    "IndexSetupFailure",
    "SeedItemFailure",
    "SearchFailure",
    "VectorEncodingError",
    "MENU_ITEMS",
    "CatalogEntry",
    "IndexSchema",
    "IndexStats",
    "SearchAlgorithm",
    "SearchHit",
    "StorageLayout",
    "VectorEncoding",
    "SentenceEmbedderABC",
    "SBERTEmbedder",
    "VectorStoreABC",
    "QdrantVectorStore",
    "InMemoryVectorStore",
    "CatalogSeeder",
    "Retriever",
    "InitializationSequencer",
    "InitReport",
    "InitState",
    "build_components",
]
