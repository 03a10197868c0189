import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any

import numpy as np
from qdrant_client import QdrantClient, models

from catalog_search.errors import (
    ConnectionFailure,
    SchemaCreateConflict,
    SearchFailure,
)
from catalog_search.ingestion import codec
from catalog_search.ingestion.models import (
    IndexSchema,
    IndexStats,
    SearchAlgorithm,
    VectorEncoding,
)

logger = logging.getLogger(__name__)

# Namespace for deterministic Qdrant point ids derived from storage keys
POINT_ID_NAMESPACE = uuid.UUID("6f1c3b1e-5a4d-4f38-9a53-2c7e1d0b8e41")


class VectorStoreABC(ABC):
    """Storage substrate: documents keyed by id plus a KNN index over one vector field.

    Index schemas are registered per store instance by ensure_index. A fresh
    instance pointed at an index that already exists must still call
    ensure_index (a no-op for the index itself) before put_document or
    knn_search can resolve the schema.
    """

    def __init__(self) -> None:
        self._schemas: dict[str, IndexSchema] = {}

    @abstractmethod
    def connect(self) -> None:
        pass

    @abstractmethod
    def _create_index(self, name: str, schema: IndexSchema) -> None:
        """Create the index, raising SchemaCreateConflict if it already exists."""
        pass

    @abstractmethod
    def _index_status(self, name: str) -> Any:
        """Raw status reply of the store for the index."""
        pass

    @abstractmethod
    def _write(
        self, name: str, schema: IndexSchema, key: str, fields: dict[str, Any]
    ) -> None:
        pass

    @abstractmethod
    def _query(
        self, name: str, schema: IndexSchema, field: str, query_vector: np.ndarray, k: int
    ) -> list[tuple[dict[str, Any], float]]:
        pass

    @abstractmethod
    def drop_index(self, name: str) -> None:
        pass

    def ensure_index(self, name: str, schema: IndexSchema) -> bool:
        """Create the index if absent. Returns True when it was created.

        An existing index with the same name is left untouched, even if its
        schema differs from the requested one.
        """
        self._schemas[name] = schema
        try:
            self._create_index(name, schema)
        except SchemaCreateConflict:
            logger.info("Index '%s' already exists.", name)
            return False
        logger.info("Vector index '%s' created.", name)
        return True

    def count_documents(self, name: str) -> int:
        return IndexStats.from_response(self._index_status(name)).document_count

    def put_document(self, key_prefix: str, doc_id: str, fields: dict[str, Any]) -> None:
        key = f"{key_prefix}{doc_id}"
        name, schema = self._index_for_key(key)
        self._write(name, schema, key, fields)

    def knn_search(
        self,
        name: str,
        field: str,
        query_vector: np.ndarray | list[float] | bytes,
        k: int,
    ) -> list[tuple[dict[str, Any], float]]:
        """Return up to k (document fields, cosine distance) pairs, closest first."""
        if k < 1:
            raise ValueError(f"k must be a positive integer, got {k}")
        schema = self._schemas.get(name)
        if schema is None:
            raise SearchFailure(
                f"Index '{name}' is not registered on this store; call ensure_index first"
            )
        if field != schema.vector_field:
            raise SearchFailure(f"Index '{name}' has no vector field '{field}'")
        vector = codec.decode(query_vector, schema.dim)
        try:
            return self._query(name, schema, field, vector, k)
        except SearchFailure:
            raise
        except Exception as e:
            raise SearchFailure(f"KNN search on '{name}' failed: {e}") from e

    def _index_for_key(self, key: str) -> tuple[str, IndexSchema]:
        for name, schema in self._schemas.items():
            if key.startswith(schema.key_prefix):
                return name, schema
        raise ValueError(
            f"No index registered on this store covers key '{key}'; call ensure_index first"
        )


class QdrantVectorStore(VectorStoreABC):
    def __init__(
        self,
        url: str = "http://localhost:6333",
        api_key: str | None = None,
        client: QdrantClient | None = None,
    ):
        super().__init__()
        self.url = url
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> QdrantClient:
        if self._client is None:
            raise ConnectionFailure("Qdrant client is not connected")
        return self._client

    def connect(self) -> None:
        try:
            if self._client is None:
                if self.url == ":memory:":
                    self._client = QdrantClient(location=":memory:")
                else:
                    self._client = QdrantClient(url=self.url, api_key=self.api_key)
            collections = self._client.get_collections()
        except Exception as e:
            self._client = None
            raise ConnectionFailure(f"Failed to connect to Qdrant at {self.url}: {e}") from e
        logger.info(
            "Connected to Qdrant. Collections: %s",
            [c.name for c in collections.collections],
        )

    def _create_index(self, name: str, schema: IndexSchema) -> None:
        if schema.encoding != VectorEncoding.ARRAY:
            raise ValueError("Qdrant stores vectors as float arrays only")
        if self.client.collection_exists(collection_name=name):
            raise SchemaCreateConflict(name)

        hnsw_config = None
        if schema.algorithm == SearchAlgorithm.FLAT:
            # skip building the graph, every query is an exact scan anyway
            hnsw_config = models.HnswConfigDiff(m=0)
        try:
            self.client.create_collection(
                collection_name=name,
                vectors_config={
                    schema.vector_field: models.VectorParams(
                        size=schema.dim, distance=models.Distance.COSINE
                    )
                },
                hnsw_config=hnsw_config,
            )
        except Exception as e:
            # lost a race with another process creating the same collection
            if self.client.collection_exists(collection_name=name):
                raise SchemaCreateConflict(name) from e
            raise

        for text_field in schema.text_fields:
            self.client.create_payload_index(
                collection_name=name,
                field_name=text_field,
                field_schema=models.PayloadSchemaType.TEXT,
            )

    def _index_status(self, name: str) -> Any:
        return self.client.count(collection_name=name, exact=True)

    def _write(
        self, name: str, schema: IndexSchema, key: str, fields: dict[str, Any]
    ) -> None:
        payload = {k: v for k, v in fields.items() if k != schema.vector_field}
        payload["key"] = key
        vector = codec.encode(fields[schema.vector_field], schema.encoding, schema.dim)
        self.client.upsert(
            collection_name=name,
            points=[
                models.PointStruct(
                    id=str(uuid.uuid5(POINT_ID_NAMESPACE, key)),
                    vector={schema.vector_field: vector},
                    payload=payload,
                )
            ],
            wait=True,
        )

    def _query(
        self, name: str, schema: IndexSchema, field: str, query_vector: np.ndarray, k: int
    ) -> list[tuple[dict[str, Any], float]]:
        response = self.client.query_points(
            collection_name=name,
            query=codec.to_array(query_vector),
            using=field,
            limit=k,
            with_payload=True,
            search_params=models.SearchParams(
                exact=schema.algorithm == SearchAlgorithm.FLAT
            ),
        )
        # Qdrant reports cosine similarity; callers expect distance
        return [(dict(point.payload or {}), 1.0 - point.score) for point in response.points]

    def drop_index(self, name: str) -> None:
        self.client.delete_collection(collection_name=name)
        logger.info("Collection '%s' dropped.", name)


class InMemoryVectorStore(VectorStoreABC):
    """Process-local store with exact linear-scan cosine search.

    Documents live in one keyspace; an index covers every key starting with its
    prefix, so documents written before the index exists are still found.
    """

    def __init__(self) -> None:
        super().__init__()
        self._documents: dict[str, dict[str, Any]] = {}
        self._created: set[str] = set()
        self.connected = False

    def connect(self) -> None:
        self.connected = True

    def _create_index(self, name: str, schema: IndexSchema) -> None:
        if name in self._created:
            raise SchemaCreateConflict(name)
        self._created.add(name)

    def _covered(self, name: str) -> list[dict[str, Any]]:
        if name not in self._created:
            raise KeyError(f"Unknown index name '{name}'")
        prefix = self._schemas[name].key_prefix
        return [doc for key, doc in self._documents.items() if key.startswith(prefix)]

    def _index_status(self, name: str) -> Any:
        return {"num_docs": len(self._covered(name))}

    def _write(
        self, name: str, schema: IndexSchema, key: str, fields: dict[str, Any]
    ) -> None:
        stored = dict(fields)
        stored[schema.vector_field] = codec.encode(
            fields[schema.vector_field], schema.encoding, schema.dim
        )
        self._documents[key] = stored

    def _query(
        self, name: str, schema: IndexSchema, field: str, query_vector: np.ndarray, k: int
    ) -> list[tuple[dict[str, Any], float]]:
        documents = [doc for doc in self._covered(name) if field in doc]
        if not documents:
            return []
        matrix = np.stack([codec.decode(doc[field], schema.dim) for doc in documents])
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vector)
        norms[norms == 0] = 1.0
        distances = 1.0 - (matrix @ query_vector) / norms
        order = np.argsort(distances, kind="stable")[:k]
        results = []
        for i in order:
            fields = {key: value for key, value in documents[i].items() if key != field}
            results.append((fields, float(distances[i])))
        return results

    def drop_index(self, name: str) -> None:
        if name not in self._created:
            return
        prefix = self._schemas[name].key_prefix
        self._documents = {
            key: doc for key, doc in self._documents.items() if not key.startswith(prefix)
        }
        self._created.discard(name)
