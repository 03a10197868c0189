import logging
from typing import Any

import numpy as np
import redis
from redis.commands.search.field import TextField, VectorField
from redis.commands.search.index_definition import IndexDefinition, IndexType
from redis.commands.search.query import Query
from redis.exceptions import ResponseError

from catalog_search.errors import ConnectionFailure, SchemaCreateConflict
from catalog_search.ingestion import codec
from catalog_search.ingestion.models import (
    IndexSchema,
    SearchAlgorithm,
    StorageLayout,
    VectorEncoding,
)
from catalog_search.ingestion.vector_store import VectorStoreABC

logger = logging.getLogger(__name__)

_ALGORITHMS = {SearchAlgorithm.FLAT: "FLAT", SearchAlgorithm.HNSW: "HNSW"}
_RETURNED_FIELDS = ("name", "price", "description")


class RedisVectorStore(VectorStoreABC):
    """Redis Stack (RediSearch) realisation of the catalog store.

    JSON layout keeps each entry as a structured document with the embedding as
    a float array; hash layout keeps flat fields with the embedding as raw
    float32 bytes. Query vectors are always sent as raw bytes.
    """

    def __init__(self, url: str = "redis://localhost:6379", client: redis.Redis | None = None):
        super().__init__()
        self.url = url
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise ConnectionFailure("Redis client is not connected")
        return self._client

    def connect(self) -> None:
        try:
            if self._client is None:
                self._client = redis.Redis.from_url(self.url, decode_responses=True)
            self._client.ping()
        except redis.RedisError as e:
            self._client = None
            raise ConnectionFailure(f"Failed to connect to Redis at {self.url}: {e}") from e
        logger.info("Connected to Redis at %s", self.url)

    @staticmethod
    def _field_path(schema: IndexSchema, field: str) -> str:
        if schema.layout == StorageLayout.JSON:
            return f"$.{field}"
        return field

    def _create_index(self, name: str, schema: IndexSchema) -> None:
        if schema.layout == StorageLayout.JSON and schema.encoding != VectorEncoding.ARRAY:
            raise ValueError("JSON documents must store the embedding as a float array")

        fields = [
            TextField(self._field_path(schema, text_field), as_name=text_field)
            for text_field in schema.text_fields
        ]
        fields.append(
            VectorField(
                self._field_path(schema, schema.vector_field),
                _ALGORITHMS[schema.algorithm],
                {
                    "TYPE": "FLOAT32",
                    "DIM": schema.dim,
                    "DISTANCE_METRIC": schema.metric.value.upper(),
                },
                as_name=schema.vector_field,
            )
        )
        index_type = IndexType.JSON if schema.layout == StorageLayout.JSON else IndexType.HASH
        try:
            self.client.ft(name).create_index(
                fields,
                definition=IndexDefinition(prefix=[schema.key_prefix], index_type=index_type),
            )
        except ResponseError as e:
            if "already exists" in str(e).lower():
                raise SchemaCreateConflict(name) from e
            raise

    def _index_status(self, name: str) -> Any:
        # flat [key, value, ...] list on RESP2, a map on RESP3
        return self.client.execute_command("FT.INFO", name)

    def _write(
        self, name: str, schema: IndexSchema, key: str, fields: dict[str, Any]
    ) -> None:
        vector = codec.encode(fields[schema.vector_field], schema.encoding, schema.dim)
        if schema.layout == StorageLayout.JSON:
            document = dict(fields)
            document[schema.vector_field] = vector
            self.client.json().set(key, "$", document)
        else:
            mapping = {k: v for k, v in fields.items() if k != schema.vector_field}
            mapping[schema.vector_field] = vector
            self.client.hset(key, mapping=mapping)

    def _query(
        self, name: str, schema: IndexSchema, field: str, query_vector: np.ndarray, k: int
    ) -> list[tuple[dict[str, Any], float]]:
        query = Query(f"*=>[KNN {k} @{field} $vec AS score]").sort_by("score").paging(0, k)
        for returned in _RETURNED_FIELDS:
            query = query.return_field(self._field_path(schema, returned), as_field=returned)
        query = query.return_field("score").dialect(2)

        result = self.client.ft(name).search(
            query, query_params={"vec": codec.to_bytes(query_vector, schema.dim)}
        )
        hits = []
        for doc in result.docs:
            fields = {returned: getattr(doc, returned, None) for returned in _RETURNED_FIELDS}
            fields["key"] = doc.id
            hits.append((fields, float(doc.score)))
        return hits

    def drop_index(self, name: str) -> None:
        try:
            self.client.ft(name).dropindex(delete_documents=True)
        except ResponseError as e:
            message = str(e).lower()
            if "unknown index" not in message and "no such index" not in message:
                raise
        logger.info("Index '%s' dropped with its documents.", name)
