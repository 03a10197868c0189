# src/catalog_search/ingestion/models.py
import re
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

_WHITESPACE = re.compile(r"\s")

# Status keys understood by IndexStats, in lookup order
_COUNT_KEYS = ("num_docs", "points_count", "count", "total")


def derive_key(name: str) -> str:
    """Storage key of a catalog entry: its display name without whitespace."""
    return _WHITESPACE.sub("", name)


class SearchAlgorithm(str, Enum):
    FLAT = "flat"  # exact linear scan
    HNSW = "hnsw"  # approximate graph search


class VectorEncoding(str, Enum):
    ARRAY = "array"  # JSON array of floats
    BYTES = "bytes"  # raw little-endian float32


class StorageLayout(str, Enum):
    JSON = "json"  # structured document
    HASH = "hash"  # flat fields


class DistanceMetric(str, Enum):
    COSINE = "cosine"


class CatalogEntry(BaseModel):
    name: str
    price: float
    description: str
    embedding: list[float] | None = None

    @property
    def key(self) -> str:
        return derive_key(self.name)

    def embedding_text(self) -> str:
        return f"{self.name} {self.description}"


class IndexSchema(BaseModel):
    """Declared layout of the catalog index.

    The schema is fixed for the lifetime of an index. Changing the dimension,
    algorithm or field mapping means dropping the index and seeding again.
    """

    model_config = ConfigDict(frozen=True)

    text_fields: tuple[str, ...] = ("name", "description")
    vector_field: str = "embedding"
    dim: int = Field(default=384, gt=0)
    metric: DistanceMetric = DistanceMetric.COSINE
    algorithm: SearchAlgorithm = SearchAlgorithm.FLAT
    encoding: VectorEncoding = VectorEncoding.ARRAY
    layout: StorageLayout = StorageLayout.JSON
    key_prefix: str = "item:"

    @model_validator(mode="after")
    def _check_layout(self) -> "IndexSchema":
        # flat hash fields cannot hold a float array
        if self.layout == StorageLayout.HASH and self.encoding != VectorEncoding.BYTES:
            raise ValueError("hash storage layout requires bytes vector encoding")
        return self


class IndexStats(BaseModel):
    document_count: int = Field(ge=0)

    @classmethod
    def from_response(cls, raw: Any) -> "IndexStats":
        """Normalize a store status reply into IndexStats.

        Accepts structured replies (a mapping, or an object exposing one of
        ``num_docs``, ``points_count``, ``count`` or ``total``) as well as the
        flat positional form ``[key, value, key, value, ...]``.
        """
        if raw is None:
            raise ValueError("empty index status reply")
        if isinstance(raw, (bool, str, bytes)):
            raise ValueError(f"unexpected index status reply: {raw!r}")
        if isinstance(raw, int):
            return cls(document_count=raw)
        if isinstance(raw, Mapping):
            normalized = {_as_text(k): v for k, v in raw.items()}
            for key in _COUNT_KEYS:
                if key in normalized and normalized[key] is not None:
                    return cls(document_count=_as_int(normalized[key]))
            raise ValueError(f"no document count in index status: {sorted(normalized)}")
        if isinstance(raw, Sequence):
            items = list(raw)
            for position in range(0, len(items) - 1, 2):
                if _as_text(items[position]) in _COUNT_KEYS:
                    return cls(document_count=_as_int(items[position + 1]))
            raise ValueError("no document count in positional index status")
        for key in _COUNT_KEYS:
            value = getattr(raw, key, None)
            if value is not None and not callable(value):
                return cls(document_count=_as_int(value))
        raise ValueError(f"unexpected index status reply: {type(raw).__name__}")


class SearchHit(BaseModel):
    name: str
    price: float
    description: str
    score: float  # cosine distance, lower is closer


def _as_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _as_int(value: Any) -> int:
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return int(float(value))
