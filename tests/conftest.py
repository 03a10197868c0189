"""Shared fixtures: a deterministic embedder and seeded in-memory stores."""

from __future__ import annotations

import re

import numpy as np
import pytest

from catalog_search.errors import InferenceFailure, ModelNotReady
from catalog_search.ingestion.embedder import SentenceEmbedderABC
from catalog_search.ingestion.models import IndexSchema
from catalog_search.ingestion.seeder import CatalogSeeder
from catalog_search.ingestion.vector_store import InMemoryVectorStore

_TOKEN_PATTERN = re.compile(r"\w+")

INDEX_NAME = "menu-index"


class VocabularyEmbedder(SentenceEmbedderABC):
    """Bag-of-words embedder: one dimension per distinct token, L2-normalized."""

    def __init__(self, dim: int = 384, ready: bool = False):
        self.dim = dim
        self.vocabulary: dict[str, int] = {}
        self.ready = ready
        self.calls: list[str] = []

    def load(self) -> None:
        self.ready = True

    def is_ready(self) -> bool:
        return self.ready

    def embed_text(self, text: str) -> np.ndarray:
        if not self.ready:
            raise ModelNotReady()
        self.calls.append(text)
        tokens = _TOKEN_PATTERN.findall(text.lower())
        if not tokens:
            raise InferenceFailure("cannot embed empty text")
        vector = np.zeros(self.dim, dtype=np.float32)
        for token in tokens:
            if token not in self.vocabulary:
                if len(self.vocabulary) >= self.dim:
                    raise InferenceFailure("vocabulary is full")
                self.vocabulary[token] = len(self.vocabulary)
            vector[self.vocabulary[token]] += 1.0
        return vector / np.linalg.norm(vector)

    def embed_texts(self, texts: list[str]) -> list[np.ndarray]:
        return [self.embed_text(text) for text in texts]

    def get_embedding_dimension(self) -> int:
        return self.dim


@pytest.fixture
def embedder() -> VocabularyEmbedder:
    return VocabularyEmbedder(ready=True)


@pytest.fixture
def schema() -> IndexSchema:
    return IndexSchema()


@pytest.fixture
def seeded_store(embedder: VocabularyEmbedder, schema: IndexSchema) -> InMemoryVectorStore:
    store = InMemoryVectorStore()
    store.connect()
    store.ensure_index(INDEX_NAME, schema)
    CatalogSeeder(key_prefix=schema.key_prefix).seed(store, embedder)
    return store
