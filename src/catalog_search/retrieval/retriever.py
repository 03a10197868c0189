import logging
from typing import Any

from pydantic import ValidationError

from catalog_search.errors import InferenceFailure, ModelNotReady
from catalog_search.ingestion import codec
from catalog_search.ingestion.embedder import SentenceEmbedderABC
from catalog_search.ingestion.models import IndexSchema, SearchHit
from catalog_search.ingestion.vector_store import VectorStoreABC
from catalog_search.retrieval.reply import ChatReply, format_reply

logger = logging.getLogger(__name__)


class Retriever:
    """Answers free-text queries with the nearest catalog entries.

    Query-time store failures degrade to an empty result. Only an unloaded
    model is reported to the caller, as ModelNotReady.
    """

    def __init__(
        self,
        store: VectorStoreABC,
        embedder: SentenceEmbedderABC,
        index_name: str = "menu-index",
        schema: IndexSchema | None = None,
        default_k: int = 3,
    ):
        self.store = store
        self.embedder = embedder
        self.index_name = index_name
        self.schema = schema or IndexSchema()
        self.default_k = default_k

    def search(self, query: str, k: int = 5) -> list[SearchHit]:
        if not self.embedder.is_ready():
            raise ModelNotReady()
        if k < 1:
            raise ValueError(f"k must be a positive integer, got {k}")
        if not query or not query.strip():
            return []

        try:
            query_embedding = self.embedder.embed_text(query)
        except ModelNotReady:
            raise
        except InferenceFailure as e:
            logger.error("Could not embed query %r: %s", query, e)
            return []

        try:
            query_vector = codec.encode(query_embedding, self.schema.encoding, self.schema.dim)
            results = self.store.knn_search(
                self.index_name, self.schema.vector_field, query_vector, k
            )
        except Exception as e:
            logger.error("Vector search failed for %r: %s", query, e)
            return []

        hits: list[SearchHit] = []
        for fields, score in results[:k]:
            hit = self._to_hit(fields, score)
            if hit is not None:
                hits.append(hit)
        return hits

    @staticmethod
    def _to_hit(fields: dict[str, Any], score: float) -> SearchHit | None:
        try:
            return SearchHit(
                name=fields["name"],
                price=fields["price"],
                description=fields["description"],
                score=score,
            )
        except (KeyError, ValidationError) as e:
            logger.warning("Skipping malformed search result %r: %s", fields.get("key"), e)
            return None

    def chat(self, message: str, k: int | None = None) -> ChatReply:
        hits = self.search(message, k or self.default_k)
        return ChatReply(reply=format_reply(hits), results=hits)
