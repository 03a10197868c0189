import logging
import threading
from abc import ABC, abstractmethod

import numpy as np
from sentence_transformers import SentenceTransformer

from catalog_search.errors import InferenceFailure, ModelLoadFailure, ModelNotReady

logger = logging.getLogger(__name__)


class SentenceEmbedderABC(ABC):
    @abstractmethod
    def load(self) -> None:
        pass

    @abstractmethod
    def is_ready(self) -> bool:
        pass

    @abstractmethod
    def embed_texts(self, texts: list[str]) -> list[np.ndarray]:
        pass

    @abstractmethod
    def embed_text(self, text: str) -> np.ndarray:
        pass

    @abstractmethod
    def get_embedding_dimension(self) -> int:
        pass


class SBERTEmbedder(SentenceEmbedderABC):
    """Mean-pooled, L2-normalized sentence embeddings from a local model.

    The model is loaded once by ``load()`` and shared read-only afterwards.
    Calls into the model are serialized.
    """

    def __init__(
        self,
        model_id: str = "sentence-transformers/all-MiniLM-L6-v2",
        cache_folder: str | None = None,
        device: str | None = None,
    ):
        self.model_id = model_id
        self.cache_folder = cache_folder
        self.device = device
        self._model: SentenceTransformer | None = None
        self._lock = threading.Lock()

    def load(self) -> None:
        if self._model is not None:
            return
        logger.info("Loading embedding model: %s", self.model_id)
        try:
            model = SentenceTransformer(
                self.model_id, cache_folder=self.cache_folder, device=self.device
            )
        except Exception as e:
            raise ModelLoadFailure(
                f"Could not load embedding model '{self.model_id}': {e}"
            ) from e
        self._model = model
        logger.info(
            "Embedding model loaded (dim=%d).", model.get_sentence_embedding_dimension()
        )

    def is_ready(self) -> bool:
        return self._model is not None

    def _require_model(self) -> SentenceTransformer:
        if self._model is None:
            raise ModelNotReady()
        return self._model

    def embed_texts(self, texts: list[str]) -> list[np.ndarray]:
        model = self._require_model()
        if any(not text or not text.strip() for text in texts):
            raise InferenceFailure("cannot embed empty text")
        try:
            with self._lock:
                embeddings = model.encode(
                    texts, convert_to_numpy=True, normalize_embeddings=True
                )
        except Exception as e:
            raise InferenceFailure(f"Embedding model failed: {e}") from e
        return [np.asarray(row, dtype=np.float32) for row in embeddings]

    def embed_text(self, text: str) -> np.ndarray:
        return self.embed_texts([text])[0]

    def get_embedding_dimension(self) -> int:
        return self._require_model().get_sentence_embedding_dimension()
