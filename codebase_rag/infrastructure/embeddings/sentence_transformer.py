import logging
from functools import cached_property

import numpy as np
from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        batch_size: int = 32,
        document_prefix: str = "",
        query_prefix: str = "",
    ):
        self._model_name = model_name
        self._batch_size = batch_size
        self._document_prefix = document_prefix
        self._query_prefix = query_prefix

    @cached_property
    def model(self) -> SentenceTransformer:
        logger.info(f"Loading embedding model: {self._model_name}")
        return SentenceTransformer(self._model_name)

    @property
    def name(self) -> str:
        return "sentence_transformers"

    @property
    def dimension(self) -> int:
        return self.model.get_sentence_embedding_dimension()

    def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        prefixed = [f"{self._document_prefix}{t}" for t in texts]
        return self._encode(prefixed).tolist()

    def embed_query(self, text: str) -> list[float]:
        return self._encode([f"{self._query_prefix}{text}"])[0].tolist()

    def _encode(self, texts: list[str]) -> np.ndarray:
        return self.model.encode(
            texts, batch_size=self._batch_size, convert_to_numpy=True
        )
