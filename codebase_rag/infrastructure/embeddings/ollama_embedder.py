import logging

import httpx

from codebase_rag.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)

MODEL_DIMENSIONS = {
    "mxbai-embed-large": 1024,
    "nomic-embed-text": 768,
    "all-minilm": 384,
    "snowflake-arctic-embed": 1024,
}


class OllamaEmbedder:
    """Embedder using a local Ollama server."""

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "mxbai-embed-large",
        timeout: float = 120.0,
    ):
        """Initialize Ollama embedder.

        Args:
            host: Ollama base URL.
            model: Embedding model name.
            timeout: Request timeout in seconds.
        """
        self._host = host.rstrip("/")
        self._model = model
        self._client = httpx.Client(timeout=timeout)

    @property
    def name(self) -> str:
        return "ollama"

    @property
    def dimension(self) -> int:
        return MODEL_DIMENSIONS.get(self._model, 1024)

    def embed(self, texts: list[str]) -> list[list[float]]:
        return [self._embed_single(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed_single(text)

    def _embed_single(self, text: str) -> list[float]:
        resp = self._client.post(
            f"{self._host}/api/embeddings",
            json={"model": self._model, "prompt": text},
        )
        if resp.status_code != 200:
            raise EmbeddingError(
                f"Ollama embedding failed: {resp.status_code} - {resp.text}"
            )
        return resp.json()["embedding"]
