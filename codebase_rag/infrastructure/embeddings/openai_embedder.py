import logging
import re
import time

from openai import OpenAI, RateLimitError

logger = logging.getLogger(__name__)

MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

_RETRY_HINT = re.compile(r"try again in (\d+)ms", re.IGNORECASE)


class OpenAIEmbedder:
    """Embedder using the OpenAI embeddings API."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        batch_size: int = 100,
        max_retries: int = 5,
        batch_pause: float = 0.2,
    ):
        """Initialize OpenAI embedder.

        Args:
            api_key: OpenAI API key.
            model: Embedding model name.
            batch_size: Texts per API request.
            max_retries: Retries on rate limit errors.
            batch_pause: Seconds to wait between batches.
        """
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required for the OpenAI embedding provider")

        self._client = OpenAI(api_key=api_key)
        self._model = model
        self._batch_size = batch_size
        self._max_retries = max_retries
        self._batch_pause = batch_pause

    @property
    def name(self) -> str:
        return "openai"

    @property
    def dimension(self) -> int:
        return MODEL_DIMENSIONS.get(self._model, 1536)

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in batches, backing off on rate limits."""
        embeddings: list[list[float]] = []

        for i in range(0, len(texts), self._batch_size):
            batch = texts[i : i + self._batch_size]
            embeddings.extend(self._embed_batch(batch, i // self._batch_size + 1))

            if i + self._batch_size < len(texts):
                time.sleep(self._batch_pause)

        return embeddings

    def embed_query(self, text: str) -> list[float]:
        return self._embed_batch([text], 1)[0]

    def _embed_batch(self, batch: list[str], batch_num: int) -> list[list[float]]:
        attempt = 0
        while True:
            try:
                response = self._client.embeddings.create(model=self._model, input=batch)
                return [item.embedding for item in response.data]
            except RateLimitError as e:
                if attempt >= self._max_retries:
                    raise

                hint = _RETRY_HINT.search(str(e))
                backoff = int(hint.group(1)) / 1000 if hint else min(2**attempt, 30)
                attempt += 1
                logger.warning(
                    f"Rate limit hit for batch {batch_num}, retrying in {backoff:.1f}s "
                    f"(attempt {attempt}/{self._max_retries})"
                )
                time.sleep(backoff)
