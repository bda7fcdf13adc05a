import logging
from typing import Optional

import requests

from codebase_rag.core.models.chunk import Chunk, ChunkMetadata
from codebase_rag.core.models.query import QueryFilter, QueryResult

logger = logging.getLogger(__name__)


class ChromaVectorStore:
    """Vector store using ChromaDB HTTP API."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8000,
        collection_name: str = "guidewire-code",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 30.0,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection name.
            tenant: Tenant name.
            database: Database name.
            timeout: Request timeout in seconds.
        """
        self._base_url = f"http://{host}:{port}/api/v2"
        self._tenant = tenant
        self._database = database
        self._collection_name = collection_name
        self._collection_id: Optional[str] = None
        self._timeout = timeout
        self._session = requests.Session()

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def _collections_url(self) -> str:
        return f"{self._base_url}/tenants/{self._tenant}/databases/{self._database}/collections"

    def _collection_url(self, action: str) -> str:
        return f"{self._collections_url}/{self._ensure_collection()}/{action}"

    def _ensure_collection(self) -> str:
        """Get or create collection, return ID."""
        if self._collection_id:
            return self._collection_id

        resp = self._session.get(self._collections_url, timeout=self._timeout)
        if resp.status_code == 200:
            for col in resp.json():
                if col["name"] == self._collection_name:
                    self._collection_id = col["id"]
                    return self._collection_id

        resp = self._session.post(
            self._collections_url,
            json={
                "name": self._collection_name,
                "metadata": {
                    "hnsw:space": "cosine",
                    "description": "Source code chunk embeddings",
                },
            },
            timeout=self._timeout,
        )
        resp.raise_for_status()
        self._collection_id = resp.json()["id"]
        logger.info(f"Created collection: {self._collection_name}")
        return self._collection_id

    def connect(self) -> None:
        """Resolve the collection, creating it if needed."""
        self._ensure_collection()
        logger.info(f"Connected to ChromaDB collection: {self._collection_name}")

    def health_check(self) -> bool:
        try:
            resp = self._session.get(f"{self._base_url}/heartbeat", timeout=self._timeout)
        except requests.RequestException as e:
            logger.error(f"ChromaDB heartbeat failed: {e}")
            return False
        return resp.status_code == 200

    def upsert(self, chunks: list[Chunk], embeddings: list[list[float]]) -> None:
        """Insert or replace chunks by ID."""
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"Chunks and embeddings length mismatch ({len(chunks)} != {len(embeddings)})"
            )
        if not chunks:
            return

        resp = self._session.post(
            self._collection_url("upsert"),
            json={
                "ids": [c.id for c in chunks],
                "embeddings": embeddings,
                "documents": [c.content for c in chunks],
                "metadatas": [c.metadata.to_store_dict() for c in chunks],
            },
            timeout=self._timeout,
        )
        resp.raise_for_status()

    def query(
        self,
        query_embedding: list[float],
        top_k: int = 10,
        filters: Optional[QueryFilter] = None,
    ) -> list[QueryResult]:
        """Search by embedding."""
        payload = {
            "query_embeddings": [query_embedding],
            "n_results": top_k,
            "include": ["documents", "metadatas", "distances"],
        }
        where = build_where(filters)
        if where:
            payload["where"] = where

        resp = self._session.post(
            self._collection_url("query"), json=payload, timeout=self._timeout
        )
        if resp.status_code != 200:
            logger.error(f"ChromaDB query failed: {resp.status_code} - {resp.text}")
            return []

        data = resp.json()
        results = []

        if data.get("ids") and data["ids"][0]:
            for i, chunk_id in enumerate(data["ids"][0]):
                document = data["documents"][0][i]
                metadata = data["metadatas"][0][i]
                if document is None or metadata is None:
                    continue

                distance = data["distances"][0][i]
                results.append(
                    QueryResult(
                        chunk=Chunk(
                            id=chunk_id,
                            content=document,
                            metadata=ChunkMetadata.from_store_dict(metadata),
                        ),
                        score=1.0 - distance,
                        distance=distance,
                    )
                )

        return results

    def get_ids(self, where: dict) -> list[str]:
        """IDs of chunks matching a metadata filter."""
        resp = self._session.post(
            self._collection_url("get"),
            json={"where": where, "include": []},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json().get("ids", [])

    def delete(self, ids: Optional[list[str]] = None, where: Optional[dict] = None) -> None:
        """Delete chunks by ID and/or metadata filter."""
        if not ids and not where:
            return

        payload: dict = {}
        if ids:
            payload["ids"] = ids
        if where:
            payload["where"] = where

        resp = self._session.post(
            self._collection_url("delete"), json=payload, timeout=self._timeout
        )
        resp.raise_for_status()

    def count(self) -> int:
        """Get chunk count."""
        resp = self._session.get(self._collection_url("count"), timeout=self._timeout)
        return resp.json() if resp.status_code == 200 else 0


def build_where(filters: Optional[QueryFilter]) -> Optional[dict]:
    """Translate query filters into a Chroma ``where`` clause."""
    if filters is None:
        return None

    conditions = [
        {key: value}
        for key, value in (
            ("package", filters.package),
            ("class_name", filters.class_name),
            ("chunk_type", filters.chunk_type),
            ("language", filters.language),
            ("relative_path", filters.relative_path),
        )
        if value
    ]
    if not conditions:
        return None
    if len(conditions) == 1:
        return conditions[0]
    return {"$and": conditions}
