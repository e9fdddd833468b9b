"""Elasticsearch-backed document store spoken to over its REST API."""

from __future__ import annotations

from datetime import datetime

import httpx

from rag_gateway.exceptions import DocumentStoreError
from rag_gateway.models.domain import Document
from rag_gateway.observability.logger import get_logger

logger = get_logger("elasticsearch")

SOURCE_FIELDS = ["content", "metadata", "timestamp"]

INDEX_DEFINITION = {
    "mappings": {
        "properties": {
            "content": {"type": "text"},
            "metadata": {"type": "object"},
            "timestamp": {"type": "date"},
        }
    },
    "settings": {
        "number_of_shards": 1,
        "number_of_replicas": 0,
        "refresh_interval": "30s",
    },
}


class ElasticsearchDocumentStore:
    def __init__(self, client: httpx.AsyncClient, index: str) -> None:
        self._client = client
        self._index = index

    @property
    def index(self) -> str:
        return self._index

    async def ping(self) -> bool:
        try:
            response = await self._client.get("/")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("store_ping_failed", error=str(e))
            return False

    async def ensure_index(self) -> bool:
        """Create the index if it does not exist. Returns True when created."""
        try:
            exists = await self._client.head(f"/{self._index}")
            if exists.status_code == 200:
                return False
            response = await self._client.put(f"/{self._index}", json=INDEX_DEFINITION)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DocumentStoreError(f"Failed to create index {self._index}: {e}") from e
        logger.info("index_created", index=self._index)
        return True

    async def save(self, document: Document, wait_for_visibility: bool = True) -> None:
        body = {
            "content": document.content,
            "metadata": document.metadata,
            "timestamp": document.timestamp.isoformat() if document.timestamp else None,
        }
        params = {"refresh": "wait_for"} if wait_for_visibility else None
        try:
            response = await self._client.post(
                f"/{self._index}/_doc", json=body, params=params
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DocumentStoreError(f"Failed to save document: {e}") from e

    async def search(self, query: str, k: int) -> list[Document]:
        body = {
            "query": {
                "match": {
                    "content": {
                        "query": query,
                        "operator": "or",
                        "fuzziness": "AUTO",
                    }
                }
            },
            "_source": SOURCE_FIELDS,
            "size": k,
        }
        try:
            response = await self._client.post(f"/{self._index}/_search", json=body)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DocumentStoreError(f"Search failed: {e}") from e

        hits = data.get("hits", {}).get("hits", [])
        return [self._hit_to_document(hit) for hit in hits[:k]]

    @staticmethod
    def _hit_to_document(hit: dict) -> Document:
        source = hit.get("_source", {})
        raw_ts = source.get("timestamp")
        timestamp = None
        if isinstance(raw_ts, str):
            try:
                timestamp = datetime.fromisoformat(raw_ts)
            except ValueError:
                timestamp = None
        return Document(
            content=source.get("content", ""),
            metadata=source.get("metadata") or {},
            timestamp=timestamp,
        )
