"""Lexical retrieval of prior documents used to augment a request."""

from __future__ import annotations

from rag_gateway.exceptions import DocumentStoreError
from rag_gateway.models.domain import Document
from rag_gateway.observability.logger import get_logger
from rag_gateway.protocols.document_store import DocumentStore

logger = get_logger("retriever")


class Retriever:
    """Fetches the top-k documents for a query.

    Never raises: an unreachable or failing store yields an empty result,
    which the pipeline treats as "no augmentation".
    """

    def __init__(self, store: DocumentStore, default_k: int = 3) -> None:
        self._store = store
        self._default_k = default_k

    async def fetch(self, query: str, k: int | None = None) -> list[Document]:
        if not query or not query.strip():
            return []

        limit = k if k is not None else self._default_k
        if limit <= 0:
            return []

        if not await self._store.ping():
            logger.warning("retrieval_degraded", reason="store_unreachable")
            return []

        try:
            docs = await self._store.search(query, limit)
        except DocumentStoreError as e:
            logger.error("retrieval_failed", error=str(e))
            return []

        logger.info("retrieved_documents", query_len=len(query), count=len(docs), k=limit)
        return docs[:limit]
