"""Best-effort archiving of finished responses into the document store."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum

from rag_gateway.models.domain import Document
from rag_gateway.observability.logger import get_logger
from rag_gateway.protocols.document_store import DocumentStore

logger = get_logger("indexer")


class IngestStatus(str, Enum):
    STORED = "stored"
    SKIPPED = "skipped"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


class Indexer:
    def __init__(self, store: DocumentStore, max_chars: int = 50_000) -> None:
        self._store = store
        self._max_chars = max_chars
        self._pending: set[asyncio.Task] = set()

    async def ingest(self, text: str | None, metadata: dict | None = None) -> IngestStatus:
        """Write one document and report what happened. Never raises."""
        if not text or not text.strip():
            return IngestStatus.SKIPPED

        try:
            reachable = await self._store.ping()
        except Exception as e:
            logger.error("indexing_failed", stage="ping", error=str(e))
            return IngestStatus.UNAVAILABLE
        if not reachable:
            logger.warning("indexing_skipped", reason="store_unreachable")
            return IngestStatus.UNAVAILABLE

        document = Document(
            content=text[: self._max_chars],
            metadata=dict(metadata or {}),
            timestamp=datetime.now(timezone.utc),
        )
        try:
            await self._store.save(document, wait_for_visibility=True)
        except Exception as e:
            logger.error("indexing_failed", stage="save", error=str(e))
            return IngestStatus.FAILED

        logger.info("document_indexed", chars=len(document.content), truncated=len(text) > self._max_chars)
        return IngestStatus.STORED

    async def persist(self, text: str | None, metadata: dict | None = None) -> bool:
        return await self.ingest(text, metadata) is IngestStatus.STORED

    def schedule(self, text: str | None, metadata: dict | None = None) -> asyncio.Task:
        """Fire-and-forget persist. The caller never awaits the returned task."""
        task = asyncio.create_task(self.persist(text, metadata))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for scheduled writes; used on shutdown."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
