"""Protocol for the document store the gateway retrieves from and archives to."""

from __future__ import annotations

from typing import Protocol

from rag_gateway.models.domain import Document


class DocumentStore(Protocol):
    async def ping(self) -> bool: ...

    async def ensure_index(self) -> bool: ...

    async def save(self, document: Document, wait_for_visibility: bool = True) -> None: ...

    async def search(self, query: str, k: int) -> list[Document]: ...
