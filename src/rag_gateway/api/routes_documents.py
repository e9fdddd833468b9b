"""Document ingestion and retrieval preview endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from rag_gateway.api.dependencies import (
    get_document_store,
    get_indexer,
    get_retriever,
    get_settings,
)
from rag_gateway.api.errors import to_http_exception
from rag_gateway.config.settings import Settings
from rag_gateway.exceptions import DocumentStoreUnavailableError
from rag_gateway.indexing.indexer import Indexer, IngestStatus
from rag_gateway.models.schemas import (
    BulkIngestResponse,
    BulkItemResult,
    DocumentIn,
    DocumentOut,
    IngestResponse,
)
from rag_gateway.protocols.document_store import DocumentStore
from rag_gateway.retrieval.retriever import Retriever

router = APIRouter(prefix="/api/rag")


@router.post("/documents", response_model=IngestResponse)
async def store_document(
    body: DocumentIn,
    indexer: Indexer = Depends(get_indexer),
) -> IngestResponse:
    if not body.content or not body.content.strip():
        raise HTTPException(status_code=400, detail="Content is required")

    outcome = await indexer.ingest(body.content, body.metadata)
    if outcome is IngestStatus.UNAVAILABLE:
        raise to_http_exception(DocumentStoreUnavailableError("Document store is unreachable"))
    if outcome is not IngestStatus.STORED:
        raise HTTPException(status_code=500, detail="Failed to store document")
    return IngestResponse(success=True, message="Document stored")


@router.post("/documents/bulk", response_model=BulkIngestResponse)
async def store_documents_bulk(
    payload: Any = Body(...),
    indexer: Indexer = Depends(get_indexer),
    store: DocumentStore = Depends(get_document_store),
) -> BulkIngestResponse:
    if not isinstance(payload, list):
        raise HTTPException(status_code=400, detail="Expected a JSON array of documents")
    if not await store.ping():
        raise to_http_exception(DocumentStoreUnavailableError("Document store is unreachable"))

    results: list[BulkItemResult] = []
    for i, item in enumerate(payload):
        try:
            doc = DocumentIn.model_validate(item)
        except ValidationError:
            results.append(BulkItemResult(index=i, status="invalid"))
            continue
        if not doc.content or not doc.content.strip():
            results.append(BulkItemResult(index=i, status="invalid"))
            continue
        outcome = await indexer.ingest(doc.content, doc.metadata)
        results.append(BulkItemResult(index=i, status=outcome.value))

    stored = sum(1 for r in results if r.status == "stored")
    return BulkIngestResponse(stored=stored, failed=len(results) - stored, results=results)


@router.get("/documents", response_model=list[DocumentOut])
async def list_documents(
    query: str = "",
    limit: int | None = None,
    retriever: Retriever = Depends(get_retriever),
    settings: Settings = Depends(get_settings),
) -> list[DocumentOut]:
    docs = await retriever.fetch(query, limit or settings.document_list_limit)
    return [
        DocumentOut(
            content=d.content,
            metadata=d.metadata,
            timestamp=d.timestamp.isoformat() if d.timestamp else None,
        )
        for d in docs
    ]
