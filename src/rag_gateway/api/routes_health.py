"""Health check endpoint."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from rag_gateway.api.dependencies import get_adapter, get_document_store
from rag_gateway.models.schemas import HealthResponse
from rag_gateway.protocols.document_store import DocumentStore
from rag_gateway.upstream.adapter import UpstreamAdapter

VERSION = "1.0.0"

router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
async def health(
    adapter: UpstreamAdapter = Depends(get_adapter),
    store: DocumentStore = Depends(get_document_store),
) -> HealthResponse:
    backend_ok, store_ok = await asyncio.gather(adapter.ping(), store.ping())
    return HealthResponse(
        status="ok" if backend_ok and store_ok else "degraded",
        version=VERSION,
        backend=backend_ok,
        document_store=store_ok,
        endpoint=adapter.negotiated.current.value,
    )
