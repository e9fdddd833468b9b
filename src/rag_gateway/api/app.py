"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rag_gateway.api.middleware import BodySizeLimitMiddleware, RequestTimingMiddleware
from rag_gateway.api.routes_documents import router as documents_router
from rag_gateway.api.routes_generate import router as generate_router
from rag_gateway.api.routes_health import VERSION
from rag_gateway.api.routes_health import router as health_router
from rag_gateway.api.routes_proxy import router as proxy_router
from rag_gateway.config.settings import Settings
from rag_gateway.exceptions import DocumentStoreError
from rag_gateway.generation.context_injector import ContextInjector
from rag_gateway.indexing.indexer import Indexer
from rag_gateway.models.domain import Endpoint
from rag_gateway.observability.logger import get_logger, setup_logging
from rag_gateway.pipeline.gateway_pipeline import GatewayPipeline
from rag_gateway.protocols.document_store import DocumentStore
from rag_gateway.retrieval.retriever import Retriever
from rag_gateway.storage.elasticsearch_store import ElasticsearchDocumentStore
from rag_gateway.upstream.adapter import UpstreamAdapter
from rag_gateway.upstream.negotiation import NegotiatedEndpoint
from rag_gateway.upstream.normalizer import ResponseNormalizer
from rag_gateway.upstream.prober import CapabilityProber
from rag_gateway.upstream.shapes import build_shapes

logger = get_logger("app")


def attach_components(
    app: FastAPI,
    settings: Settings,
    backend_client: httpx.AsyncClient,
    store: DocumentStore,
) -> CapabilityProber:
    """Build the request pipeline and place its parts on ``app.state``."""
    negotiated = NegotiatedEndpoint(Endpoint(settings.default_endpoint))
    shapes = build_shapes(settings.chat_path, settings.completion_path)
    adapter = UpstreamAdapter(backend_client, negotiated, shapes)
    normalizer = ResponseNormalizer(shapes)

    retriever = Retriever(store, default_k=settings.max_results)
    indexer = Indexer(store, max_chars=settings.content_max_chars)

    app.state.pipeline = GatewayPipeline(
        retriever=retriever,
        injector=ContextInjector(),
        adapter=adapter,
        normalizer=normalizer,
        indexer=indexer,
        settings=settings,
    )
    app.state.retriever = retriever
    app.state.indexer = indexer
    app.state.adapter = adapter
    app.state.document_store = store
    return CapabilityProber(adapter, negotiated, settings.default_model)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_json)

    # HTTP clients, shared for the process lifetime
    backend_client = httpx.AsyncClient(
        base_url=settings.backend_base_url,
        timeout=httpx.Timeout(settings.backend_timeout_seconds),
    )
    store_client = httpx.AsyncClient(
        base_url=settings.elasticsearch_url,
        timeout=httpx.Timeout(settings.elasticsearch_timeout_seconds),
        verify=settings.elasticsearch_verify_tls,
    )

    # A missing document store must not stop the gateway from starting
    store = ElasticsearchDocumentStore(store_client, settings.elasticsearch_index)
    try:
        await store.ensure_index()
    except DocumentStoreError as e:
        logger.warning("store_setup_failed", error=str(e))

    prober = attach_components(app, settings, backend_client, store)
    probe_task = prober.schedule(settings.probe_delay_seconds) if settings.probe_enabled else None

    logger.info(
        "startup_complete",
        backend=settings.backend_base_url,
        index=settings.elasticsearch_index,
        endpoint=app.state.adapter.negotiated.current.value,
    )

    yield

    if probe_task is not None and not probe_task.done():
        probe_task.cancel()
        await asyncio.gather(probe_task, return_exceptions=True)
    await app.state.indexer.drain()
    await backend_client.aclose()
    await store_client.aclose()
    logger.info("shutdown_complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(
        title="RAG Gateway",
        version=VERSION,
        description="Retrieval-augmented gateway in front of a generation backend",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(generate_router, tags=["generate"])
    app.include_router(documents_router, tags=["documents"])
    # Must stay last: it matches every remaining /api path
    app.include_router(proxy_router, tags=["proxy"])
    return app
