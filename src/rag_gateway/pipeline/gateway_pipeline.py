"""Request pipeline: retrieve, inject, call upstream, normalize, archive."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from rag_gateway.config.settings import Settings
from rag_gateway.exceptions import InvalidRequestError
from rag_gateway.generation.context_injector import ContextInjector
from rag_gateway.indexing.indexer import Indexer
from rag_gateway.models.domain import (
    Endpoint,
    GenerationRequest,
    GenerationResult,
    RagInfo,
)
from rag_gateway.models.schemas import ChatRequest, GenerateRequest
from rag_gateway.observability.logger import get_logger
from rag_gateway.observability.metrics import (
    log_generation_metrics,
    log_latency,
    log_retrieval_metrics,
)
from rag_gateway.observability.tracing import TraceContext
from rag_gateway.retrieval.retriever import Retriever
from rag_gateway.upstream.adapter import UpstreamAdapter
from rag_gateway.upstream.normalizer import ResponseNormalizer

logger = get_logger("gateway_pipeline")


@dataclass
class PipelineResult:
    payload: dict
    result: GenerationResult
    rag: RagInfo
    endpoint: Endpoint
    model: str


@dataclass
class StreamingResult:
    response: httpx.Response
    rag: RagInfo
    endpoint: Endpoint


class GatewayPipeline:
    def __init__(
        self,
        retriever: Retriever,
        injector: ContextInjector,
        adapter: UpstreamAdapter,
        normalizer: ResponseNormalizer,
        indexer: Indexer,
        settings: Settings,
    ) -> None:
        self._retriever = retriever
        self._injector = injector
        self._adapter = adapter
        self._normalizer = normalizer
        self._indexer = indexer
        self._settings = settings

    @property
    def normalizer(self) -> ResponseNormalizer:
        return self._normalizer

    def request_from_generate(self, body: GenerateRequest) -> GenerationRequest:
        if not body.prompt or not body.prompt.strip():
            raise InvalidRequestError("Prompt is required")
        return GenerationRequest(
            model=body.model or self._settings.default_model,
            prompt=body.prompt,
            system=body.system,
            options=body.options,
            stream=body.stream,
            temperature=(
                body.temperature
                if body.temperature is not None
                else self._settings.default_temperature
            ),
        )

    def request_from_chat(self, body: ChatRequest) -> GenerationRequest:
        messages = [m.model_dump(exclude_none=True) for m in body.messages]
        if not any(m.get("role") == "user" for m in messages):
            raise InvalidRequestError("No user message found")
        return GenerationRequest(
            model=body.model or self._settings.default_model,
            messages=messages,
            options=body.options,
            stream=body.stream,
            temperature=(
                body.temperature
                if body.temperature is not None
                else self._settings.default_temperature
            ),
        )

    async def _augment(
        self, request: GenerationRequest, trace: TraceContext
    ) -> tuple[GenerationRequest, RagInfo]:
        query = request.query_text()
        with trace.span("retrieval"):
            docs = await self._retriever.fetch(query, self._settings.max_results)
        log_retrieval_metrics(trace.trace_id, len(query), len(docs))

        with trace.span("injection"):
            augmented = self._injector.build(request, docs)
        return augmented, RagInfo(enhanced=bool(docs), docs_count=len(docs))

    async def execute(self, request: GenerationRequest) -> PipelineResult:
        trace = TraceContext()
        augmented, rag = await self._augment(request, trace)

        with trace.span("generation"):
            upstream = await self._adapter.generate(augmented)

        payload = upstream.payload or {}
        with trace.span("normalization"):
            result = self._normalizer.to_canonical(payload, upstream.endpoint)

        log_generation_metrics(trace.trace_id, upstream.endpoint.value, request.model, result)

        if result.text:
            self._indexer.schedule(
                result.text,
                {
                    "query": request.query_text(),
                    "model": request.model,
                    "endpoint": upstream.endpoint.value,
                    "enhanced": rag.enhanced,
                    "ragDocsCount": rag.docs_count,
                },
            )

        log_latency(trace.trace_id, trace.durations(), trace.elapsed_ms)
        return PipelineResult(
            payload=payload,
            result=result,
            rag=rag,
            endpoint=upstream.endpoint,
            model=request.model,
        )

    async def execute_stream(self, request: GenerationRequest) -> StreamingResult:
        """Augment, then hand back the open upstream stream for byte relay.

        Streamed replies are neither normalized nor archived.
        """
        trace = TraceContext()
        augmented, rag = await self._augment(request, trace)

        with trace.span("generation_open"):
            upstream = await self._adapter.generate(augmented)

        log_latency(trace.trace_id, trace.durations(), trace.elapsed_ms)
        return StreamingResult(response=upstream.stream, rag=rag, endpoint=upstream.endpoint)
