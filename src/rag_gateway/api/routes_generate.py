"""Generation endpoints: prompt, native chat and OpenAI-compatible chat."""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from rag_gateway.api.dependencies import get_pipeline
from rag_gateway.api.errors import to_http_exception
from rag_gateway.exceptions import GatewayError
from rag_gateway.models.domain import GenerationRequest
from rag_gateway.models.schemas import ChatRequest, GenerateRequest
from rag_gateway.pipeline.gateway_pipeline import (
    GatewayPipeline,
    PipelineResult,
    StreamingResult,
)

router = APIRouter()


def _relay(streaming: StreamingResult) -> StreamingResponse:
    upstream = streaming.response

    async def body():
        try:
            async for chunk in upstream.aiter_bytes():
                yield chunk
        finally:
            await upstream.aclose()

    return StreamingResponse(
        body(),
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/x-ndjson"),
        headers={
            "X-RAG-Enhanced": str(streaming.rag.enhanced).lower(),
            "X-RAG-Docs-Count": str(streaming.rag.docs_count),
        },
    )


REPLY_FIELDS = ("response", "message")


def _prompt_reply(outcome: PipelineResult) -> dict:
    return {"response": outcome.result.text}


def _chat_reply(outcome: PipelineResult) -> dict:
    return {"message": {"role": "assistant", "content": outcome.result.text}}


async def _native(
    pipeline: GatewayPipeline,
    request: GenerationRequest,
    reply: Callable[[PipelineResult], dict],
):
    """Backend fields pass through; the answer field always matches the route."""
    if request.stream:
        return _relay(await pipeline.execute_stream(request))
    outcome = await pipeline.execute(request)
    body = {k: v for k, v in outcome.payload.items() if k not in REPLY_FIELDS}
    return {**body, **reply(outcome), "rag": outcome.rag.to_dict()}


@router.post("/api/generate")
async def generate(
    body: GenerateRequest,
    pipeline: GatewayPipeline = Depends(get_pipeline),
):
    try:
        return await _native(pipeline, pipeline.request_from_generate(body), _prompt_reply)
    except GatewayError as e:
        raise to_http_exception(e) from e


@router.post("/api/chat")
async def chat(
    body: ChatRequest,
    pipeline: GatewayPipeline = Depends(get_pipeline),
):
    try:
        return await _native(pipeline, pipeline.request_from_chat(body), _chat_reply)
    except GatewayError as e:
        raise to_http_exception(e) from e


@router.post("/api/chat/completions")
@router.post("/v1/chat/completions")
async def chat_completions(
    body: ChatRequest,
    pipeline: GatewayPipeline = Depends(get_pipeline),
):
    """OpenAI-compatible chat completions with retrieval augmentation."""
    try:
        request = pipeline.request_from_chat(body)
        if request.stream:
            return _relay(await pipeline.execute_stream(request))
        outcome = await pipeline.execute(request)
    except GatewayError as e:
        raise to_http_exception(e) from e

    envelope = pipeline.normalizer.to_openai_envelope(outcome.result, outcome.model)
    return {**envelope.model_dump(), "rag": outcome.rag.to_dict()}
