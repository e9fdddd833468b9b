"""Tests for the end-to-end gateway pipeline with simulated dependencies."""

from __future__ import annotations

import pytest

from conftest import RecordingBackend, ollama_chat_reply, ollama_generate_reply
from rag_gateway.exceptions import InvalidRequestError
from rag_gateway.generation.context_injector import ContextInjector
from rag_gateway.indexing.indexer import Indexer
from rag_gateway.models.domain import Endpoint
from rag_gateway.models.schemas import ChatRequest, GenerateRequest
from rag_gateway.pipeline.gateway_pipeline import GatewayPipeline
from rag_gateway.retrieval.retriever import Retriever
from rag_gateway.upstream.adapter import UpstreamAdapter
from rag_gateway.upstream.negotiation import NegotiatedEndpoint
from rag_gateway.upstream.normalizer import ResponseNormalizer


def _pipeline(backend, store, settings, endpoint=Endpoint.CHAT):
    indexer = Indexer(store)
    pipeline = GatewayPipeline(
        retriever=Retriever(store, default_k=settings.max_results),
        injector=ContextInjector(),
        adapter=UpstreamAdapter(backend.client(), NegotiatedEndpoint(endpoint)),
        normalizer=ResponseNormalizer(),
        indexer=indexer,
        settings=settings,
    )
    return pipeline, indexer


def test_generate_request_defaults(settings, store):
    pipeline, _ = _pipeline(RecordingBackend(), store, settings)
    request = pipeline.request_from_generate(GenerateRequest(prompt="hi"))
    assert request.model == "llama3:8b"
    assert request.temperature == 0.7


def test_missing_prompt_is_rejected(settings, store):
    pipeline, _ = _pipeline(RecordingBackend(), store, settings)
    with pytest.raises(InvalidRequestError):
        pipeline.request_from_generate(GenerateRequest(prompt="  "))


def test_chat_without_user_message_is_rejected(settings, store):
    pipeline, _ = _pipeline(RecordingBackend(), store, settings)
    with pytest.raises(InvalidRequestError):
        pipeline.request_from_chat(ChatRequest(messages=[{"role": "system", "content": "x"}]))


async def test_augmented_request_reaches_backend(settings, store):
    backend = RecordingBackend({"/api/chat": ollama_chat_reply("answer")})
    pipeline, indexer = _pipeline(backend, store, settings)

    outcome = await pipeline.execute(
        pipeline.request_from_generate(GenerateRequest(prompt="Where do requests go in the gateway?"))
    )
    await indexer.drain()

    assert outcome.rag.enhanced is True
    assert outcome.rag.docs_count == 1
    assert outcome.result.text == "answer"
    _, body = backend.calls[0]
    assert body["messages"][0]["role"] == "system"
    assert "The gateway forwards requests to Ollama." in body["messages"][1]["content"]


async def test_store_down_still_answers_without_augmentation(settings, store):
    store.available = False
    backend = RecordingBackend({"/api/chat": ollama_chat_reply("plain")})
    pipeline, indexer = _pipeline(backend, store, settings)

    outcome = await pipeline.execute(
        pipeline.request_from_generate(GenerateRequest(prompt="gateway"))
    )
    await indexer.drain()

    assert outcome.rag.enhanced is False
    assert outcome.rag.docs_count == 0
    assert outcome.result.text == "plain"
    _, body = backend.calls[0]
    assert body["messages"] == [{"role": "user", "content": "gateway"}]


async def test_answer_is_archived_with_metadata(settings, empty_store):
    backend = RecordingBackend({"/api/generate": ollama_generate_reply("archived")})
    pipeline, indexer = _pipeline(backend, empty_store, settings, Endpoint.COMPLETION)

    await pipeline.execute(pipeline.request_from_generate(GenerateRequest(prompt="question")))
    await indexer.drain()

    document = empty_store.documents[0]
    assert document.content == "archived"
    assert document.metadata == {
        "query": "question",
        "model": "llama3:8b",
        "endpoint": "completion",
        "enhanced": False,
        "ragDocsCount": 0,
    }


async def test_chat_request_uses_last_user_message_for_retrieval(settings, store):
    backend = RecordingBackend({"/api/chat": ollama_chat_reply()})
    pipeline, indexer = _pipeline(backend, store, settings)

    request = pipeline.request_from_chat(
        ChatRequest(
            messages=[
                {"role": "user", "content": "unrelated"},
                {"role": "assistant", "content": "ok"},
                {"role": "user", "content": "fuzzy matching"},
            ]
        )
    )
    outcome = await pipeline.execute(request)
    await indexer.drain()

    assert outcome.rag.docs_count == 1
    _, body = backend.calls[0]
    assert "Retrieval uses fuzzy lexical matching." in body["messages"][0]["content"]


async def test_stream_is_relayed_and_not_archived(settings, empty_store):
    backend = RecordingBackend({"/api/chat": ollama_chat_reply()})
    pipeline, indexer = _pipeline(backend, empty_store, settings)

    request = pipeline.request_from_generate(GenerateRequest(prompt="hi", stream=True))
    streaming = await pipeline.execute_stream(request)
    await streaming.response.aread()
    await streaming.response.aclose()
    await indexer.drain()

    assert streaming.endpoint is Endpoint.CHAT
    assert empty_store.save_calls == []
