"""Tests for response normalization."""

from __future__ import annotations

from rag_gateway.models.domain import Endpoint, GenerationResult
from rag_gateway.upstream.normalizer import ResponseNormalizer


def test_chat_payload_to_canonical():
    result = ResponseNormalizer().to_canonical(
        {"message": {"role": "assistant", "content": "hello"}, "eval_count": 3},
        Endpoint.CHAT,
    )
    assert result == GenerationResult(text="hello", completion_token_count=3)


def test_completion_payload_to_canonical():
    result = ResponseNormalizer().to_canonical(
        {"response": "hello", "prompt_eval_count": 2, "eval_count": 1, "done_reason": "stop"},
        Endpoint.COMPLETION,
    )
    assert result.text == "hello"
    assert result.prompt_token_count == 2
    assert result.finish_reason == "stop"


def test_openai_envelope_shape():
    envelope = ResponseNormalizer().to_openai_envelope(
        GenerationResult(text="hi", prompt_token_count=3, completion_token_count=2),
        model="llama3:8b",
    )
    data = envelope.model_dump()

    assert data["object"] == "chat.completion"
    assert data["id"].startswith("chatcmpl-")
    assert isinstance(data["created"], int)
    assert data["model"] == "llama3:8b"
    assert data["choices"][0]["index"] == 0
    assert data["choices"][0]["message"] == {"role": "assistant", "content": "hi"}
    assert data["choices"][0]["finish_reason"] == "stop"
    assert data["usage"] == {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}


def test_openai_envelope_defaults_missing_counts():
    envelope = ResponseNormalizer().to_openai_envelope(
        GenerationResult(text="hi", completion_token_count=4, finish_reason="length"),
        model="m",
    )
    assert envelope.usage.prompt_tokens == 0
    assert envelope.usage.total_tokens == 4
    assert envelope.choices[0].finish_reason == "length"
