"""Tests for Pydantic schemas and settings."""

import pytest
from pydantic import ValidationError

from rag_gateway.config.settings import Settings
from rag_gateway.models.domain import RagInfo
from rag_gateway.models.schemas import (
    BulkItemResult,
    ChatRequest,
    GenerateRequest,
    HealthResponse,
)


def test_generate_request_defaults():
    req = GenerateRequest(prompt="What is RAG?")
    assert req.stream is False
    assert req.model is None
    assert req.temperature is None


def test_generate_request_keeps_unknown_fields():
    req = GenerateRequest(prompt="x", keep_alive="5m")
    assert req.model_dump()["keep_alive"] == "5m"


def test_chat_request_parses_messages():
    req = ChatRequest(messages=[{"role": "user", "content": "hi"}], stream=True)
    assert req.messages[0].role == "user"
    assert req.stream is True


def test_health_response_rejects_unknown_status():
    with pytest.raises(ValidationError):
        HealthResponse(status="broken", version="1", backend=True, document_store=True, endpoint="chat")


def test_bulk_item_status_values():
    assert BulkItemResult(index=0, status="stored").status == "stored"
    with pytest.raises(ValidationError):
        BulkItemResult(index=0, status="maybe")


def test_rag_info_wire_format():
    assert RagInfo(enhanced=True, docs_count=2).to_dict() == {"enhanced": True, "docsCount": 2}


def test_settings_defaults():
    settings = Settings(_env_file=None)
    assert settings.max_results == 3
    assert settings.content_max_chars == 50_000
    assert settings.default_temperature == 0.7
    assert settings.elasticsearch_index == "ollama-rag"
    assert settings.default_endpoint == "chat"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("RAG_MAX_RESULTS", "7")
    monkeypatch.setenv("RAG_CORS_ALLOW_ORIGINS", "http://a, http://b")
    settings = Settings(_env_file=None)
    assert settings.max_results == 7
    assert settings.cors_origins == ["http://a", "http://b"]
