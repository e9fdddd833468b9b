"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt: str | None = None
    model: str | None = None
    system: str | None = None
    options: dict[str, Any] | None = None
    stream: bool = False
    temperature: float | None = None


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str
    content: str | None = ""


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    messages: list[ChatMessage] = Field(default_factory=list)
    model: str | None = None
    options: dict[str, Any] | None = None
    stream: bool = False
    temperature: float | None = None


class DocumentIn(BaseModel):
    content: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class DocumentOut(BaseModel):
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: str | None = None


class IngestResponse(BaseModel):
    success: bool
    message: str


class BulkItemResult(BaseModel):
    index: int
    status: Literal["stored", "skipped", "unavailable", "failed", "invalid"]


class BulkIngestResponse(BaseModel):
    stored: int
    failed: int
    results: list[BulkItemResult]


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    gateway: str = "rag-gateway"
    version: str
    backend: bool
    document_store: bool
    endpoint: str


class OpenAIMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class OpenAIChoice(BaseModel):
    index: int = 0
    message: OpenAIMessage
    finish_reason: str = "stop"


class OpenAIUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class OpenAICompletion(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: list[OpenAIChoice]
    usage: OpenAIUsage
