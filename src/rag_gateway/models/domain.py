"""Core domain objects used throughout the gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class Endpoint(str, Enum):
    """The two generation API shapes a backend may expose."""

    CHAT = "chat"
    COMPLETION = "completion"

    @property
    def alternate(self) -> Endpoint:
        return Endpoint.COMPLETION if self is Endpoint.CHAT else Endpoint.CHAT


@dataclass
class Document:
    content: str
    metadata: dict = field(default_factory=dict)
    timestamp: datetime | None = None


@dataclass
class GenerationRequest:
    model: str
    prompt: str | None = None
    messages: list[dict] | None = None
    system: str | None = None
    options: dict | None = None
    stream: bool = False
    temperature: float | None = None

    @property
    def is_chat(self) -> bool:
        return self.messages is not None

    def query_text(self) -> str:
        """Text used as the retrieval query: the prompt or the last user turn."""
        if self.messages is None:
            return self.prompt or ""
        for message in reversed(self.messages):
            if message.get("role") == "user":
                return str(message.get("content") or "")
        return ""


@dataclass
class GenerationResult:
    text: str
    prompt_token_count: int | None = None
    completion_token_count: int | None = None
    finish_reason: str | None = None


@dataclass
class UpstreamResponse:
    """Raw backend reply: a parsed JSON payload or an open byte stream."""

    endpoint: Endpoint
    payload: dict[str, Any] | None = None
    stream: httpx.Response | None = None


@dataclass
class RagInfo:
    enhanced: bool
    docs_count: int

    def to_dict(self) -> dict:
        return {"enhanced": self.enhanced, "docsCount": self.docs_count}
