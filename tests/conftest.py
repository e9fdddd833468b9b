"""Shared test fixtures."""

from __future__ import annotations

import json
import re

import httpx
import pytest

from rag_gateway.config.settings import Settings
from rag_gateway.exceptions import DocumentStoreError
from rag_gateway.models.domain import Document

_TOKEN = re.compile(r"\w+")


def _tokens(text: str) -> set[str]:
    return {t.lower() for t in _TOKEN.findall(text)}


class InMemoryDocumentStore:
    """Document store double with OR-semantics lexical matching."""

    def __init__(self, documents: list[Document] | None = None) -> None:
        self.documents: list[Document] = list(documents or [])
        self.available = True
        self.fail_search = False
        self.fail_save = False
        self.ping_calls = 0
        self.search_calls = 0
        self.save_calls: list[tuple[Document, bool]] = []

    async def ping(self) -> bool:
        self.ping_calls += 1
        return self.available

    async def ensure_index(self) -> bool:
        return False

    async def save(self, document: Document, wait_for_visibility: bool = True) -> None:
        self.save_calls.append((document, wait_for_visibility))
        if self.fail_save:
            raise DocumentStoreError("write rejected")
        self.documents.append(document)

    async def search(self, query: str, k: int) -> list[Document]:
        self.search_calls += 1
        if self.fail_search:
            raise DocumentStoreError("search failed")
        terms = _tokens(query)
        scored = []
        for position, doc in enumerate(self.documents):
            words = _tokens(doc.content)
            score = sum(1 for t in terms if any(w.startswith(t) for w in words))
            if score:
                scored.append((-score, position, doc))
        scored.sort(key=lambda item: (item[0], item[1]))
        return [doc for _, _, doc in scored[:k]]


class RecordingBackend:
    """httpx.MockTransport handler that records calls and replies per path."""

    def __init__(self, routes: dict[str, httpx.Response | Exception] | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, dict | None]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.url.path, body))
        reply = self.routes.get(request.url.path)
        if reply is None:
            return httpx.Response(404, text="404 page not found")
        if isinstance(reply, Exception):
            raise reply
        # Fresh copy per call so a route can be hit more than once
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)

    def paths(self) -> list[str]:
        return [path for path, _ in self.calls]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self), base_url="http://backend.test"
        )


def ollama_chat_reply(content: str = "chat answer") -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "model": "llama3:8b",
            "message": {"role": "assistant", "content": content},
            "done": True,
            "done_reason": "stop",
            "prompt_eval_count": 12,
            "eval_count": 5,
        },
    )


def ollama_generate_reply(content: str = "completion answer") -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "model": "llama3:8b",
            "response": content,
            "done": True,
            "done_reason": "stop",
            "prompt_eval_count": 8,
            "eval_count": 3,
        },
    )


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        probe_enabled=False,
        default_model="llama3:8b",
        max_results=3,
        log_json=False,
    )


@pytest.fixture
def sample_documents():
    return [
        Document(content="Elasticsearch stores archived answers.", metadata={"tag": "es"}),
        Document(content="The gateway forwards requests to Ollama.", metadata={"tag": "gw"}),
        Document(content="Retrieval uses fuzzy lexical matching.", metadata={"tag": "ret"}),
    ]


@pytest.fixture
def store(sample_documents):
    return InMemoryDocumentStore(sample_documents)


@pytest.fixture
def empty_store():
    return InMemoryDocumentStore()
