"""Seed the document store with sample documents for development."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import httpx

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rag_gateway.config.settings import Settings
from rag_gateway.indexing.indexer import Indexer, IngestStatus
from rag_gateway.observability.logger import setup_logging
from rag_gateway.storage.elasticsearch_store import ElasticsearchDocumentStore

SAMPLE_DOCS = [
    {
        "title": "gateway_overview",
        "content": """The RAG gateway sits between the chat client and the model backend.
Every request is augmented with documents retrieved from Elasticsearch before it
is forwarded, and finished answers are archived so later requests can find them.""",
    },
    {
        "title": "endpoint_negotiation",
        "content": """At startup the gateway probes the backend's chat endpoint. When the
backend answers 404 it falls back to the completion endpoint and remembers the
choice for all later requests. A request that hits a mismatch flips the choice once
and retries; a second mismatch is reported as an error.""",
    },
    {
        "title": "retrieval_policy",
        "content": """Retrieved documents are presented to the model as the authoritative
source of truth. The model is told to prefer them over trained knowledge and to
say so when they do not contain the answer.""",
    },
]


async def main():
    settings = Settings()
    setup_logging(settings.log_level, json_output=False)

    async with httpx.AsyncClient(
        base_url=settings.elasticsearch_url,
        timeout=httpx.Timeout(settings.elasticsearch_timeout_seconds),
        verify=settings.elasticsearch_verify_tls,
    ) as client:
        store = ElasticsearchDocumentStore(client, settings.elasticsearch_index)
        await store.ensure_index()
        indexer = Indexer(store, max_chars=settings.content_max_chars)

        for doc in SAMPLE_DOCS:
            status = await indexer.ingest(doc["content"], {"title": doc["title"], "source": "seed"})
            print(f"{doc['title']}: {status.value}")
            if status is IngestStatus.UNAVAILABLE:
                print(f"Document store at {settings.elasticsearch_url} is unreachable")
                return


if __name__ == "__main__":
    asyncio.run(main())
