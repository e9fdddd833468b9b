"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from rag_gateway.config.settings import Settings
from rag_gateway.indexing.indexer import Indexer
from rag_gateway.pipeline.gateway_pipeline import GatewayPipeline
from rag_gateway.protocols.document_store import DocumentStore
from rag_gateway.retrieval.retriever import Retriever
from rag_gateway.upstream.adapter import UpstreamAdapter


def get_pipeline(request: Request) -> GatewayPipeline:
    return request.app.state.pipeline


def get_retriever(request: Request) -> Retriever:
    return request.app.state.retriever


def get_indexer(request: Request) -> Indexer:
    return request.app.state.indexer


def get_adapter(request: Request) -> UpstreamAdapter:
    return request.app.state.adapter


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
