"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Generation backend
    backend_base_url: str = "http://localhost:11434"
    backend_timeout_seconds: float = 120.0
    chat_path: str = "/api/chat"
    completion_path: str = "/api/generate"
    default_endpoint: Literal["chat", "completion"] = "chat"
    default_model: str = "llama3:8b"
    default_temperature: float = 0.7

    # Capability probing
    probe_enabled: bool = True
    probe_delay_seconds: float = 2.0

    # Document store
    elasticsearch_url: str = "http://localhost:9200"
    elasticsearch_index: str = "ollama-rag"
    elasticsearch_timeout_seconds: float = 30.0
    elasticsearch_verify_tls: bool = False

    # Retrieval / indexing
    max_results: int = 3
    document_list_limit: int = 10
    content_max_chars: int = 50_000

    # Server
    host: str = "0.0.0.0"
    port: int = 3100
    cors_allow_origins: str = "*"  # comma-separated list
    max_body_bytes: int = 1_048_576

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_file": ".env", "env_prefix": "RAG_"}

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]
