"""Normalization of backend replies into canonical and OpenAI shapes."""

from __future__ import annotations

import time

from rag_gateway.models.domain import Endpoint, GenerationResult
from rag_gateway.models.schemas import (
    OpenAIChoice,
    OpenAICompletion,
    OpenAIMessage,
    OpenAIUsage,
)
from rag_gateway.upstream.shapes import EndpointShape, build_shapes


class ResponseNormalizer:
    def __init__(self, shapes: dict[Endpoint, EndpointShape] | None = None) -> None:
        self._shapes = shapes or build_shapes()

    def to_canonical(self, raw: dict, endpoint: Endpoint) -> GenerationResult:
        return self._shapes[endpoint].extract(raw)

    def to_openai_envelope(self, canonical: GenerationResult, model: str) -> OpenAICompletion:
        prompt_tokens = canonical.prompt_token_count or 0
        completion_tokens = canonical.completion_token_count or 0
        now = time.time()
        return OpenAICompletion(
            id=f"chatcmpl-{int(now * 1000)}",
            created=int(now),
            model=model,
            choices=[
                OpenAIChoice(
                    index=0,
                    message=OpenAIMessage(content=canonical.text),
                    finish_reason=canonical.finish_reason or "stop",
                )
            ],
            usage=OpenAIUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )
