"""Metric recording helpers for pipeline traces."""

from __future__ import annotations

from rag_gateway.models.domain import GenerationResult
from rag_gateway.observability.logger import get_logger

logger = get_logger("metrics")


def log_retrieval_metrics(trace_id: str, query_len: int, docs_count: int) -> None:
    logger.info(
        "retrieval_metrics",
        trace_id=trace_id,
        query_len=query_len,
        docs_count=docs_count,
        enhanced=docs_count > 0,
    )


def log_generation_metrics(
    trace_id: str,
    endpoint: str,
    model: str,
    result: GenerationResult,
) -> None:
    logger.info(
        "generation_metrics",
        trace_id=trace_id,
        endpoint=endpoint,
        model=model,
        answer_len=len(result.text),
        prompt_tokens=result.prompt_token_count,
        completion_tokens=result.completion_token_count,
        finish_reason=result.finish_reason,
    )


def log_latency(trace_id: str, stages: dict[str, float], total_ms: float) -> None:
    logger.info(
        "latency",
        trace_id=trace_id,
        stages=stages,
        total_ms=round(total_ms, 2),
    )
