"""Catch-all passthrough of other backend API calls."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from rag_gateway.api.dependencies import get_adapter
from rag_gateway.api.errors import to_http_exception
from rag_gateway.exceptions import UpstreamError
from rag_gateway.upstream.adapter import UpstreamAdapter

router = APIRouter()


@router.api_route(
    "/api/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def proxy(
    path: str,
    request: Request,
    adapter: UpstreamAdapter = Depends(get_adapter),
) -> Response:
    body = await request.body() if request.method != "GET" else None
    try:
        upstream = await adapter.forward(
            request.method,
            f"/api/{path}",
            body=body,
            params=dict(request.query_params),
        )
    except UpstreamError as e:
        raise to_http_exception(e) from e

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )
