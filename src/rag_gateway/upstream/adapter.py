"""Adapter that speaks whichever generation endpoint the backend supports."""

from __future__ import annotations

from typing import Any

import httpx

from rag_gateway.exceptions import (
    EndpointMismatchError,
    UpstreamResponseError,
    UpstreamUnavailableError,
)
from rag_gateway.models.domain import Endpoint, GenerationRequest, UpstreamResponse
from rag_gateway.observability.logger import get_logger
from rag_gateway.upstream.negotiation import NegotiatedEndpoint
from rag_gateway.upstream.shapes import EndpointShape, build_shapes

logger = get_logger("upstream")

MISMATCH_STATUSES = frozenset({404, 405, 501})


def is_model_missing(detail: Any) -> bool:
    # Ollama answers 404 for an unknown model too; that is not a shape problem.
    text = str(detail.get("error", "") if isinstance(detail, dict) else detail).lower()
    return "model" in text and "not found" in text


class UpstreamAdapter:
    def __init__(
        self,
        client: httpx.AsyncClient,
        negotiated: NegotiatedEndpoint,
        shapes: dict[Endpoint, EndpointShape] | None = None,
    ) -> None:
        self._client = client
        self._negotiated = negotiated
        self._shapes = shapes or build_shapes()

    @property
    def negotiated(self) -> NegotiatedEndpoint:
        return self._negotiated

    async def generate(self, req: GenerationRequest) -> UpstreamResponse:
        """Call the negotiated endpoint, flipping to the alternate once on mismatch."""
        endpoint = self._negotiated.current
        try:
            return await self.call_endpoint(endpoint, req)
        except EndpointMismatchError as e:
            alternate = endpoint.alternate
            logger.warning(
                "endpoint_mismatch",
                endpoint=endpoint.value,
                fallback=alternate.value,
                status=e.status_code,
            )
            await self._negotiated.compare_and_swap(endpoint, alternate)

        try:
            return await self.call_endpoint(alternate, req)
        except EndpointMismatchError as e:
            await self._negotiated.compare_and_swap(alternate, endpoint)
            logger.error(
                "endpoint_negotiation_failed",
                tried=[endpoint.value, alternate.value],
            )
            raise EndpointMismatchError(
                "Backend supports neither the chat nor the completion endpoint",
                detail=e.detail,
            ) from e

    async def call_endpoint(self, endpoint: Endpoint, req: GenerationRequest) -> UpstreamResponse:
        """One call against a fixed endpoint shape, without fallback."""
        shape = self._shapes[endpoint]
        payload = shape.build_payload(req)

        try:
            if req.stream:
                request = self._client.build_request("POST", shape.path, json=payload)
                response = await self._client.send(request, stream=True)
            else:
                response = await self._client.post(shape.path, json=payload)
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(f"Backend timed out: {e}") from e
        except httpx.TransportError as e:
            raise UpstreamUnavailableError(f"Backend unreachable: {e}") from e

        if response.status_code >= 400:
            detail = await self._error_detail(response)
            if response.status_code in MISMATCH_STATUSES and not is_model_missing(detail):
                raise EndpointMismatchError(
                    f"Backend does not support {shape.path}",
                    status_code=response.status_code,
                    detail=detail,
                )
            raise UpstreamResponseError(
                f"Backend returned HTTP {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )

        if req.stream:
            return UpstreamResponse(endpoint=endpoint, stream=response)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamResponseError(
                "Malformed backend response", detail=response.text[:500]
            ) from e
        if not isinstance(data, dict):
            raise UpstreamResponseError("Malformed backend response", detail=data)

        logger.info("upstream_call_completed", endpoint=endpoint.value, model=req.model)
        return UpstreamResponse(endpoint=endpoint, payload=data)

    async def forward(
        self,
        method: str,
        path: str,
        body: bytes | None = None,
        params: dict | None = None,
    ) -> httpx.Response:
        """Plain passthrough to the backend; error statuses are returned, not raised."""
        try:
            return await self._client.request(
                method,
                path,
                content=body or None,
                params=params,
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(f"Backend timed out: {e}") from e
        except httpx.TransportError as e:
            raise UpstreamUnavailableError(f"Backend unreachable: {e}") from e

    async def ping(self) -> bool:
        try:
            response = await self._client.get("/api/tags")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("backend_ping_failed", error=str(e))
            return False

    @staticmethod
    async def _error_detail(response: httpx.Response) -> Any:
        try:
            await response.aread()
        finally:
            await response.aclose()
        try:
            return response.json()
        except ValueError:
            return response.text
