"""Startup discovery of the generation endpoint the backend exposes."""

from __future__ import annotations

import asyncio

from rag_gateway.exceptions import (
    EndpointMismatchError,
    UpstreamError,
    UpstreamResponseError,
)
from rag_gateway.models.domain import Endpoint, GenerationRequest
from rag_gateway.observability.logger import get_logger
from rag_gateway.upstream.adapter import UpstreamAdapter, is_model_missing
from rag_gateway.upstream.negotiation import NegotiatedEndpoint

logger = get_logger("prober")

PROBE_ORDER = (Endpoint.CHAT, Endpoint.COMPLETION)


def _endpoint_exists(error: UpstreamError) -> bool:
    # A model-not-found reply still means the route itself is served
    return (
        isinstance(error, UpstreamResponseError)
        and error.status_code == 404
        and is_model_missing(error.detail)
    )


class CapabilityProber:
    def __init__(
        self, adapter: UpstreamAdapter, negotiated: NegotiatedEndpoint, model: str
    ) -> None:
        self._adapter = adapter
        self._negotiated = negotiated
        self._model = model

    async def probe(self) -> Endpoint:
        """Find a working endpoint; on failure keep the previous one."""
        request = GenerationRequest(
            model=self._model, prompt="ping", options={"num_predict": 1}
        )
        for endpoint in PROBE_ORDER:
            try:
                await self._adapter.call_endpoint(endpoint, request)
            except EndpointMismatchError as e:
                logger.info("probe_endpoint_unsupported", endpoint=endpoint.value, status=e.status_code)
                continue
            except UpstreamError as e:
                if not _endpoint_exists(e):
                    logger.warning(
                        "capability_probe_degraded",
                        endpoint=endpoint.value,
                        error=str(e),
                        keeping=self._negotiated.current.value,
                    )
                    return self._negotiated.current
                logger.warning("probe_model_missing", endpoint=endpoint.value, model=self._model)

            await self._negotiated.set(endpoint)
            logger.info("capability_probe_succeeded", endpoint=endpoint.value)
            return endpoint

        logger.warning(
            "capability_probe_degraded",
            reason="no_supported_endpoint",
            keeping=self._negotiated.current.value,
        )
        return self._negotiated.current

    def schedule(self, delay: float) -> asyncio.Task:
        """Run the probe in the background after ``delay`` seconds."""
        return asyncio.create_task(self._delayed_probe(delay), name="capability-probe")

    async def _delayed_probe(self, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.probe()
        except Exception as e:
            logger.error("capability_probe_crashed", error=str(e))
