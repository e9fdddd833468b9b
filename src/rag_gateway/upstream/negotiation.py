"""Process-wide negotiated generation endpoint."""

from __future__ import annotations

import asyncio

from rag_gateway.models.domain import Endpoint
from rag_gateway.observability.logger import get_logger

logger = get_logger("negotiation")


class NegotiatedEndpoint:
    """The endpoint shape currently believed to work against the backend.

    Owned by the application and shared by the adapter and prober. Writes go
    through an asyncio.Lock so concurrent first requests cannot both flip it.
    """

    def __init__(self, initial: Endpoint = Endpoint.CHAT) -> None:
        self._value = initial
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Endpoint:
        return self._value

    async def set(self, value: Endpoint) -> None:
        async with self._lock:
            if value is not self._value:
                logger.info("endpoint_set", previous=self._value.value, current=value.value)
            self._value = value

    async def compare_and_swap(self, expected: Endpoint, new: Endpoint) -> bool:
        """Swap to ``new`` only if the value is still ``expected``."""
        async with self._lock:
            if self._value is not expected:
                return False
            self._value = new
            logger.info("endpoint_flipped", previous=expected.value, current=new.value)
            return True
