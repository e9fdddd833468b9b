"""Tests for the lock-guarded negotiated endpoint."""

from __future__ import annotations

import asyncio

from rag_gateway.models.domain import Endpoint
from rag_gateway.upstream.negotiation import NegotiatedEndpoint


def test_alternate():
    assert Endpoint.CHAT.alternate is Endpoint.COMPLETION
    assert Endpoint.COMPLETION.alternate is Endpoint.CHAT


async def test_compare_and_swap_succeeds_on_expected_value():
    negotiated = NegotiatedEndpoint(Endpoint.CHAT)
    assert await negotiated.compare_and_swap(Endpoint.CHAT, Endpoint.COMPLETION) is True
    assert negotiated.current is Endpoint.COMPLETION


async def test_compare_and_swap_rejects_stale_expectation():
    negotiated = NegotiatedEndpoint(Endpoint.COMPLETION)
    assert await negotiated.compare_and_swap(Endpoint.CHAT, Endpoint.COMPLETION) is False
    assert negotiated.current is Endpoint.COMPLETION


async def test_concurrent_flips_apply_once():
    negotiated = NegotiatedEndpoint(Endpoint.CHAT)
    results = await asyncio.gather(
        *[negotiated.compare_and_swap(Endpoint.CHAT, Endpoint.COMPLETION) for _ in range(10)]
    )
    assert results.count(True) == 1
    assert negotiated.current is Endpoint.COMPLETION


async def test_set_overwrites():
    negotiated = NegotiatedEndpoint()
    await negotiated.set(Endpoint.COMPLETION)
    assert negotiated.current is Endpoint.COMPLETION
