"""
tests/conftest.py

Shared pytest fixtures used by both unit and integration test suites.
All HTTP fixtures use respx.mock: no real network calls are made in any test.
"""

from __future__ import annotations

import asyncio

import pytest
import respx
import httpx


# ---------------------------------------------------------------------------
# HTTP mock fixture: intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a detector would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Slow transport: a server that never answers in time
# ---------------------------------------------------------------------------


@pytest.fixture()
def hanging_client():
    """
    Returns a factory for an httpx.AsyncClient whose requests block for
    `delay` seconds before answering "1.2.3.4".

    Used by cancellation and timeout tests, which respx cannot express.
    """

    def _factory(delay: float = 30.0) -> httpx.AsyncClient:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(delay)
            return httpx.Response(200, text="1.2.3.4")

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory
