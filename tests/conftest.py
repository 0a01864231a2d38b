"""
tests/conftest.py

Shared pytest fixtures used by both unit and integration test suites.
All HTTP fixtures use respx.mock — no real network calls are made in any test.
"""

from __future__ import annotations

import logging

import httpx
import pytest
import respx

from cloudflare.dns_provider import DnsRecord, Zone


# ---------------------------------------------------------------------------
# HTTP mock fixture — intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a service or client would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Shared httpx.AsyncClient fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client():
    """
    Yields a real httpx.AsyncClient instance for use in tests.

    Pair with the mock_http fixture so all requests are intercepted by respx.
    The client is closed after each test.
    """
    async with httpx.AsyncClient() as client:
        yield client


# ---------------------------------------------------------------------------
# Root logger isolation — for tests that call configure_logging()
# ---------------------------------------------------------------------------


@pytest.fixture()
def restore_root_logging():
    """Restores the root logger's handlers and level after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


# ---------------------------------------------------------------------------
# Value object builders
# ---------------------------------------------------------------------------


def make_zone(zone_id: str = "zone123", name: str = "example.com") -> Zone:
    return Zone(id=zone_id, name=name)


def make_record(
    record_id: str = "rec1",
    name: str = "home.example.com",
    content: str = "203.0.113.5",
    type: str = "A",
    zone_id: str = "zone123",
) -> DnsRecord:
    return DnsRecord(
        id=record_id,
        name=name,
        type=type,
        content=content,
        ttl=1,
        proxied=False,
        zone_id=zone_id,
    )
