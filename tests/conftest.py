"""Pytest configuration and shared fixtures for bundle downloader tests."""

import asyncio
import json
import logging

import pytest
from bundle_downloader.errors import TransportError
from bundle_downloader.logging_setup import JsonlHandler


class FakeTransport:
    """In-memory transport that records every fetched URL.

    Unknown URLs fail like an HTTP 404. A URL with a gate waits until the
    gate's event is set before responding.
    """

    def __init__(self, responses: dict[str, bytes | Exception] | None = None):
        self.responses: dict[str, bytes | Exception] = dict(responses or {})
        self.calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    def gate(self, url: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[url] = event
        return event

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()

        response = self.responses.get(url)
        if response is None:
            raise TransportError(url, f"Could not make request to {url}: HTTP 404", status_code=404)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


def make_entry(last_updated: int, platforms: tuple[str, ...] = ("Windows",), **fields) -> dict:
    """Build one wire-format metadata record."""
    entry = {
        "name": fields.pop("name", "Bundle"),
        "description": fields.pop("description", ""),
        "author": fields.pop("author", "tester"),
        "bundles": {platform: [f"{platform.lower()}.bundle"] for platform in platforms},
        "tags": fields.pop("tags", []),
        "lastUpdated": last_updated,
    }
    entry.update(fields)
    return entry


def listing_bytes(listing: dict) -> bytes:
    return json.dumps(listing).encode("utf-8")


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to use asyncio backend only."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _detach_jsonl_handlers():
    """Keep CLI logging bootstraps from leaking file handlers between tests."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if isinstance(handler, JsonlHandler):
            root.removeHandler(handler)
            handler.close()
