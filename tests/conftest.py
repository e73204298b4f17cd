"""Shared fixtures: an in-process stand-in for the CMR catalog."""

import re
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qsl

import httpx
import pytest

from cmr_graph.models.config import CatalogConfig
from cmr_graph.upstream.client import CatalogClient

ROOT_URL = "http://example.com"


class CatalogStub:
    """
    Answers catalog requests from registered routes and records every
    request it sees, so tests can assert on call counts and bodies.
    """

    def __init__(self):
        self._routes: List[dict] = []
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        pattern: str,
        json: Any = None,
        status: int = 200,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> None:
        """Register a response for requests whose path matches `pattern`."""
        self._routes.append({
            "method": method,
            "pattern": re.compile(pattern),
            "json": json,
            "status": status,
            "headers": headers or {},
            "body": body,
        })

    def add_handler(self, method: str, pattern: str, handler: Callable) -> None:
        """Register a (possibly async) callable producing the response."""
        self._routes.append({
            "method": method,
            "pattern": re.compile(pattern),
            "handler": handler,
            "body": None,
        })

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        content = request.content.decode()
        for route in self._routes:
            if route["method"] != request.method:
                continue
            if not route["pattern"].search(request.url.path):
                continue
            if route["body"] is not None and route["body"] != content:
                continue
            if "handler" in route:
                return route["handler"](request)
            return httpx.Response(
                route["status"], json=route["json"], headers=route["headers"]
            )
        return httpx.Response(
            404, json={"errors": [f"No stub for {request.method} {request.url} {content}"]}
        )

    def calls(self, pattern: str) -> List[httpx.Request]:
        compiled = re.compile(pattern)
        return [r for r in self.requests if compiled.search(r.url.path)]

    def bodies(self, pattern: str) -> List[str]:
        return [r.content.decode() for r in self.calls(pattern)]

    @staticmethod
    def form(request: httpx.Request) -> List[tuple]:
        return parse_qsl(request.content.decode())

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def config():
    return CatalogConfig(cmr_root_url=ROOT_URL, umm_versions={"subscription": "1.0"})


@pytest.fixture
def stub():
    return CatalogStub()


@pytest.fixture
def client(stub, config):
    return CatalogClient(config, stub.http_client())
