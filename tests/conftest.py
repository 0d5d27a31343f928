from __future__ import annotations

import json
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, List, Tuple

import httpx
import pytest
import pytest_asyncio

from imagepin.modules.api import http_client
from imagepin.modules.auth import DockerConfig


class RegistryStub:
    """Fake registry answering from a (host, path) route table."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []
        self.clients: List[httpx.AsyncClient] = []

    def add(self, host: str, path: str, status: int = 200, **kwargs: Any) -> None:
        self.routes[(host, path)] = lambda request: httpx.Response(status, **kwargs)

    def add_token(self, host: str, token: str = "token") -> None:
        self.add(host, "/token", json={"token": token})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.url.host, request.url.path))
        if route is None:
            return httpx.Response(404)
        return route(request)

    def redirect(self, host: str, path: str, location: str, status: int = 307) -> None:
        self.add(host, path, status=status, headers={"Location": location})

    def client(self) -> httpx.AsyncClient:
        client = http_client(transport=httpx.MockTransport(self.handler))
        self.clients.append(client)
        return client

    def paths(self) -> List[str]:
        return [f"{r.url.host}{r.url.path}" for r in self.requests]


@pytest_asyncio.fixture
async def registry() -> AsyncIterator[RegistryStub]:
    stub = RegistryStub()
    yield stub
    for client in stub.clients:
        await client.aclose()


@pytest.fixture
def empty_docker_config(tmp_path: Path) -> DockerConfig:
    return DockerConfig(tmp_path / "missing" / "config.json")


@pytest.fixture
def write_docker_config(tmp_path: Path) -> Callable[[Dict[str, Any]], DockerConfig]:
    def _write(payload: Dict[str, Any]) -> DockerConfig:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return DockerConfig(path)

    return _write
