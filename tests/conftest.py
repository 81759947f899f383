"""Pytest configuration and shared fixtures for module query tests."""

import json
from pathlib import Path

import httpx
import pytest

from module_query.registry.client import DEFAULT_CDN_URL
from module_query.registry.client import DEFAULT_REGISTRY_URL
from module_query.registry.client import RegistryClient


class FakeRegistry:
    """In-memory registry + CDN served through httpx.MockTransport.

    Unregistered URLs answer 404. Every request is recorded.
    """

    def __init__(self):
        self.routes: dict[str, dict | Exception] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, status: int = 200, json_body=None, text: str | None = None) -> None:
        if json_body is not None:
            self.routes[url] = {"status_code": status, "json": json_body}
        else:
            self.routes[url] = {"status_code": status, "text": text or ""}

    def fail(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    def add_search(self, names: list[str], status: int = 200) -> None:
        body = {"objects": [{"package": {"name": name}} for name in names], "total": len(names)}
        self.add(f"{DEFAULT_REGISTRY_URL}/-/v1/search", status=status, json_body=body)

    def add_module(
        self,
        name: str,
        versions: list[str] | None = None,
        author: str = "someone",
        deprecated: bool = False,
        readme: str | None = None,
        **descriptor,
    ) -> None:
        versions = versions or ["1.0.0"]
        newest = versions[0]
        self.add(
            f"{DEFAULT_CDN_URL}/{name}/package.json",
            json_body={"name": name, "version": newest, **descriptor},
        )
        version_docs = {v: {} for v in versions}
        if deprecated:
            version_docs[newest] = {"deprecated": "no longer maintained"}
        self.add(
            f"{DEFAULT_REGISTRY_URL}/{name}",
            json_body={"name": name, "maintainers": [{"name": author}], "versions": version_docs},
        )
        if readme is not None:
            self.add(f"{DEFAULT_CDN_URL}/{name}/README.md", text=readme)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        route = self.routes.get(key)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return httpx.Response(404, text="Not found")
        return httpx.Response(**route)

    def client(self) -> RegistryClient:
        return RegistryClient(transport=httpx.MockTransport(self.handler))

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


def write_module(root: Path, rel: str, package: dict | str | None = None, readme: str | None = None) -> Path:
    """Create a module directory under ``root`` with optional package.json and README.md."""
    module_dir = root / rel
    module_dir.mkdir(parents=True, exist_ok=True)
    if package is not None:
        content = package if isinstance(package, str) else json.dumps(package)
        (module_dir / "package.json").write_text(content, encoding="utf-8")
    if readme is not None:
        (module_dir / "README.md").write_text(readme, encoding="utf-8")
    return module_dir


@pytest.fixture
def make_module():
    return write_module
