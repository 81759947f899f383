"""Tests for ModuleResolver.describe - single-module resolution."""

from unittest.mock import AsyncMock
from unittest.mock import MagicMock

import pytest

from module_query.errors import ApiError
from module_query.errors import FilesystemError
from module_query.errors import ParseError
from module_query.models import ModuleDetails
from module_query.module_resolution import LocalModuleSource
from module_query.module_resolution import ModuleResolver
from module_query.registry.client import DEFAULT_CDN_URL
from module_query.registry.client import DEFAULT_REGISTRY_URL


@pytest.fixture
def resolver_factory(tmp_path, fake_registry):
    def _make(**kwargs):
        return ModuleResolver(
            root_dir=tmp_path,
            modules_path="plugins",
            registry=fake_registry.client(),
            **kwargs,
        )

    return _make


class TestDescribeLocal:
    @pytest.mark.asyncio
    async def test_local_module_without_readme(self, tmp_path, make_module, resolver_factory, fake_registry):
        make_module(tmp_path, "plugins/foo-bar", {"name": "foo-bar", "version": "1.0.0"})

        async with resolver_factory() as resolver:
            module = await resolver.describe("/plugins/foo-bar")

        assert module.name == "foo-bar"
        assert module.id == "foo-bar"
        assert module.version == "1.0.0"
        assert module.versions == ("1.0.0",)
        assert module.readme_html is None
        assert module.author is None
        assert module.is_local is True
        assert module.is_deprecated is False
        assert fake_registry.requests == []

    @pytest.mark.asyncio
    async def test_local_readme_is_rendered(self, tmp_path, make_module, resolver_factory):
        make_module(tmp_path, "plugins/foo", {"name": "foo", "version": "1.0.0"}, readme="# Foo\n\nHello *world*")

        async with resolver_factory() as resolver:
            module = await resolver.describe("/plugins/foo")

        assert "<h1>Foo</h1>" in module.readme_html
        assert "<em>world</em>" in module.readme_html

    @pytest.mark.asyncio
    async def test_descriptor_fields_and_capability_flags(self, tmp_path, make_module, resolver_factory):
        make_module(
            tmp_path,
            "plugins/full",
            {
                "name": "full",
                "version": "3.1.0",
                "description": "A full module",
                "client": "client.js",
                "worker": "worker.js",
                "serves": ["/api"],
                "metadata": {"tags": ["x"]},
            },
        )

        async with resolver_factory() as resolver:
            module = await resolver.describe("/plugins/full")

        assert module.description == "A full module"
        assert module.capability_flags == {"client": True, "server": False, "worker": True}
        assert module.serves == ["/api"]
        assert module.builds is None
        assert module.metadata == {"tags": ["x"]}
        assert module.type == "module"

    @pytest.mark.asyncio
    async def test_parse_error_aborts_describe(self, tmp_path, make_module, resolver_factory):
        make_module(tmp_path, "plugins/bad", "{", readme="# fine")

        async with resolver_factory() as resolver:
            with pytest.raises(ParseError):
                await resolver.describe("/plugins/bad")

    @pytest.mark.asyncio
    async def test_missing_module_directory_fails(self, resolver_factory):
        async with resolver_factory() as resolver:
            with pytest.raises(FilesystemError):
                await resolver.describe("/plugins/ghost")


class TestDescribeRegistry:
    @pytest.mark.asyncio
    async def test_lodash(self, resolver_factory, fake_registry):
        fake_registry.add_module("lodash", versions=["4.17.21", "4.17.20"], author="jdalton", description="Utilities")

        async with resolver_factory() as resolver:
            module = await resolver.describe("lodash")

        assert module.name == "lodash"
        assert module.version == "4.17.21"
        assert module.versions == ("4.17.21", "4.17.20")
        assert module.author == "jdalton"
        assert module.description == "Utilities"
        assert module.is_deprecated is False
        assert module.is_local is False
        assert module.readme_html is None

    @pytest.mark.asyncio
    async def test_registry_readme_is_rendered(self, resolver_factory, fake_registry):
        fake_registry.add_module("pkg", readme="## Usage\n\n| a | b |\n|---|---|\n| 1 | 2 |\n")

        async with resolver_factory() as resolver:
            module = await resolver.describe("pkg")

        assert "<h2>Usage</h2>" in module.readme_html
        assert "<table>" in module.readme_html

    @pytest.mark.asyncio
    async def test_scoped_name_is_a_registry_module(self, resolver_factory, fake_registry):
        fake_registry.add_module("@scope/pkg")

        async with resolver_factory() as resolver:
            module = await resolver.describe("@scope/pkg")

        assert module.name == "@scope/pkg"
        assert module.is_local is False

    @pytest.mark.asyncio
    async def test_any_failed_fetch_fails_describe(self, resolver_factory, fake_registry):
        fake_registry.add_module("pkg", readme="# pkg")
        fake_registry.add(f"{DEFAULT_REGISTRY_URL}/pkg", status=500, text="boom")

        async with resolver_factory() as resolver:
            with pytest.raises(ApiError) as exc_info:
                await resolver.describe("pkg")

        assert exc_info.value.status_code == 500


class TestClassificationConsistency:
    """All three fetches of a describe call use the same source."""

    @pytest.mark.asyncio
    async def test_registry_identifier_never_touches_local_source(self, fake_registry):
        fake_registry.add_module("pkg")
        local = MagicMock(spec=LocalModuleSource)
        local.read_descriptor = AsyncMock()
        local.read_details = AsyncMock()
        local.read_readme = AsyncMock()

        async with ModuleResolver(local=local, registry=fake_registry.client()) as resolver:
            module = await resolver.describe("pkg")

        assert module.is_local is False
        local.read_descriptor.assert_not_called()
        local.read_details.assert_not_called()
        local.read_readme.assert_not_called()

    @pytest.mark.asyncio
    async def test_local_identifier_never_touches_registry(self, fake_registry):
        local = MagicMock(spec=LocalModuleSource)
        local.read_descriptor = AsyncMock(return_value={"name": "pkg", "version": "1.0.0"})
        local.read_details = AsyncMock(return_value=ModuleDetails(author=None, versions=("1.0.0",)))
        local.read_readme = AsyncMock(return_value=None)
        # Same name published remotely with a readme; it must not leak in
        fake_registry.add_module("pkg", readme="# remote readme")

        async with ModuleResolver(local=local, registry=fake_registry.client()) as resolver:
            module = await resolver.describe("/plugins/pkg")

        assert module.is_local is True
        assert module.readme_html is None
        assert fake_registry.requests == []
        local.read_descriptor.assert_awaited_once_with("/plugins/pkg")
        local.read_details.assert_awaited_once_with("/plugins/pkg")
        local.read_readme.assert_awaited_once_with("/plugins/pkg")


class TestDescriptorName:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("descriptor", [{"version": "1.0.0"}, {"name": "", "version": "1.0.0"}, {"name": 7}])
    async def test_local_package_json_without_name_is_parse_error(
        self, tmp_path, make_module, resolver_factory, descriptor
    ):
        make_module(tmp_path, "plugins/nameless", descriptor)

        async with resolver_factory() as resolver:
            with pytest.raises(ParseError, match="/plugins/nameless"):
                await resolver.describe("/plugins/nameless")

    @pytest.mark.asyncio
    async def test_registry_package_json_without_name_is_api_error(self, fake_registry, resolver_factory):
        fake_registry.add_module("nameless")
        fake_registry.add(f"{DEFAULT_CDN_URL}/nameless/package.json", json_body={"version": "1.0.0"})

        async with resolver_factory() as resolver:
            with pytest.raises(ApiError, match="nameless") as exc_info:
                await resolver.describe("nameless")

        assert exc_info.value.status_code == 500


class TestRegistryClientLifecycle:
    @pytest.mark.asyncio
    async def test_local_only_resolver_never_builds_a_registry_client(self, tmp_path, make_module):
        make_module(tmp_path, "plugins/foo", {"name": "foo", "version": "1.0.0"})
        factory = MagicMock()

        async with ModuleResolver(
            root_dir=tmp_path, modules_path="plugins", sources=["local"], registry_factory=factory
        ) as resolver:
            results = await resolver.search("foo")
            module = await resolver.describe("/plugins/foo")
            assert "registry=None" in repr(resolver)

        assert [m.name for m in results] == ["foo"]
        assert module.name == "foo"
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_registry_client_is_built_once_and_closed(self, tmp_path, fake_registry):
        fake_registry.add_search(["a", "b"])
        fake_registry.add_module("a")
        fake_registry.add_module("b")
        client = fake_registry.client()
        factory = MagicMock(return_value=client)

        async with ModuleResolver(root_dir=tmp_path, sources=["registry"], registry_factory=factory) as resolver:
            results = await resolver.search("")

        assert [m.name for m in results] == ["a", "b"]
        factory.assert_called_once_with()
        assert client._client.is_closed
