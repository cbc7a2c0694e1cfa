"""Tests for data source selection and the extension registry."""

import pytest

from studygate.exceptions import NoDataSourceFoundError
from studygate.models import NavigationContext
from studygate.services.datasource.registry import (
    DataSourceHandle,
    DataSourceRegistry,
    ModuleDefinition,
    ModuleKind,
)
from studygate.services.datasource.resolver import DataSourceResolver
from studygate.settings import DataSourceType
from tests.helpers import FakeDataSource


class TestRegistry:
    def test_modules_grouped_per_extension(self, registry: DataSourceRegistry) -> None:
        grouped = registry.modules_of_kind(ModuleKind.DATA_SOURCE)

        assert [[m.name for m in modules] for modules in grouped] == [
            ["pacs", "archive"],
            ["dicomlocal"],
        ]

    def test_unknown_name_has_no_handles(self, registry: DataSourceRegistry) -> None:
        assert registry.get_data_sources("missing") == []
        assert registry.get_data_sources(None) == []

    def test_extension_without_modules(self) -> None:
        registry = DataSourceRegistry()
        registry.register_extension("@ohif/extension-dicom-microscopy")

        assert registry.has_extension("@ohif/extension-dicom-microscopy")
        assert registry.registered_extension_ids == ["@ohif/extension-dicom-microscopy"]
        assert registry.modules_of_kind(ModuleKind.DATA_SOURCE) == []

    def test_fake_source_satisfies_handle_protocol(self) -> None:
        assert isinstance(FakeDataSource(), DataSourceHandle)


class TestResolver:
    def test_explicit_query_parameter_wins(
        self, registry: DataSourceRegistry, fake_source: FakeDataSource
    ) -> None:
        resolver = DataSourceResolver(registry, default_name="pacs")
        resolved = resolver.resolve(NavigationContext.from_url("/?datasources=archive"))

        assert resolved.name == "archive"
        assert resolved.data_path == "/archive"
        assert resolved.handle is not fake_source

    def test_default_name_used_without_query(
        self, registry: DataSourceRegistry, fake_source: FakeDataSource
    ) -> None:
        resolver = DataSourceResolver(registry, default_name="pacs")
        resolved = resolver.resolve(NavigationContext.from_url("/?mrn=1"))

        assert resolved.name == "pacs"
        assert resolved.handle is fake_source
        assert resolved.data_path == ""

    def test_first_web_api_source_without_default(self, registry: DataSourceRegistry) -> None:
        resolver = DataSourceResolver(registry)

        assert resolver.resolve_name(NavigationContext()) == ("pacs", False)

    def test_web_api_without_handles_is_skipped(self) -> None:
        registry = DataSourceRegistry()
        registry.register_extension(
            "default",
            [
                ModuleDefinition(name="empty", type=DataSourceType.WEB_API),
                ModuleDefinition(
                    name="local", type=DataSourceType.LOCAL_API, handles=[FakeDataSource()]
                ),
                ModuleDefinition(
                    name="second", type=DataSourceType.WEB_API, handles=[FakeDataSource()]
                ),
            ],
        )
        resolver = DataSourceResolver(registry)

        assert resolver.resolve(NavigationContext()).name == "second"

    def test_no_data_source_raises(self) -> None:
        resolver = DataSourceResolver(DataSourceRegistry())

        with pytest.raises(NoDataSourceFoundError):
            resolver.resolve(NavigationContext())

    def test_unregistered_explicit_name_raises(self, registry: DataSourceRegistry) -> None:
        resolver = DataSourceResolver(registry, default_name="pacs")

        with pytest.raises(NoDataSourceFoundError, match="nowhere"):
            resolver.resolve(NavigationContext.from_url("/?datasources=nowhere"))

    def test_unregistered_default_name_raises(self, registry: DataSourceRegistry) -> None:
        resolver = DataSourceResolver(registry, default_name="gone")

        with pytest.raises(NoDataSourceFoundError):
            resolver.resolve(NavigationContext())
