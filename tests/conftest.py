"""Global fixtures for StudyGate tests."""

import pytest

from studygate.services.datasource.registry import DataSourceRegistry, ModuleDefinition
from studygate.services.datasource.resolver import ResolvedDataSource
from studygate.services.metadata_store import MetadataStore
from studygate.settings import DataSourceType, Settings
from tests.helpers import FakeDataSource, make_study


@pytest.fixture
def test_settings() -> Settings:
    """Settings independent of any settings.toml or environment."""
    return Settings(
        default_data_source_name=None,
        data_sources=[],
        extensions=[],
        log_to_file=False,
    )


@pytest.fixture
def store() -> MetadataStore:
    return MetadataStore(max_studies=50)


@pytest.fixture
def fake_source() -> FakeDataSource:
    return FakeDataSource([make_study("1.1"), make_study("1.2")])


@pytest.fixture
def resolved(fake_source: FakeDataSource) -> ResolvedDataSource:
    return ResolvedDataSource(name="pacs", handle=fake_source)


@pytest.fixture
def registry(fake_source: FakeDataSource) -> DataSourceRegistry:
    """Registry with two web data sources and one local data source."""
    registry = DataSourceRegistry()
    registry.register_extension(
        "default",
        [
            ModuleDefinition(name="pacs", type=DataSourceType.WEB_API, handles=[fake_source]),
            ModuleDefinition(
                name="archive",
                type=DataSourceType.WEB_API,
                handles=[FakeDataSource([make_study("9.9")])],
            ),
        ],
    )
    registry.register_extension(
        "local",
        [
            ModuleDefinition(
                name="dicomlocal", type=DataSourceType.LOCAL_API, handles=[FakeDataSource()]
            )
        ],
    )
    return registry
