"""Construction of the registry and services from settings."""

from dataclasses import dataclass

import httpx

from studygate.services.datasource.dicomweb import DicomWebDataSource
from studygate.services.datasource.local import LocalDataSource
from studygate.services.datasource.registry import (
    DataSourceHandle,
    DataSourceRegistry,
    ModuleDefinition,
)
from studygate.services.ingestion import (
    ArchiveDecompressor,
    FileToStudyConverter,
    LocalIngestionService,
    ModalityRouter,
)
from studygate.services.metadata_store import MetadataStore
from studygate.services.study_list import StudyListService
from studygate.settings import DataSourceType, Settings
from studygate.utils.logger import logger

DEFAULT_EXTENSION_ID = "studygate.default"
LOCAL_EXTENSION_ID = "studygate.local"


def build_registry(
    settings: Settings, client: httpx.AsyncClient, store: MetadataStore
) -> DataSourceRegistry:
    """Register configured data sources, the local data source and enabled extensions."""
    registry = DataSourceRegistry()

    modules = []
    for config in settings.data_sources:
        handle: DataSourceHandle
        if config.type is DataSourceType.LOCAL_API:
            handle = LocalDataSource(config.name, store)
        elif not config.qido_root:
            logger.warning(f"Data source '{config.name}' has no qido_root, skipping")
            continue
        else:
            handle = DicomWebDataSource(
                name=config.name,
                qido_root=config.qido_root,
                client=client,
                studies_limit=settings.studies_limit,
                fuzzy_matching=config.fuzzy_matching,
            )
        modules.append(ModuleDefinition(name=config.name, type=config.type, handles=[handle]))
    registry.register_extension(DEFAULT_EXTENSION_ID, modules)

    local = LocalDataSource(settings.local_data_source, store)
    registry.register_extension(
        LOCAL_EXTENSION_ID,
        [
            ModuleDefinition(
                name=settings.local_data_source,
                type=DataSourceType.LOCAL_API,
                handles=[local],
            )
        ],
    )

    for extension_id in settings.extensions:
        if not registry.has_extension(extension_id):
            registry.register_extension(extension_id)

    logger.info(
        f"Registered {len(modules)} configured data source(s) and "
        f"{len(settings.extensions)} extension(s)"
    )
    return registry


@dataclass(slots=True)
class ServiceContainer:
    """Long-lived objects shared by the API and the CLI."""

    settings: Settings
    client: httpx.AsyncClient
    store: MetadataStore
    registry: DataSourceRegistry
    study_list: StudyListService
    ingestion: LocalIngestionService

    async def aclose(self) -> None:
        await self.client.aclose()


def create_services(settings: Settings, client: httpx.AsyncClient | None = None) -> ServiceContainer:
    """Build every service from settings.

    Args:
        settings: Application settings
        client: HTTP client to use; a new one is created if omitted

    Returns:
        Service container; call ``aclose()`` when done
    """
    if client is None:
        client = httpx.AsyncClient(timeout=settings.http_timeout, follow_redirects=True)

    store = MetadataStore(max_studies=settings.metadata_store_max_studies)
    registry = build_registry(settings, client, store)
    ingestion = LocalIngestionService(
        client=client,
        decompressor=ArchiveDecompressor(
            extension=settings.archive_extension, max_depth=settings.max_archive_depth
        ),
        converter=FileToStudyConverter(store),
        router=ModalityRouter(
            store,
            specialized_modality=settings.specialized_modality,
            specialized_mode=settings.specialized_mode,
            local_data_source=settings.local_data_source,
        ),
        extension_available=registry.has_extension(settings.microscopy_extension_id),
        fallback_url=settings.fallback_url,
    )
    return ServiceContainer(
        settings=settings,
        client=client,
        store=store,
        registry=registry,
        study_list=StudyListService(registry, settings),
        ingestion=ingestion,
    )
