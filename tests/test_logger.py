"""Tests for log context: component tags and ingestion run ids."""

import logging
from pathlib import Path

import httpx
import pytest

from studygate.models import NavigationContext
from studygate.services.datasource.resolver import ResolvedDataSource
from studygate.services.ingestion import (
    ArchiveDecompressor,
    FileToStudyConverter,
    LocalIngestionService,
    ModalityRouter,
)
from studygate.services.metadata_store import MetadataStore
from studygate.services.query.cache import PaginatedQueryCache
from studygate.services.query.filters import parse_query_filter
from studygate.settings import Settings
from studygate.utils.logger import (
    InterceptHandler,
    component_logger,
    ingestion_run,
    logger,
    setup_logging,
)
from tests.helpers import FakeDataSource


@pytest.fixture
def records():
    captured: list[dict] = []
    handler_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(handler_id)


class TestContext:
    def test_untagged_records_use_defaults(self, records: list[dict]) -> None:
        logger.info("plain")

        assert records[-1]["extra"] == {"component": "-", "run_id": "-"}

    def test_component_logger_tags_records(self, records: list[dict]) -> None:
        component_logger("query[pacs]").info("tagged")

        assert records[-1]["extra"]["component"] == "query[pacs]"

    def test_ingestion_run_tags_every_record_inside(self, records: list[dict]) -> None:
        with ingestion_run() as run_id:
            logger.info("first")
            component_logger("ingestion").info("second")
        logger.info("after")

        assert len(run_id) == 8
        assert [r["extra"]["run_id"] for r in records[-3:]] == [run_id, run_id, "-"]

    def test_standard_library_records_keep_their_logger_name(
        self, records: list[dict]
    ) -> None:
        std_logger = logging.getLogger("httpx")
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(logging.INFO)

        std_logger.info("HTTP Request: GET https://pacs.example.org")

        assert records[-1]["extra"]["component"] == "httpx"
        assert records[-1]["message"] == "HTTP Request: GET https://pacs.example.org"


class TestBoundLoggers:
    @pytest.mark.asyncio
    async def test_cache_records_name_their_data_source(
        self, records: list[dict], fake_source: FakeDataSource
    ) -> None:
        cache = PaginatedQueryCache(ResolvedDataSource(name="pacs", handle=fake_source))

        await cache.fetch(parse_query_filter({}), NavigationContext())

        cache_records = [r for r in records if r["name"] == "studygate.services.query.cache"]
        assert cache_records
        assert {r["extra"]["component"] for r in cache_records} == {"query[pacs]"}

    @pytest.mark.asyncio
    async def test_failed_ingestion_is_logged_with_run_id(
        self, records: list[dict], store: MetadataStore
    ) -> None:
        service = LocalIngestionService(
            client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404))),
            decompressor=ArchiveDecompressor(),
            converter=FileToStudyConverter(store),
            router=ModalityRouter(store),
            extension_available=False,
            fallback_url="https://fallback.example.org/",
        )

        await service.ingest("?other=1", "viewer")

        failure = records[-1]
        assert failure["message"].startswith("Local ingestion failed")
        assert failure["extra"]["component"] == "ingestion"
        assert failure["extra"]["run_id"] != "-"


def test_file_sink_writes_context(tmp_path: Path, test_settings: Settings) -> None:
    config = test_settings.model_copy(update={"log_to_file": True, "log_dir": str(tmp_path)})
    setup_logging(config)
    try:
        component_logger("cli").info("written to file")
    finally:
        setup_logging(test_settings)

    content = (tmp_path / "studygate.log").read_text()
    assert "cli run=- |" in content
    assert "written to file" in content
