"""Tests for the CLI commands."""

import json

import httpx
import pytest

from studygate.cli import main as cli
from studygate.settings import DataSourceConfig, Settings
from studygate.utils.bootstrap import create_services

STUDY_JSON = {"0020000D": {"vr": "UI", "Value": ["1.2.840.1"]}}


@pytest.fixture
def cli_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Point the CLI at a mocked PACS that knows one study."""
    settings = Settings(
        data_sources=[DataSourceConfig(name="pacs", qido_root="https://pacs.example.org/qido")],
        extensions=[],
        log_to_file=False,
    )

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "pacs.example.org":
            return httpx.Response(200, json=[STUDY_JSON])
        return httpx.Response(404)

    def fake_create_services(_settings: Settings):
        return create_services(
            settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )

    monkeypatch.setattr(cli, "settings", settings)
    monkeypatch.setattr(cli, "create_services", fake_create_services)
    return settings


@pytest.mark.asyncio
async def test_search_prints_page(cli_settings: Settings, capsys: pytest.CaptureFixture) -> None:
    exit_code = await cli.search("mrn=P001")

    page = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert page["data_source"] == "pacs"
    assert [s["study_instance_uid"] for s in page["studies"]] == ["1.2.840.1"]


@pytest.mark.asyncio
async def test_search_unknown_data_source(cli_settings: Settings) -> None:
    assert await cli.search("datasources=nope") == 1


@pytest.mark.asyncio
async def test_ingest_failure_exit_code(
    cli_settings: Settings, capsys: pytest.CaptureFixture
) -> None:
    exit_code = await cli.ingest("https://files.example.org/missing.zip")

    result = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert result["status"] == "failed"
    assert result["fallback_url"] == cli_settings.fallback_url
