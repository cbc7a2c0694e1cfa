"""Local ingestion: fetch an archive by URL and turn it into a viewer redirect."""

from urllib.parse import parse_qsl

import httpx

from studygate.exceptions.domain import (
    IngestionError,
    NoStudiesFoundError,
    SourceFetchError,
    ValidationError,
)
from studygate.models import IngestionResult, IngestionStatus
from studygate.services.ingestion.archive import ArchiveDecompressor
from studygate.services.ingestion.converter import FileToStudyConverter
from studygate.services.ingestion.router import ModalityRouter
from studygate.utils.logger import component_logger, ingestion_run

logger = component_logger("ingestion")

URL_PREFIX = "?url="
FAILURE_MESSAGE = "Something went wrong..."


def source_url_from_search(search: str) -> str:
    """Extract the archive URL from a ``?url=<source>`` query string.

    The remainder after ``?url=`` is taken verbatim so that source URLs with
    their own query strings survive unencoded.

    Raises:
        ValidationError: If the query string carries no URL
    """
    if search.startswith(URL_PREFIX):
        url = search[len(URL_PREFIX) :]
    else:
        url = dict(parse_qsl(search.lstrip("?"))).get("url", "")
    if not url:
        raise ValidationError("Missing 'url' query parameter")
    return url


class LocalIngestionService:
    """Runs one ingestion: fetch, unpack, materialize, convert and route.

    Each call is independent; the only state shared across runs is the
    metadata store the converter writes to.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        decompressor: ArchiveDecompressor,
        converter: FileToStudyConverter,
        router: ModalityRouter,
        extension_available: bool = False,
        fallback_url: str | None = None,
    ):
        """Initialize the service.

        Args:
            client: HTTP client used to fetch archive bytes
            decompressor: Archive decompressor
            converter: File-to-study converter
            router: Modality router
            extension_available: Whether the specialized viewing extension is loaded
            fallback_url: External link shown on failure
        """
        self._client = client
        self._decompressor = decompressor
        self._converter = converter
        self._router = router
        self._extension_available = extension_available
        self._fallback_url = fallback_url

    async def fetch_bytes(self, url: str) -> bytes:
        """Fetch the archive source.

        Raises:
            SourceFetchError: On network errors or error status codes
        """
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceFetchError(url, str(e)) from e
        logger.info(f"Fetched {len(response.content)} bytes from {url}")
        return response.content

    async def ingest_url(self, url: str, mode_path: str) -> IngestionResult:
        """Ingest the archive at ``url``.

        Raises:
            IngestionError: If any stage fails
        """
        data = await self.fetch_bytes(url)
        node = await self._decompressor.descend(self._decompressor.open(data))
        with node:
            files = await self._converter.materialize(node)
        study_ids = await self._converter.convert(files)
        if not study_ids:
            raise NoStudiesFoundError()

        decision = self._router.route(study_ids, self._extension_available, mode_path)
        logger.info(f"Ingested {len(study_ids)} studies, redirecting to {decision.redirect_url}")
        return IngestionResult(
            status=IngestionStatus.SUCCEEDED,
            redirect_url=decision.redirect_url,
            mode_path=decision.mode_path,
            study_ids=decision.study_ids,
        )

    async def ingest(self, search: str, mode_path: str) -> IngestionResult:
        """Ingest the archive named by a ``?url=`` query string.

        Failures are reported as a failed result, never raised.

        Args:
            search: Query string of the ingestion entry URL
            mode_path: Mode to open unless a specialized modality takes over

        Returns:
            Succeeded result with the redirect URL, or failed result with the fallback link
        """
        with ingestion_run():
            try:
                url = source_url_from_search(search)
                return await self.ingest_url(url, mode_path)
            except (IngestionError, ValidationError) as e:
                logger.error(f"Local ingestion failed: {e}")
                return IngestionResult(
                    status=IngestionStatus.FAILED,
                    message=FAILURE_MESSAGE,
                    fallback_url=self._fallback_url,
                )
