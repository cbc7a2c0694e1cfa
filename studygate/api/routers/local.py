"""Local ingestion router: ``/local?url=<archive-url>``."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from studygate.api.dependencies import IngestionServiceDep, SettingsDep

router = APIRouter()


@router.get("/local")
async def ingest_local(
    request: Request,
    service: IngestionServiceDep,
    settings: SettingsDep,
) -> Response:
    """Ingest the archive named by ``url`` and redirect to the chosen viewer mode.

    The raw query string is passed on untouched so that archive URLs with their
    own query strings work without encoding.

    Returns:
        307 redirect on success, 502 with the fallback link on failure
    """
    query = request.url.query
    result = await service.ingest(f"?{query}" if query else "", settings.default_mode_path)

    if result.succeeded and result.redirect_url:
        return RedirectResponse(result.redirect_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=result.model_dump(mode="json"),
    )
