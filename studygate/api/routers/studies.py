"""Study list router.

The query string of each request is the navigation query of the study list
(``datasources``, ``mrn``, ``patientName``, ``pageNumber``, ...).
"""

from fastapi import APIRouter

from studygate.api.dependencies import NavigationContextDep, StudyListServiceDep
from studygate.models import StudyListPage

router = APIRouter()


@router.get("", response_model=StudyListPage)
async def get_studies(context: NavigationContextDep, service: StudyListServiceDep) -> StudyListPage:
    """Return the cached result window for the query, refetching it when stale.

    Args:
        context: Navigation context built from the request
        service: Study list service

    Returns:
        Studies of the current window and the list state
    """
    return await service.get_page(context)


@router.post("/refresh")
async def refresh_studies(
    context: NavigationContextDep, service: StudyListServiceDep
) -> dict[str, str]:
    """Invalidate the cached window; the next GET refetches from the data source."""
    name = service.reset(context)
    return {"data_source": name, "status": "invalidated"}
