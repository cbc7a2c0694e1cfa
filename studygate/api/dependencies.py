"""
Common dependencies for StudyGate API endpoints.

Services are created once in the application lifespan and stored on
``app.state``; these dependencies hand them to the routers.
"""

from typing import Annotated

from fastapi import Depends, Request

from studygate.models import NavigationContext
from studygate.services.ingestion import LocalIngestionService
from studygate.services.study_list import StudyListService
from studygate.settings import Settings
from studygate.utils.bootstrap import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    services: ServiceContainer = request.app.state.services
    return services


def get_settings_dep(services: Annotated[ServiceContainer, Depends(get_services)]) -> Settings:
    return services.settings


def get_study_list_service(
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> StudyListService:
    return services.study_list


def get_ingestion_service(
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> LocalIngestionService:
    return services.ingestion


def get_navigation_context(request: Request) -> NavigationContext:
    """Navigation context of the request: its path and raw query string."""
    query = request.url.query
    return NavigationContext(pathname=request.url.path, search=f"?{query}" if query else "")


SettingsDep = Annotated[Settings, Depends(get_settings_dep)]
StudyListServiceDep = Annotated[StudyListService, Depends(get_study_list_service)]
IngestionServiceDep = Annotated[LocalIngestionService, Depends(get_ingestion_service)]
NavigationContextDep = Annotated[NavigationContext, Depends(get_navigation_context)]
