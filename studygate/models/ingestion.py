"""Models describing the outcome of local archive ingestion."""

from enum import Enum

from pydantic import BaseModel, Field


class IngestionStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RouteDecision(BaseModel):
    """Viewing mode and redirect target chosen for a set of converted studies."""

    study_ids: list[str]
    mode_path: str
    redirect_url: str
    specialized: bool = False


class IngestionResult(BaseModel):
    """Result of one ingestion run, either a redirect target or a failure state."""

    status: IngestionStatus
    redirect_url: str | None = None
    mode_path: str | None = None
    study_ids: list[str] = Field(default_factory=list)
    message: str | None = None
    fallback_url: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is IngestionStatus.SUCCEEDED
