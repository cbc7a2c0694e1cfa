"""Response model for the study list."""

from pydantic import BaseModel, Field

from .study import StudyRecord


class StudyListPage(BaseModel):
    """Studies of the current result window plus the state of the list around them.

    ``studies`` is the whole backend bucket starting at ``offset``; the
    requested page starts at index ``(page_number - 1) * results_per_page - offset``
    of it. ``location`` is the navigation fingerprint the window was fetched for.

    ``placeholder`` is set when the list has nothing to show, either because the
    active data source is reserved for archive-only browsing or because the
    window is empty; clients then point the user at ``fallback_url``.
    """

    studies: list[StudyRecord] = Field(default_factory=list)
    total: int = 0
    page_number: int
    results_per_page: int
    offset: int = 0
    location: str
    data_source: str
    data_path: str = ""
    is_loading: bool = False
    placeholder: bool = False
    fallback_url: str | None = None
