"""Models for paginated study queries."""

from enum import Enum
from typing import Any, Self
from urllib.parse import parse_qsl, urlencode

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .study import StudyRecord

# Never equal to a real fingerprint, which always starts with "/"
INVALID_LOCATION = "Not a valid location, causes first load to occur"

DEFAULT_PAGE_NUMBER = 1
DEFAULT_RESULTS_PER_PAGE = 25


class CacheAction(str, Enum):
    """Outcome of evaluating a cached result window against a new filter."""

    FETCH = "fetch"
    HOLD = "hold"


class NavigationContext(BaseModel):
    """The path, query string and fragment identifying the current view."""

    model_config = ConfigDict(frozen=True)

    pathname: str = "/"
    search: str = ""
    hash: str = ""

    @field_validator("pathname")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        return value if value.startswith("/") else f"/{value}"

    @field_validator("search")
    @classmethod
    def _leading_question_mark(cls, value: str) -> str:
        return value if not value or value.startswith("?") else f"?{value}"

    @classmethod
    def from_url(cls, url: str) -> Self:
        """Build a context from a relative URL such as ``/studies?mrn=1#top``."""
        rest, _, fragment = url.partition("#")
        path, _, query = rest.partition("?")
        return cls(
            pathname=path or "/",
            search=f"?{query}" if query else "",
            hash=f"#{fragment}" if fragment else "",
        )

    @property
    def fingerprint(self) -> str:
        return f"{self.pathname}{self.search}{self.hash}"

    def without_params(self, *keys: str) -> Self:
        """Copy of the context with the given query keys removed."""
        pairs = [
            (key, value)
            for key, value in parse_qsl(self.search.lstrip("?"), keep_blank_values=True)
            if key not in keys
        ]
        search = f"?{urlencode(pairs)}" if pairs else ""
        return self.model_copy(update={"search": search})

    @property
    def query_params(self) -> dict[str, str]:
        """Query string as a dict; the first value wins for repeated keys."""
        params: dict[str, str] = {}
        for key, value in parse_qsl(self.search.lstrip("?"), keep_blank_values=True):
            params.setdefault(key, value)
        return params


class QueryFilter(BaseModel):
    """Normalized search criteria and pagination for a data source search.

    Optional criteria stay ``None`` when the raw parameter was absent and are
    dropped by :meth:`to_params`.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    patient_id: str | None = None
    patient_name: str | None = None
    study_description: str | None = None
    modalities_in_study: list[str] | None = None
    accession_number: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    page: PositiveInt | None = None
    page_number: PositiveInt = DEFAULT_PAGE_NUMBER
    results_per_page: PositiveInt = DEFAULT_RESULTS_PER_PAGE
    sort_by: str | None = None
    sort_direction: str | None = None
    offset: int = Field(default=0, ge=0)
    config: str | None = None

    def to_params(self) -> dict[str, Any]:
        """Dump the filter with camelCase keys, omitting absent criteria."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ResultWindow(BaseModel):
    """The last materialized page of studies. Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True)

    studies: tuple[StudyRecord, ...] = ()
    total: int = 0
    results_per_page: PositiveInt = DEFAULT_RESULTS_PER_PAGE
    page_number: PositiveInt = DEFAULT_PAGE_NUMBER
    # backend offset of the first study in ``studies``
    offset: int = Field(default=0, ge=0)
    location: str = INVALID_LOCATION

    @model_validator(mode="after")
    def _check_total(self) -> Self:
        if self.total != len(self.studies):
            raise ValueError(f"total ({self.total}) must equal study count ({len(self.studies)})")
        return self

    @classmethod
    def default(cls) -> Self:
        """Sentinel window that forces a fetch on the next evaluation."""
        return cls()

    @classmethod
    def from_search(
        cls, studies: list[StudyRecord], query_filter: QueryFilter, location: str
    ) -> Self:
        return cls(
            studies=tuple(studies),
            total=len(studies),
            results_per_page=query_filter.results_per_page,
            page_number=query_filter.page_number,
            offset=query_filter.offset,
            location=location,
        )
