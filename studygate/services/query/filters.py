"""Parsing of navigation query strings into typed study filters."""

from collections.abc import Mapping

from studygate.models import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_RESULTS_PER_PAGE,
    NavigationContext,
    QueryFilter,
)

STUDIES_LIMIT = 101

# Query keys that only page through a view without changing it
PAGINATION_KEYS = ("page", "pageNumber", "resultsPerPage")

# Navigation query key -> QueryFilter field
_TEXT_PARAMS = {
    "mrn": "patient_id",
    "patientName": "patient_name",
    "description": "study_description",
    "accession": "accession_number",
    "startDate": "start_date",
    "endDate": "end_date",
    "sortBy": "sort_by",
    "sortDirection": "sort_direction",
    "configUrl": "config",
}


def offset_bucket(page_number: int, results_per_page: int, limit: int = STUDIES_LIMIT) -> int:
    """Coarse offset of the physical backend page holding a logical page.

    Two logical pages with the same bucket are served by one backend request
    of at most ``limit`` studies.
    """
    return (page_number * results_per_page) // limit * (limit - 1)


def try_parse_int(value: str | None, default: int | None) -> int | None:
    """Parse a positive integer, falling back to ``default`` on anything else."""
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def parse_query_filter(
    params: Mapping[str, str],
    studies_limit: int = STUDIES_LIMIT,
    default_results_per_page: int = DEFAULT_RESULTS_PER_PAGE,
) -> QueryFilter:
    """Build a QueryFilter from raw navigation query parameters.

    Unrecognized keys are ignored, absent keys stay unset, and malformed
    integers fall back to the defaults (page 1, 25 results).

    Args:
        params: Raw query parameters
        studies_limit: Maximum number of studies per backend request
        default_results_per_page: Page size used when none is requested

    Returns:
        Normalized filter
    """
    page_number = try_parse_int(params.get("pageNumber"), DEFAULT_PAGE_NUMBER)
    results_per_page = try_parse_int(params.get("resultsPerPage"), default_results_per_page)

    values: dict[str, object] = {
        field: params[key] for key, field in _TEXT_PARAMS.items() if params.get(key) is not None
    }
    modalities = params.get("modalities")
    if modalities:
        values["modalities_in_study"] = [m for m in modalities.split(",") if m]

    page = try_parse_int(params.get("page"), None)
    if page is not None:
        values["page"] = page

    return QueryFilter(
        page_number=page_number,
        results_per_page=results_per_page,
        offset=offset_bucket(page_number, results_per_page, studies_limit),
        **values,
    )


def filter_from_context(
    context: NavigationContext,
    studies_limit: int = STUDIES_LIMIT,
    default_results_per_page: int = DEFAULT_RESULTS_PER_PAGE,
) -> QueryFilter:
    return parse_query_filter(context.query_params, studies_limit, default_results_per_page)
