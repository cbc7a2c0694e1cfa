"""Query filter parsing and the paginated result cache."""

from studygate.services.query.cache import PaginatedQueryCache
from studygate.services.query.filters import (
    STUDIES_LIMIT,
    filter_from_context,
    offset_bucket,
    parse_query_filter,
)

__all__ = [
    "STUDIES_LIMIT",
    "PaginatedQueryCache",
    "filter_from_context",
    "offset_bucket",
    "parse_query_filter",
]
