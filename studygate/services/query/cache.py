"""Result window cache for paginated study searches.

The backend answers at most ``studies_limit`` studies per request, so several
logical pages share one physical fetch (an offset bucket). The cache only
re-queries when the requested page leaves the current bucket or the
navigation context changes.
"""

import asyncio

from studygate.exceptions.domain import SearchFailedError
from studygate.models import CacheAction, NavigationContext, QueryFilter, ResultWindow
from studygate.services.datasource.resolver import ResolvedDataSource
from studygate.services.query.filters import STUDIES_LIMIT, offset_bucket
from studygate.utils.logger import component_logger


class PaginatedQueryCache:
    """Owns the last fetched result window of one data source.

    Only this class writes the window and the loading flag; callers read them
    and ask for a window through :meth:`load` or :meth:`refresh`.

    Each fetch is tagged with a generation id. A response that arrives after a
    newer fetch was issued (or after :meth:`reset`) is not stored, so a slow
    answer to an old filter never overwrites a newer window.
    """

    def __init__(
        self,
        data_source: ResolvedDataSource,
        studies_limit: int = STUDIES_LIMIT,
        archive_only_data_source: str | None = None,
    ):
        """Initialize the cache.

        Args:
            data_source: Resolved data source answering the searches
            studies_limit: Maximum number of studies per backend request
            archive_only_data_source: Name of the data source that is never queried automatically
        """
        self._data_source = data_source
        self._studies_limit = studies_limit
        self._archive_only_data_source = archive_only_data_source
        self._window = ResultWindow.default()
        self._is_loading = False
        self._generation = 0
        # (location, offset bucket) of the fetch in flight
        self._pending: tuple[str, int] | None = None
        self._settled: asyncio.Event | None = None
        self._log = component_logger(f"query[{data_source.name}]")

    @property
    def window(self) -> ResultWindow:
        return self._window

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def data_source_name(self) -> str:
        return self._data_source.name

    def _bucket(self, page_number: int, results_per_page: int) -> int:
        return offset_bucket(page_number, results_per_page, self._studies_limit)

    def _key(self, query_filter: QueryFilter, context: NavigationContext) -> tuple[str, int]:
        return (
            context.fingerprint,
            self._bucket(query_filter.page_number, query_filter.results_per_page),
        )

    def covers(self, query_filter: QueryFilter, context: NavigationContext) -> bool:
        """Check that the current window holds the requested location and bucket."""
        window = self._window
        return (
            window.location,
            self._bucket(window.page_number, window.results_per_page),
        ) == self._key(query_filter, context)

    def evaluate(self, query_filter: QueryFilter, context: NavigationContext) -> CacheAction:
        """Decide whether the cached window must be refetched for a new filter.

        The window is stale when the requested page falls into another offset
        bucket or the navigation context changed. While a fetch is in flight,
        a request for the same location and bucket does not fetch again.

        Args:
            query_filter: Filter derived from the current navigation context
            context: Current navigation context

        Returns:
            CacheAction.FETCH if the window is stale, CacheAction.HOLD otherwise
        """
        is_already_pending = self._is_loading and self._pending == self._key(
            query_filter, context
        )
        is_data_invalid = not self.covers(query_filter, context) and not is_already_pending

        if is_data_invalid and self.data_source_name != self._archive_only_data_source:
            return CacheAction.FETCH
        return CacheAction.HOLD

    async def fetch(self, query_filter: QueryFilter, context: NavigationContext) -> ResultWindow:
        """Search the data source and replace the window with the results.

        The window built from this search is returned even when a newer fetch
        (or a reset) superseded it; it is then not stored in the cache.

        Args:
            query_filter: Filter to search with
            context: Navigation context recorded on the new window

        Returns:
            Window holding the results of this search

        Raises:
            SearchFailedError: If the search fails; the cached window is left unchanged
        """
        self._generation += 1
        generation = self._generation
        settled = asyncio.Event()
        self._is_loading = True
        self._pending = self._key(query_filter, context)
        self._settled = settled
        self._log.debug(
            f"Fetching page {query_filter.page_number} from '{self.data_source_name}' "
            f"(generation {generation})"
        )

        try:
            studies = await self._data_source.handle.search(query_filter)
            window = ResultWindow.from_search(studies or [], query_filter, context.fingerprint)
        except Exception as e:
            raise SearchFailedError(self.data_source_name, str(e)) from e
        finally:
            # also runs on cancellation, so the loading flag never stays set
            if generation == self._generation:
                self._is_loading = False
                self._pending = None
            settled.set()

        if generation != self._generation:
            self._log.info(
                f"Not caching stale response from '{self.data_source_name}' "
                f"(generation {generation}, latest {self._generation})"
            )
            return window

        self._window = window
        self._log.info(
            f"Fetched {window.total} studies from '{self.data_source_name}' "
            f"for page {query_filter.page_number}"
        )
        return window

    async def load(self, query_filter: QueryFilter, context: NavigationContext) -> ResultWindow:
        """Return the window for exactly this location and offset bucket.

        Served from the cache when it covers the request, shared with the fetch
        already in flight for the same key, or fetched otherwise. A failed
        search yields an empty window for the request instead of another view's
        studies. The archive-only data source is never searched; its current
        window is returned as is.
        """
        if self.evaluate(query_filter, context) is CacheAction.HOLD:
            settled = self._settled
            if (
                self._is_loading
                and self._pending == self._key(query_filter, context)
                and settled is not None
            ):
                await settled.wait()
            if (
                self.covers(query_filter, context)
                or self.data_source_name == self._archive_only_data_source
            ):
                return self._window

        try:
            return await self.fetch(query_filter, context)
        except SearchFailedError as e:
            self._log.warning(str(e))
            return ResultWindow.from_search([], query_filter, context.fingerprint)

    async def refresh(self, query_filter: QueryFilter, context: NavigationContext) -> bool:
        """Evaluate the window and fetch if it is stale.

        Search failures are logged and swallowed; the previous window stays in place.

        Returns:
            True if a fetch was attempted
        """
        if self.evaluate(query_filter, context) is CacheAction.HOLD:
            return False
        try:
            await self.fetch(query_filter, context)
        except SearchFailedError as e:
            self._log.warning(str(e))
        return True

    def reset(self) -> None:
        """Invalidate the cache; the next evaluation always yields FETCH.

        Responses of fetches issued before the reset are not stored.
        """
        self._generation += 1
        self._window = ResultWindow.default()
        self._is_loading = False
        self._pending = None
        self._log.debug(f"Reset result window of '{self.data_source_name}'")
