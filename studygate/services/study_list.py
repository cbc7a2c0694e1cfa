"""Study list service: resolves the data source and serves cached result windows."""

from studygate.models import NavigationContext, StudyListPage
from studygate.services.datasource.registry import DataSourceRegistry
from studygate.services.datasource.resolver import DataSourceResolver
from studygate.services.query.cache import PaginatedQueryCache
from studygate.services.query.filters import PAGINATION_KEYS, filter_from_context
from studygate.settings import Settings
from studygate.utils.logger import logger


class StudyListService:
    """Serves the study list for navigation contexts, one result cache per data source."""

    def __init__(self, registry: DataSourceRegistry, settings: Settings):
        self._settings = settings
        self._resolver = DataSourceResolver(registry, settings.default_data_source_name)
        self._caches: dict[str, PaginatedQueryCache] = {}

    @property
    def resolver(self) -> DataSourceResolver:
        return self._resolver

    def _cache_for(self, context: NavigationContext) -> tuple[PaginatedQueryCache, str]:
        resolved = self._resolver.resolve(context)
        cache = self._caches.get(resolved.name)
        if cache is None:
            cache = PaginatedQueryCache(
                resolved,
                studies_limit=self._settings.studies_limit,
                archive_only_data_source=self._settings.archive_only_data_source,
            )
            self._caches[resolved.name] = cache
        return cache, resolved.data_path

    async def get_page(self, context: NavigationContext) -> StudyListPage:
        """Return the result window for a navigation context, refetching when stale.

        The returned studies always belong to the requested location and offset
        bucket, even when other requests share the data source concurrently.

        Raises:
            NoDataSourceFoundError: If no data source can serve the context
        """
        cache, data_path = self._cache_for(context)
        query_filter = filter_from_context(
            context, self._settings.studies_limit, self._settings.default_results_per_page
        )
        # Paging inside a view keeps its location so one backend page serves several
        window = await cache.load(query_filter, context.without_params(*PAGINATION_KEYS))

        placeholder = (
            cache.data_source_name == self._settings.archive_only_data_source
            or not window.studies
        )
        return StudyListPage(
            studies=list(window.studies),
            total=window.total,
            page_number=query_filter.page_number,
            results_per_page=query_filter.results_per_page,
            offset=window.offset,
            location=window.location,
            data_source=cache.data_source_name,
            data_path=data_path,
            is_loading=cache.is_loading,
            placeholder=placeholder,
            fallback_url=self._settings.fallback_url if placeholder else None,
        )

    def reset(self, context: NavigationContext) -> str:
        """Invalidate the cached window of the data source serving ``context``.

        Returns:
            Name of the data source whose cache was reset
        """
        cache, _ = self._cache_for(context)
        cache.reset()
        logger.info(f"Study list of '{cache.data_source_name}' invalidated")
        return cache.data_source_name
