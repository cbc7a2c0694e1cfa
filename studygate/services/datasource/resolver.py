"""Selection of the data source that answers queries for a navigation context."""

from dataclasses import dataclass

from studygate.exceptions.domain import NoDataSourceFoundError
from studygate.models import NavigationContext
from studygate.services.datasource.registry import (
    DataSourceHandle,
    DataSourceRegistry,
    ModuleKind,
)
from studygate.settings import DataSourceType
from studygate.utils.logger import logger

DATA_SOURCE_QUERY_KEY = "datasources"


@dataclass(slots=True, frozen=True)
class ResolvedDataSource:
    name: str
    handle: DataSourceHandle
    # "/<name>" when the name came from the query string, else ""
    data_path: str = ""


class DataSourceResolver:
    """Determines which registered data source serves the current view.

    Selection order:
    1. explicit ``datasources`` query parameter
    2. the configured default data source name
    3. the first ``webApi`` data source module that has a registered handle
    """

    def __init__(self, registry: DataSourceRegistry, default_name: str | None = None):
        self._registry = registry
        self._default_name = default_name

    def resolve_name(self, context: NavigationContext) -> tuple[str | None, bool]:
        """Pick a data source name without looking up its handle.

        Returns:
            Tuple of (name or None, whether it was given explicitly)
        """
        explicit = context.query_params.get(DATA_SOURCE_QUERY_KEY)
        if explicit:
            return explicit, True
        if self._default_name:
            return self._default_name, False

        web_api_modules = [
            module
            for modules in self._registry.modules_of_kind(ModuleKind.DATA_SOURCE)
            for module in modules
            if module.type is DataSourceType.WEB_API
        ]
        for module in web_api_modules:
            if self._registry.get_data_sources(module.name):
                return module.name, False
        return None, False

    def resolve(self, context: NavigationContext) -> ResolvedDataSource:
        """Resolve the data source handle for a navigation context.

        Raises:
            NoDataSourceFoundError: If no handle is registered for the selected name
        """
        name, explicit = self.resolve_name(context)
        handles = self._registry.get_data_sources(name)
        if name is None or not handles:
            raise NoDataSourceFoundError(name)

        logger.debug(f"Resolved data source '{name}' for {context.fingerprint}")
        return ResolvedDataSource(
            name=name,
            handle=handles[0],
            data_path=f"/{name}" if explicit else "",
        )
