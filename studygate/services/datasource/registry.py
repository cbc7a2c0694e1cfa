"""Registry of data source handles contributed by extensions."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

from studygate.models import QueryFilter, StudyRecord
from studygate.settings import DataSourceType
from studygate.utils.logger import logger


class ModuleKind(str, Enum):
    """Capability kinds an extension can contribute modules for."""

    DATA_SOURCE = "dataSourcesModule"


@runtime_checkable
class DataSourceHandle(Protocol):
    """A backend able to answer study searches."""

    async def search(self, query_filter: QueryFilter) -> list[StudyRecord]: ...


@dataclass(slots=True)
class ModuleDefinition:
    """A module contributed by an extension, with the handles it creates."""

    name: str
    type: DataSourceType
    kind: ModuleKind = ModuleKind.DATA_SOURCE
    handles: list[DataSourceHandle] = field(default_factory=list)


@dataclass(slots=True)
class ExtensionEntry:
    extension_id: str
    modules: list[ModuleDefinition]


class DataSourceRegistry:
    """Capability lookup over registered extensions and their data sources.

    Passed explicitly to the resolver and services instead of living in a global.
    """

    def __init__(self) -> None:
        self._extensions: dict[str, ExtensionEntry] = {}

    def register_extension(
        self, extension_id: str, modules: Sequence[ModuleDefinition] = ()
    ) -> None:
        """Register an extension and the modules it contributes.

        Registering the same id again replaces the previous entry.
        """
        self._extensions[extension_id] = ExtensionEntry(extension_id, list(modules))
        logger.debug(f"Registered extension {extension_id} with {len(modules)} module(s)")

    @property
    def registered_extension_ids(self) -> list[str]:
        return list(self._extensions)

    def has_extension(self, extension_id: str) -> bool:
        return extension_id in self._extensions

    def modules_of_kind(self, kind: ModuleKind) -> list[list[ModuleDefinition]]:
        """Modules of one kind, grouped per extension in registration order."""
        grouped = []
        for entry in self._extensions.values():
            modules = [m for m in entry.modules if m.kind is kind]
            if modules:
                grouped.append(modules)
        return grouped

    def get_data_sources(self, name: str | None) -> list[DataSourceHandle]:
        """Handles registered under a data source name; empty if unknown."""
        if not name:
            return []
        for entry in self._extensions.values():
            for module in entry.modules:
                if module.kind is ModuleKind.DATA_SOURCE and module.name == name:
                    return list(module.handles)
        return []
