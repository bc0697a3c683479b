"""Storage for component definitions.

Definitions are kept exactly as supplied. Nothing is validated when they are
added; a malformed definition is only reported when the component it describes
is first requested from the factory.
"""

from types import MappingProxyType
from typing import Mapping, Optional

import structlog

from beanfactory.domain import ComponentDefinition, Definitions

__all__ = ["DefinitionStore"]

logger = structlog.get_logger(__name__)


class DefinitionStore:
    """Mapping from component name to its declarative definition.

    Statically configured definitions are supplied to the constructor; further
    definitions may be merged in at runtime, overwriting entries with the same name.

    Example:
        >>> store = DefinitionStore({"clock": {"type": "myapp.time:Clock"}})
        >>> store.merge({"calendar": {"type": "myapp.time:Calendar"}})
        >>> sorted(store.names())
        ['calendar', 'clock']
    """

    def __init__(self, definitions: Optional[Mapping[str, ComponentDefinition]] = None):
        self._definitions: Definitions = dict(definitions or {})

    @property
    def definitions(self) -> Mapping[str, ComponentDefinition]:
        """A read-only view of every stored definition."""
        return MappingProxyType(self._definitions)

    def get(self, name: str) -> Optional[ComponentDefinition]:
        return self._definitions.get(name)

    def merge(self, definitions: Optional[Mapping[str, ComponentDefinition]]):
        """Add or overwrite definitions by name, keeping all other entries.

        Args:
            definitions: Definitions to add. Anything other than a mapping is ignored.
        """
        if not isinstance(definitions, Mapping):
            logger.warning(
                "definitions_not_merged",
                reason="definitions must be a mapping",
                received=type(definitions).__name__,
            )
            return
        self._definitions.update(definitions)

    def replace(self, definitions: Mapping[str, ComponentDefinition]):
        """Discard every stored definition and use ``definitions`` instead."""
        self._definitions = dict(definitions)

    def names(self) -> list[str]:
        return list(self._definitions)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
