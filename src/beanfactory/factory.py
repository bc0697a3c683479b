"""
The bean factory: the entry point that turns component definitions into wired instances.

Resolving a component runs through these steps:

1. a cached instance is returned as-is;
2. a name with no definition is treated as a qualified type name and instantiated
   directly, without any injection;
3. otherwise the raw instance is built from its definition and cached
   *immediately*, before its properties are bound and its post-construct methods
   run.

Caching before binding is what lets two components refer to each other through
properties: the nested request for the first component finds its raw instance in
the cache instead of building it again. Components that depend on each other only
through constructor or factory arguments can never reach the cache, and are
reported with :class:`~beanfactory.errors.CyclicDependencyError`.

Every other failure is logged and reported to the caller as None.
"""

import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import structlog

from beanfactory.cache import InstanceCache
from beanfactory.definitions import DefinitionStore
from beanfactory.domain import ComponentDefinition
from beanfactory.errors import ConstructionError, CyclicDependencyError, TypeResolutionError
from beanfactory.instance_builder import InstanceBuilder
from beanfactory.lifecycle import LifecycleInvoker
from beanfactory.loader import TypeLoader
from beanfactory.properties import PropertyBinder
from beanfactory.values import Arguments, ValueResolver, call_with_arguments

__all__ = ["BeanFactory"]

logger = structlog.get_logger(__name__)

Params = Union[Mapping[str, Any], list[Any], tuple, None]
"""Constructor arguments for components requested by type name."""


@dataclass
class _ResolutionFrame:
    name: str
    cached: bool = False


class BeanFactory:
    """
    Builds, wires and memoizes components described by a mapping of definitions.

    Example:
        >>> factory = BeanFactory({
        ...     "clock": {"type": "myapp.time:SystemClock"},
        ...     "scheduler": {
        ...         "type": "myapp.jobs:Scheduler",
        ...         "constructor_args": {"workers": 4},
        ...         "properties": {"clock": "ref:clock"},
        ...         "post_construct": {"start": None},
        ...     },
        ... })
        >>> scheduler = factory.get_component("scheduler")
        >>> scheduler.clock is factory.get_component("clock")
        True
    """

    def __init__(
        self,
        definitions: Optional[Mapping[str, ComponentDefinition]] = None,
        cache: Optional[InstanceCache] = None,
        loader: Optional[TypeLoader] = None,
    ):
        self._definitions = DefinitionStore(definitions)
        self._cache = cache if cache is not None else InstanceCache()
        self._loader = loader if loader is not None else TypeLoader()

        resolver = ValueResolver(self.get_component)
        self._builder = InstanceBuilder(self._loader, resolver)
        self._binder = PropertyBinder(resolver)
        self._invoker = LifecycleInvoker(resolver)

        self._lock = threading.RLock()
        self._resolving: list[_ResolutionFrame] = []

    @property
    def definitions(self) -> DefinitionStore:
        return self._definitions

    @property
    def cache(self) -> InstanceCache:
        return self._cache

    def add_definitions(self, definitions: Mapping[str, ComponentDefinition]):
        """Merge further definitions, overwriting any existing ones with the same name."""
        self._definitions.merge(definitions)

    def get_component(
        self, name: str, params: Params = None, as_singleton: bool = False
    ) -> Optional[Any]:
        """Return the component called ``name``, building it if necessary.

        Args:
            name: A component name, or a qualified type name with no definition.
            params: Constructor arguments used only when ``name`` has no definition.
                A mapping is passed by keyword and a list positionally.
            as_singleton: Used only when ``name`` has no definition. If True the new
                instance is cached; otherwise every call returns a fresh instance.
                Components built from definitions are always cached.

        Returns:
            The component, or None if it could not be built.

        Raises:
            CyclicDependencyError: If the component is part of a dependency cycle made
                only of constructor or factory arguments.
        """
        with self._lock:
            if self._cache.has(name):
                logger.debug("component_found_in_cache", component=name)
                return self._cache.get(name)

            definition = self._definitions.get(name)
            if definition is None:
                logger.debug("component_definition_missing", component=name)
                return self._create_from_type(name, params, as_singleton)

            return self._create_from_definition(name, definition)

    def invalidate(self, name: str):
        """Drop the cached instance of ``name``; the next request rebuilds it."""
        with self._lock:
            self._cache.invalidate(name)

    def __getitem__(self, name: str) -> Any:
        component = self.get_component(name)
        if component is None:
            raise KeyError(name)
        return component

    def __contains__(self, name: str) -> bool:
        return name in self._definitions or self._cache.has(name)

    def _create_from_definition(self, name: str, definition: ComponentDefinition) -> Optional[Any]:
        frame = self._enter(name)
        try:
            built = self._builder.build(name, definition)
            if built is None:
                return None

            self._cache.set(name, built.instance)
            frame.cached = True

            self._binder.bind(built.instance, built.type_descriptor, definition, name)
            self._invoker.invoke(built.instance, built.type_descriptor, definition, name)
            return built.instance
        except CyclicDependencyError:
            raise
        except Exception as e:
            logger.error(
                "component_not_built",
                component=name,
                error_kind=ConstructionError.__name__,
                reason=str(e),
                exc_info=True,
            )
            return None
        finally:
            self._resolving.pop()

    def _create_from_type(self, name: str, params: Params, as_singleton: bool) -> Optional[Any]:
        try:
            component_type = self._loader.load(name)
        except TypeResolutionError as e:
            logger.error(
                "component_not_found",
                component=name,
                error_kind=TypeResolutionError.__name__,
                reason=f"not a component name or a loadable type name: {e}",
            )
            return None

        try:
            instance = call_with_arguments(component_type, _params_as_arguments(name, params))
        except Exception as e:
            logger.error(
                "component_not_built",
                component=name,
                error_kind=ConstructionError.__name__,
                reason=str(e),
                exc_info=True,
            )
            return None

        if as_singleton:
            self._cache.set(name, instance)
        return instance

    def _enter(self, name: str) -> _ResolutionFrame:
        """Push a resolution frame for ``name``.

        Re-entering a name is only a cycle if no component between the two requests
        has reached the cache yet: in that case the same sequence of constructor calls
        would repeat forever.

        Raises:
            CyclicDependencyError: If ``name`` closes a cycle of uncached frames.
        """
        for index in range(len(self._resolving) - 1, -1, -1):
            frame = self._resolving[index]
            if frame.cached:
                break
            if frame.name == name:
                cycle = [f.name for f in self._resolving[index:]] + [name]
                logger.error(
                    "constructor_dependency_cycle",
                    component=name,
                    cycle=cycle,
                    error_kind=CyclicDependencyError.__name__,
                )
                raise CyclicDependencyError(cycle)

        frame = _ResolutionFrame(name)
        self._resolving.append(frame)
        return frame


def _params_as_arguments(name: str, params: Params) -> Optional[Arguments]:
    if params is None:
        return None
    if isinstance(params, Mapping):
        return dict(params) or None
    if isinstance(params, (list, tuple)):
        return list(params) or None
    logger.warning(
        "params_ignored",
        component=name,
        reason="params must be a mapping or a list",
        received=type(params).__name__,
    )
    return None
