"""High level entry points for constructing bean factories."""

from typing import Mapping, Optional

from beanfactory.cache import CacheBackend, InstanceCache, make_cache_backend
from beanfactory.config import BeanFactorySettings
from beanfactory.domain import ComponentDefinition
from beanfactory.factory import BeanFactory
from beanfactory.loader import TypeLoader
from beanfactory.logging_config import setup_logging

__all__ = ["make_bean_factory"]


def make_bean_factory(
    definitions: Optional[Mapping[str, ComponentDefinition]] = None,
    settings: Optional[BeanFactorySettings] = None,
    type_registry: Optional[Mapping[str, type]] = None,
    cache_backend: Optional[CacheBackend] = None,
    runtime_definitions: Optional[Mapping[str, ComponentDefinition]] = None,
    configure_logging: bool = False,
) -> BeanFactory:
    """Create a :class:`BeanFactory` wired according to ``settings``.

    Args:
        definitions: Statically configured component definitions.
        settings: Factory settings; read from the environment if None.
        type_registry: Optional aliases mapping type names to types, consulted before
            importing.
        cache_backend: An existing cache backend to share. If None, a backend is created
            from the settings' cache configuration.
        runtime_definitions: Definitions merged over ``definitions``, winning on name clashes.
        configure_logging: If True, configure structlog from ``settings.logging`` first.

    Returns:
        A new factory with an empty instance cache view.

    Example:
        >>> factory = make_bean_factory(
        ...     {"clock": {"type": "Clock"}},
        ...     type_registry={"Clock": SystemClock},
        ... )
        >>> factory.get_component("clock")
    """
    settings = settings or BeanFactorySettings()
    if configure_logging:
        setup_logging(settings.logging.level, settings.logging.format)

    backend = cache_backend if cache_backend is not None else make_cache_backend(settings.effective_cache)

    factory = BeanFactory(
        definitions,
        InstanceCache(backend, settings.cache_key_prefix),
        TypeLoader(type_registry),
    )
    if runtime_definitions:
        factory.add_definitions(runtime_definitions)
    return factory
