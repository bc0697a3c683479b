"""Construction of raw component instances from their definitions.

A definition selects one of two strategies:

* the constructor strategy names a ``type`` that is instantiated directly with
  its optional ``constructor_args``;
* the factory strategy names a ``factory_type`` and a ``factory_method`` that is
  called with its optional ``factory_method_args``. Static and class methods are
  called on the type itself; instance methods are called on a throwaway instance
  of the factory type, which must therefore be constructible without arguments.

The constructor strategy wins when a definition declares both.
"""

import inspect
from typing import Mapping, Optional

import structlog

from beanfactory.domain import (
    CONSTRUCTOR_ARGS_KEY,
    FACTORY_METHOD_ARGS_KEY,
    FACTORY_METHOD_KEY,
    FACTORY_TYPE_KEY,
    TYPE_KEY,
    BuiltInstance,
    ComponentDefinition,
)
from beanfactory.errors import DefinitionError, MemberMissingError, TypeResolutionError
from beanfactory.loader import TypeLoader
from beanfactory.values import ValueResolver, call_with_arguments

__all__ = ["InstanceBuilder"]

logger = structlog.get_logger(__name__)


class InstanceBuilder:
    """Build :class:`BuiltInstance` objects from component definitions."""

    def __init__(self, loader: TypeLoader, resolver: ValueResolver):
        self._loader = loader
        self._resolver = resolver

    def build(self, name: str, definition: ComponentDefinition) -> Optional[BuiltInstance]:
        """Construct the raw instance described by ``definition``.

        Args:
            name: The component name, used for logging.
            definition: The component definition.

        Returns:
            The raw instance and its type, or None if the definition is unusable.
            Exceptions raised by the constructor or factory method itself are not
            caught here.
        """
        try:
            if not isinstance(definition, Mapping):
                raise DefinitionError(f"Definition of component '{name}' must be a mapping")
            if TYPE_KEY in definition:
                return self._build_by_constructor(name, definition)
            if FACTORY_TYPE_KEY in definition:
                return self._build_by_factory(name, definition)
            raise DefinitionError(
                f"Component '{name}' needs '{TYPE_KEY}' or '{FACTORY_TYPE_KEY}' in its definition"
            )
        except (DefinitionError, TypeResolutionError, MemberMissingError) as e:
            logger.error(
                "component_not_built",
                component=name,
                error_kind=type(e).__name__,
                reason=str(e),
            )
            return None

    def _build_by_constructor(self, name: str, definition: ComponentDefinition) -> BuiltInstance:
        component_type = self._load(name, definition[TYPE_KEY])
        constructor_args = self._resolver.resolve_args(definition, CONSTRUCTOR_ARGS_KEY, name)

        instance = call_with_arguments(component_type, constructor_args)
        return BuiltInstance(instance, component_type)

    def _build_by_factory(self, name: str, definition: ComponentDefinition) -> BuiltInstance:
        factory_type = self._load(name, definition[FACTORY_TYPE_KEY])

        if FACTORY_METHOD_KEY not in definition:
            raise DefinitionError(
                f"Component '{name}' declares a factory type but no '{FACTORY_METHOD_KEY}'"
            )
        method_name = definition[FACTORY_METHOD_KEY]
        if not isinstance(method_name, str):
            raise DefinitionError(f"Factory method of component '{name}' must be a string")

        try:
            declared = inspect.getattr_static(factory_type, method_name)
        except AttributeError:
            raise MemberMissingError(
                f"Factory method '{method_name}' does not exist on {factory_type.__qualname__}"
            ) from None

        is_type_level = isinstance(declared, (staticmethod, classmethod))
        if not (is_type_level or callable(declared)):
            raise MemberMissingError(
                f"'{method_name}' on {factory_type.__qualname__} is not a method"
            )

        factory_method_args = self._resolver.resolve_args(definition, FACTORY_METHOD_ARGS_KEY, name)

        if is_type_level:
            factory_method = getattr(factory_type, method_name)
        else:
            factory_method = getattr(factory_type(), method_name)

        instance = call_with_arguments(factory_method, factory_method_args)
        return BuiltInstance(instance, type(instance))

    def _load(self, name: str, type_name) -> type:
        try:
            return self._loader.load(type_name)
        except TypeResolutionError as e:
            raise TypeResolutionError(
                f"Type {type_name!r} of component '{name}' cannot be loaded: {e}"
            ) from e
