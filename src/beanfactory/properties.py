"""Injection of declared property values into raw instances.

Properties are assigned in declaration order. A property the target type does not
declare is reported and skipped; properties already assigned stay assigned.

Python has no access modifiers, so two conventions stand in for them:

* a ``__name`` property targets the name-mangled attribute ``_Owner__name`` of
  whichever class in the MRO declares it, and is written even on frozen
  dataclasses;
* a property annotated ``ClassVar[...]`` is static and is written on its
  declaring class rather than on the instance.
"""

import inspect
from typing import Any, ClassVar, Mapping, Optional, get_origin

import structlog

from beanfactory.domain import PROPERTIES_KEY, ComponentDefinition, FieldTarget
from beanfactory.errors import ConstructionError, DefinitionError, MemberMissingError
from beanfactory.values import ValueResolver

__all__ = ["PropertyBinder", "find_field"]

logger = structlog.get_logger(__name__)


class PropertyBinder:
    """Assign the ``properties`` block of a definition onto an instance."""

    def __init__(self, resolver: ValueResolver):
        self._resolver = resolver

    def bind(
        self, instance: Any, type_descriptor: type, definition: ComponentDefinition, name: str
    ) -> Any:
        """Resolve and assign each declared property.

        Args:
            instance: The raw instance to wire.
            type_descriptor: The type whose fields are looked up.
            definition: The component definition.
            name: The component name, used for logging.

        Returns:
            The same instance, possibly only partially bound.
        """
        if PROPERTIES_KEY not in definition:
            logger.info("no_properties_defined", component=name)
            return instance

        properties = definition[PROPERTIES_KEY]
        if not isinstance(properties, Mapping):
            logger.error(
                "invalid_properties_block",
                component=name,
                error_kind=DefinitionError.__name__,
                reason="properties definition must be a mapping",
            )
            return instance

        for field, raw_value in properties.items():
            value = self._resolver.resolve(raw_value)

            target = find_field(type_descriptor, instance, field)
            if target is None:
                logger.error(
                    "property_not_declared",
                    component=name,
                    property=field,
                    type=type_descriptor.__qualname__,
                    error_kind=MemberMissingError.__name__,
                )
                continue

            try:
                _assign(instance, target, value)
            except Exception as e:
                logger.error(
                    "property_not_assigned",
                    component=name,
                    property=field,
                    error_kind=ConstructionError.__name__,
                    reason=str(e),
                    exc_info=True,
                )

        return instance


def find_field(type_descriptor: type, instance: Any, field: str) -> Optional[FieldTarget]:
    """Locate the attribute a property named ``field`` should be written to.

    A field is declared if some class in the MRO annotates it or defines it as a class
    attribute (including properties and slots), or if the instance already holds it.

    Returns:
        The :class:`FieldTarget`, or None if no such field is declared.

    Example:
        >>> class Account:
        ...     __balance: int = 0
        >>> find_field(Account, Account(), "__balance")
        FieldTarget(attribute='_Account__balance', owner=<class 'Account'>, is_static=False)
    """
    instance_dict = getattr(instance, "__dict__", {})
    for klass in type_descriptor.__mro__:
        if klass is object:
            continue
        attribute = _attribute_name(klass, field)
        annotations = inspect.get_annotations(klass)
        if attribute in annotations:
            return FieldTarget(attribute, klass, _is_class_var(annotations[attribute]))
        if attribute in klass.__dict__ or attribute in instance_dict:
            return FieldTarget(attribute, klass, False)
    return None


def _assign(instance: Any, target: FieldTarget, value: Any):
    if target.is_static:
        setattr(target.owner, target.attribute, value)
    else:
        object.__setattr__(instance, target.attribute, value)


def _attribute_name(klass: type, field: str) -> str:
    if field.startswith("__") and not field.endswith("__"):
        return f"_{klass.__name__.lstrip('_')}{field}"
    return field


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar
