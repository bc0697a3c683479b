"""Domain models used throughout the factory."""

from dataclasses import dataclass
from typing import Any, Optional

__all__ = [
    "TYPE_KEY",
    "CONSTRUCTOR_ARGS_KEY",
    "FACTORY_TYPE_KEY",
    "FACTORY_METHOD_KEY",
    "FACTORY_METHOD_ARGS_KEY",
    "PROPERTIES_KEY",
    "POST_CONSTRUCT_KEY",
    "REFERENCE_TOKEN",
    "ComponentDefinition",
    "Definitions",
    "Reference",
    "BuiltInstance",
    "FieldTarget",
]

TYPE_KEY = "type"
CONSTRUCTOR_ARGS_KEY = "constructor_args"
FACTORY_TYPE_KEY = "factory_type"
FACTORY_METHOD_KEY = "factory_method"
FACTORY_METHOD_ARGS_KEY = "factory_method_args"
PROPERTIES_KEY = "properties"
POST_CONSTRUCT_KEY = "post_construct"

REFERENCE_TOKEN = "ref"

ComponentDefinition = dict[str, Any]
"""A declarative recipe for one component, keyed by the ``*_KEY`` constants.

Example:
    >>> {
    ...     "factory_type": "myapp.db:ConnectionFactory",
    ...     "factory_method": "connect",
    ...     "factory_method_args": {"dsn": "sqlite://"},
    ...     "properties": {"logger": "ref:logger"},
    ...     "post_construct": {"open": None},
    ... }
"""

Definitions = dict[str, ComponentDefinition]


@dataclass(frozen=True)
class Reference:
    """A definition value naming another component.

    Attributes:
        name: The name of the referenced component, stripped of surrounding whitespace.
    """

    name: str

    def __str__(self):
        return f"{REFERENCE_TOKEN}:{self.name}"


@dataclass(frozen=True)
class BuiltInstance:
    """
    A raw, not yet wired instance produced by the instance builder.

    Attributes:
        instance: The constructed object.
        type_descriptor: The runtime type used to look up fields and methods on the instance.
            For factory-built components this is the type of the produced value,
            not the factory's type.
    """

    instance: Any
    type_descriptor: type


@dataclass(frozen=True)
class FieldTarget:
    """Where a declared property is written.

    Attributes:
        attribute: The attribute name actually set, mangled for private fields.
        owner: The class in the MRO that declares the field.
        is_static: True if the field belongs to the class rather than the instance.
    """

    attribute: str
    owner: Optional[type]
    is_static: bool
