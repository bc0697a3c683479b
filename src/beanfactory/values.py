"""Resolution of raw definition values to runtime values.

A raw value is either a literal, which is used as-is, or a reference of the
form ``ref:<name>`` which is replaced by the component called ``<name>``.
Only top-level strings are inspected; references nested inside lists or
mappings are passed through untouched.
"""

from typing import Any, Callable, Mapping, Optional, Union

import structlog

from beanfactory.domain import REFERENCE_TOKEN, ComponentDefinition, Reference
from beanfactory.errors import DefinitionError

__all__ = ["Arguments", "ValueResolver", "parse_reference", "call_with_arguments"]

logger = structlog.get_logger(__name__)

Arguments = Union[list[Any], dict[str, Any]]
"""Resolved call arguments: a list is passed positionally, a dict by keyword."""


def parse_reference(raw: Any) -> Optional[Reference]:
    """Return the :class:`Reference` encoded by ``raw``, or None if it is a literal.

    The value is split on its first colon; it is a reference only if the text before
    the colon is exactly ``ref``.

    Example:
        >>> parse_reference("ref: database")
        Reference(name='database')
        >>> parse_reference("http://example.com") is None
        True
    """
    if not isinstance(raw, str):
        return None
    prefix, separator, remainder = raw.partition(":")
    if not separator or prefix != REFERENCE_TOKEN:
        return None
    return Reference(remainder.strip())


class ValueResolver:
    """Resolve raw values, looking referenced components up through ``get_component``."""

    def __init__(self, get_component: Callable[[str], Any]):
        self._get_component = get_component

    def resolve(self, raw: Any) -> Any:
        reference = parse_reference(raw)
        if reference is None:
            return raw
        return self._get_component(reference.name)

    def resolve_all(self, values: Union[Mapping[str, Any], list[Any], tuple]) -> Arguments:
        """Resolve each element of a list, or each value of a mapping, preserving order."""
        if isinstance(values, Mapping):
            return {key: self.resolve(value) for key, value in values.items()}
        return [self.resolve(value) for value in values]

    def resolve_args(
        self, definition: ComponentDefinition, key: str, name: str
    ) -> Optional[Arguments]:
        """Resolve the argument block stored under ``key`` in a definition.

        Args:
            definition: The component definition holding the block.
            key: The key of the argument block, e.g. ``constructor_args``.
            name: The component name, used for logging.

        Returns:
            The resolved arguments, or None when the block is absent, empty or malformed.
            None means the target is called without arguments.
        """
        if key not in definition:
            logger.debug("no_arguments_defined", component=name, key=key)
            return None

        raw_args = definition[key]
        if not isinstance(raw_args, (Mapping, list, tuple)):
            logger.error(
                "invalid_argument_block",
                component=name,
                key=key,
                error_kind=DefinitionError.__name__,
                reason="argument definition must be a mapping or a list",
            )
            return None

        if len(raw_args) == 0:
            return None
        return self.resolve_all(raw_args)


def call_with_arguments(target: Callable, args: Optional[Arguments]) -> Any:
    """Call ``target`` with resolved arguments: none, positional, or keyword."""
    if args is None:
        return target()
    if isinstance(args, Mapping):
        return target(**args)
    return target(*args)
