"""Invocation of post-construct methods on wired instances."""

from typing import Any, Mapping, Optional

import structlog

from beanfactory.domain import POST_CONSTRUCT_KEY, ComponentDefinition
from beanfactory.errors import ConstructionError, DefinitionError, MemberMissingError
from beanfactory.values import Arguments, ValueResolver, call_with_arguments

__all__ = ["LifecycleInvoker"]

logger = structlog.get_logger(__name__)


class LifecycleInvoker:
    """Call the methods named in the ``post_construct`` block of a definition.

    Each entry maps a method name to its arguments:

    * ``None`` calls the method without arguments;
    * a list or tuple is resolved element-wise and passed positionally;
    * a mapping is resolved value-wise and passed by keyword;
    * any other value is passed as the single positional argument.

    Methods run in declaration order. A missing method or one that raises is logged
    and does not prevent the remaining methods from running.
    """

    def __init__(self, resolver: ValueResolver):
        self._resolver = resolver

    def invoke(
        self, instance: Any, type_descriptor: type, definition: ComponentDefinition, name: str
    ):
        if POST_CONSTRUCT_KEY not in definition:
            return

        methods = definition[POST_CONSTRUCT_KEY]
        if not isinstance(methods, Mapping):
            logger.error(
                "invalid_post_construct_block",
                component=name,
                error_kind=DefinitionError.__name__,
                reason="post construct definition must be a mapping",
            )
            return

        for method_name, raw_args in methods.items():
            if not callable(getattr(type_descriptor, method_name, None)):
                logger.error(
                    "post_construct_method_missing",
                    component=name,
                    method=method_name,
                    type=type_descriptor.__qualname__,
                    error_kind=MemberMissingError.__name__,
                )
                continue

            args = self._resolve_args(raw_args)
            try:
                call_with_arguments(getattr(instance, method_name), args)
            except Exception as e:
                logger.error(
                    "post_construct_method_failed",
                    component=name,
                    method=method_name,
                    error_kind=ConstructionError.__name__,
                    reason=str(e),
                    exc_info=True,
                )

    def _resolve_args(self, raw_args: Any) -> Optional[Arguments]:
        if raw_args is None:
            return None
        if isinstance(raw_args, (Mapping, list, tuple)):
            return self._resolver.resolve_all(raw_args)
        return [self._resolver.resolve(raw_args)]
