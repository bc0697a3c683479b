"""Resolution of qualified type names to loadable types.

A qualified name is either a dotted path (``package.module.Type``) or a module
path and attribute path separated by a colon (``package.module:Outer.Inner``).
Types registered explicitly with a :class:`TypeLoader` take precedence over
importing, which lets applications expose types under short aliases.
"""

import importlib
import inspect
from typing import Any, Mapping, Optional, Union

from beanfactory.errors import TypeResolutionError

__all__ = ["TypeLoader", "TypeName"]


TypeName = Union[str, type]
"""Either a qualified name or the type itself."""


class TypeLoader:
    """Loads types by qualified name, consulting an explicit registry first."""

    def __init__(self, registry: Optional[Mapping[str, type]] = None):
        self._registry: dict[str, type] = dict(registry or {})

    def register(self, name: str, target: type):
        """Register ``target`` under ``name``, shadowing any importable type of the same name."""
        if not inspect.isclass(target):
            raise TypeResolutionError(f"{target!r} is not a class")
        self._registry[name] = target

    def exists(self, qualified_name: TypeName) -> bool:
        try:
            self.load(qualified_name)
        except TypeResolutionError:
            return False
        return True

    def load(self, qualified_name: TypeName) -> type:
        """Return the type named by ``qualified_name``.

        Args:
            qualified_name: A registered alias, a qualified name, or a type.

        Returns:
            The loaded type.

        Raises:
            TypeResolutionError: If the name does not resolve to a class.
        """
        if inspect.isclass(qualified_name):
            return qualified_name
        if not isinstance(qualified_name, str) or not qualified_name.strip():
            raise TypeResolutionError(f"{qualified_name!r} is not a type name")

        name = qualified_name.strip()
        if name in self._registry:
            return self._registry[name]

        target = _import_colon_path(name) if ":" in name else _import_dotted_path(name)
        if not inspect.isclass(target):
            raise TypeResolutionError(f"{name} does not name a class")
        return target


def _import_colon_path(name: str) -> Any:
    module_name, _, attribute_path = name.partition(":")
    module = _import_module(module_name, name)
    return _get_attribute_path(module, attribute_path.split("."), name)


def _import_dotted_path(name: str) -> Any:
    """Import the longest importable module prefix of ``name`` and walk the remainder.

    Example:
        >>> _import_dotted_path("collections.OrderedDict")
        <class 'collections.OrderedDict'>
    """
    parts = name.split(".")
    if len(parts) < 2:
        raise TypeResolutionError(f"{name} is not a qualified type name")

    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            continue
        except Exception as e:
            raise TypeResolutionError(f"Could not import module for {name}: {e}") from e
        return _get_attribute_path(module, parts[split:], name)

    raise TypeResolutionError(f"No importable module found for {name}")


def _import_module(module_name: str, name: str) -> Any:
    try:
        return importlib.import_module(module_name)
    except Exception as e:
        raise TypeResolutionError(f"Could not import module for {name}: {e}") from e


def _get_attribute_path(target: Any, attributes: list[str], name: str) -> Any:
    for attribute in attributes:
        try:
            target = getattr(target, attribute)
        except Exception as e:
            raise TypeResolutionError(f"{name} could not be resolved: {e}") from e
    return target
