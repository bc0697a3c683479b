__all__ = [
    "BeanFactoryError",
    "DefinitionError",
    "TypeResolutionError",
    "MemberMissingError",
    "ConstructionError",
    "CyclicDependencyError",
]


class BeanFactoryError(Exception):
    """Base class for errors raised while building components."""

    pass


class DefinitionError(BeanFactoryError):
    """Raised when a component definition is missing a strategy or has a malformed block."""

    pass


class TypeResolutionError(BeanFactoryError):
    """Raised when a type or factory type named by a definition cannot be loaded."""

    pass


class MemberMissingError(BeanFactoryError):
    """Raised when a factory method, post-construct method or field does not exist."""

    pass


class ConstructionError(BeanFactoryError):
    """Raised when instantiating a type or invoking a method fails."""

    pass


class CyclicDependencyError(BeanFactoryError):
    """Raised when components depend on each other only through constructor or factory arguments."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Unresolvable constructor dependency cycle: {' -> '.join(cycle)}")
