"""Beanfactory: declarative construction and wiring of named components.

Components are described by plain mappings ("definitions") naming the type to
construct, or the factory method to call, along with the properties to inject and
the methods to run once the component is wired. Values of the form ``ref:<name>``
are replaced by the component called ``<name>``, which is built on demand.

Every component built from a definition is a singleton for the lifetime of its
factory. Instances are cached before their properties are bound, so components
may refer to each other through properties.

Basic Usage:
    >>> from beanfactory.builders import make_bean_factory
    >>>
    >>> factory = make_bean_factory({
    ...     "repository": {"type": "myapp.users:UserRepository"},
    ...     "service": {
    ...         "type": "myapp.users:UserService",
    ...         "constructor_args": {"repository": "ref:repository"},
    ...     },
    ... })
    >>> service = factory.get_component("service")

The package consists of several modules:
    - factory: The BeanFactory orchestrator
    - builders: High-level factory construction
    - definitions: Storage for component definitions
    - values: Resolution of literal and reference values
    - instance_builder: Constructor and factory-method instantiation
    - properties: Property injection
    - lifecycle: Post-construct method invocation
    - cache: Cache backends and the instance cache
    - loader: Qualified type name resolution
    - config: Settings
    - logging_config: structlog setup
    - errors: Framework-specific exceptions
"""
