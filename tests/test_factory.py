import threading

import pytest
from structlog.testing import capture_logs

from beans import (
    Car,
    ConstructorA,
    ConstructorB,
    CycleA,
    CycleB,
    Engine,
    EngineFactory,
    Exploding,
    Garage,
    Picky,
    PropertyB,
    TurboEngine,
)
from beanfactory.cache import ArrayCache, InstanceCache
from beanfactory.errors import CyclicDependencyError
from beanfactory.factory import BeanFactory
from beanfactory.loader import TypeLoader


@pytest.fixture
def definitions():
    return {
        "engine": {"type": "beans.Engine", "constructor_args": {"power": 250}},
        "car": {
            "type": Car,
            "constructor_args": {"engine": "ref:engine"},
            "properties": {"colour": "blue"},
        },
        "garage": {
            "type": "Garage",
            "properties": {"__owner": "Arthur", "registry": {"spaces": 2}},
            "post_construct": {"park": "ref:car", "open": None},
        },
        "turbo": {"factory_type": EngineFactory, "factory_method": "build"},
        "static_engine": {"factory_type": EngineFactory, "factory_method": "create"},
    }


@pytest.fixture
def factory(definitions):
    return BeanFactory(definitions, loader=TypeLoader({"Garage": Garage}))


def error_kinds(logs):
    return [entry["error_kind"] for entry in logs if entry["log_level"] == "error"]


def test_components_are_singletons(factory):
    assert factory.get_component("car") is factory.get_component("car")
    assert factory.get_component("turbo") is factory.get_component("turbo")
    assert Engine.built == 2


def test_reference_builds_dependency_once(factory):
    car = factory.get_component("car")
    garage = factory.get_component("garage")

    assert car.engine is factory.get_component("engine")
    assert car.engine.power == 250
    assert garage.cars == [car]
    assert Engine.built == 1


def test_component_is_fully_wired(factory):
    garage = factory.get_component("garage")

    assert garage.owner == "Arthur"
    assert Garage.registry == {"spaces": 2}
    assert garage.calls == ["park", "open"]
    assert garage.opened


def test_factory_built_components(factory):
    assert isinstance(factory.get_component("turbo"), TurboEngine)
    assert EngineFactory.instantiated == 1

    assert factory.get_component("static_engine").power == 50
    assert EngineFactory.instantiated == 1


def test_definition_without_strategy_logs_one_definition_error(factory):
    factory.add_definitions({"broken": {"properties": {"power": 1}}})

    with capture_logs() as logs:
        assert factory.get_component("broken") is None

    assert error_kinds(logs) == ["DefinitionError"]
    assert not factory.cache.has("broken")


def test_construction_failure_returns_none(factory):
    factory.add_definitions({"exploding": {"type": Exploding}})

    with capture_logs() as logs:
        assert factory.get_component("exploding") is None

    assert error_kinds(logs) == ["ConstructionError"]
    assert not factory.cache.has("exploding")


def test_broken_reference_binds_none(factory):
    factory.add_definitions({"lonely_car": {"type": Car, "constructor_args": ["ref:nothing"]}})

    with capture_logs() as logs:
        car = factory.get_component("lonely_car")

    assert car.engine is None
    assert error_kinds(logs) == ["TypeResolutionError"]


def test_mutual_property_references_resolve():
    factory = BeanFactory({
        "a": {"type": CycleA, "properties": {"b": "ref:b"}},
        "b": {"type": CycleB, "properties": {"a": "ref:a"}},
    })

    a = factory.get_component("a")
    b = factory.get_component("b")

    assert a.b is b
    assert b.a is a


def test_instance_is_cached_before_properties_are_bound():
    seen = []

    class Spy:
        def __init__(self):
            seen.append(factory.cache.get("observed"))

    factory = BeanFactory({
        "observed": {"type": CycleA, "properties": {"b": "ref:spy"}},
        "spy": {"type": Spy},
    })

    observed = factory.get_component("observed")

    assert seen == [observed]
    assert isinstance(observed.b, Spy)


def test_mutual_constructor_references_raise():
    factory = BeanFactory({
        "a": {"type": ConstructorA, "constructor_args": {"b": "ref:b"}},
        "b": {"type": ConstructorB, "constructor_args": {"a": "ref:a"}},
    })

    with pytest.raises(CyclicDependencyError, match="a -> b -> a") as e:
        factory.get_component("a")

    assert e.value.cycle == ["a", "b", "a"]
    assert not factory.cache.has("a")
    assert not factory.cache.has("b")
    with pytest.raises(CyclicDependencyError, match="b -> a -> b"):
        factory.get_component("b")


def test_self_referencing_constructor_raises():
    factory = BeanFactory({"a": {"type": ConstructorA, "constructor_args": ["ref:a"]}})

    with pytest.raises(CyclicDependencyError, match="a -> a"):
        factory.get_component("a")


def test_factory_argument_cycles_raise():
    factory = BeanFactory({
        "a": {"type": ConstructorA, "constructor_args": ["ref:b"]},
        "b": {"factory_type": EngineFactory, "factory_method": "create",
              "factory_method_args": ["ref:a"]},
    })

    with pytest.raises(CyclicDependencyError):
        factory.get_component("a")


def test_constructor_reference_back_through_property_terminates():
    factory = BeanFactory({
        "a": {"type": ConstructorA, "constructor_args": {"b": "ref:b"}},
        "b": {"type": PropertyB, "properties": {"a": "ref:a"}},
    })

    a = factory.get_component("a")
    b = factory.get_component("b")

    assert a.b is b
    assert isinstance(b.a, ConstructorA)
    assert b.a.b is b


def test_type_name_without_definition_builds_fresh_instances(factory):
    first = factory.get_component("beans.Engine", {"power": 5})
    second = factory.get_component("beans.Engine", [6])

    assert first is not second
    assert (first.power, second.power) == (5, 6)
    assert not factory.cache.has("beans.Engine")


def test_type_name_without_definition_can_be_singleton(factory):
    first = factory.get_component("beans:Engine", {"power": 5}, as_singleton=True)
    second = factory.get_component("beans:Engine", as_singleton=True)

    assert first is second
    assert second.power == 5


def test_type_name_without_definition_gets_no_injection(factory):
    garage = factory.get_component("Garage")

    assert garage.owner == "nobody"
    assert garage.calls == []


def test_type_name_construction_failure_returns_none(factory):
    with capture_logs() as logs:
        assert factory.get_component("beans.Exploding") is None
        assert factory.get_component("beans.Car") is None

    assert error_kinds(logs) == ["ConstructionError", "ConstructionError"]


def test_unknown_name_returns_none(factory):
    with capture_logs() as logs:
        assert factory.get_component("spaceship") is None

    assert error_kinds(logs) == ["TypeResolutionError"]
    assert logs[-1]["event"] == "component_not_found"


def test_cache_hits_are_logged(factory):
    factory.get_component("engine")

    with capture_logs() as logs:
        factory.get_component("engine")

    assert logs == [{"event": "component_found_in_cache", "component": "engine", "log_level": "debug"}]


def test_invalidate_rebuilds_component(factory):
    engine = factory.get_component("engine")
    factory.invalidate("engine")

    assert factory.get_component("engine") is not engine
    assert Engine.built == 2


def test_runtime_definitions_override_static_ones(factory):
    factory.add_definitions({"engine": {"type": TurboEngine}})

    assert isinstance(factory.get_component("engine"), TurboEngine)
    assert "car" in factory.definitions


def test_mapping_access(factory):
    assert factory["engine"] is factory.get_component("engine")
    assert "engine" in factory
    assert "spaceship" not in factory
    with pytest.raises(KeyError):
        factory["spaceship"]


def test_shared_backend_keeps_factories_apart_by_prefix():
    backend = ArrayCache()
    definitions = {"engine": {"type": Engine}}
    first = BeanFactory(definitions, InstanceCache(backend, "first."))
    second = BeanFactory(definitions, InstanceCache(backend, "second."))

    assert first.get_component("engine") is not second.get_component("engine")
    assert backend.has("first.engine")
    assert backend.has("second.engine")


def test_concurrent_requests_share_one_instance(factory):
    results = []

    def request():
        results.append(factory.get_component("car"))

    threads = [threading.Thread(target=request) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({id(car) for car in results}) == 1
    assert Engine.built == 1


@pytest.mark.parametrize("name", [".engine", ":Engine", "..beans.Engine", "exploding_module.Thing"])
def test_malformed_type_names_return_none(name):
    factory = BeanFactory({})

    with capture_logs() as logs:
        assert factory.get_component(name) is None

    assert error_kinds(logs) == ["TypeResolutionError"]


def test_failing_property_setter_leaves_component_wired_and_consistent():
    factory = BeanFactory({
        "picky": {
            "type": Picky,
            "properties": {"level": -1, "tag": "t"},
            "post_construct": {"start": None},
        },
    })

    with capture_logs() as logs:
        first = factory.get_component("picky")

    assert first is not None
    assert first is factory.get_component("picky")
    assert first.tag == "t"
    assert first.started
    assert error_kinds(logs) == ["ConstructionError"]
