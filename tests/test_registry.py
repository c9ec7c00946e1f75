import pytest

from conftest import Leaf, Middle, RecordingAsset, Top
from igniter.errors import CycleDetected, DependencyError
from igniter.graph import DependencyGraph, make_build_plan
from igniter.registry import AssetProvider, AssetRegistry


class Ping(RecordingAsset):
    def dependencies(self):
        return [Pong]


class Pong(RecordingAsset):
    def dependencies(self):
        return [Ping]


@pytest.fixture
def registry():
    return AssetRegistry()


def test_asset_is_registered_with_declared_dependencies(registry):
    provider = registry.register(Top)

    assert provider == AssetProvider("Top", Top, [Leaf, Middle])
    assert registry.provider_for(Top) is provider
    assert Top in registry


def test_decorator_registers_class_and_returns_it(registry):
    @registry.provides(name="leaf config")
    class Named(RecordingAsset):
        pass

    assert Named.__name__ == "Named"
    assert registry.registered_providers()[0].name == "leaf config"


def test_duplicate_registration_raises(registry):
    registry.register(Leaf)

    with pytest.raises(DependencyError, match="Duplicate registration of asset Leaf"):
        registry.register(Leaf)


def test_non_asset_cannot_be_registered(registry):
    with pytest.raises(DependencyError, match="is not an asset class"):
        registry.register(str)


def test_validate_accepts_complete_acyclic_registry(registry):
    for asset_type in (Top, Middle, Leaf):
        registry.register(asset_type)

    registry.validate()


def test_validate_reports_unregistered_dependencies(registry):
    registry.register(Top)
    registry.register(Leaf)

    with pytest.raises(DependencyError, match="Top -> Middle"):
        registry.validate()


def test_validate_reports_cycles(registry):
    registry.register(Ping)
    registry.register(Pong)

    with pytest.raises(CycleDetected, match="Unresolvable dependencies: Ping -> Pong -> Ping"):
        registry.validate()


def test_build_plan_orders_dependencies_first(registry):
    for asset_type in (Top, Middle, Leaf, Ping, Pong):
        registry.register(asset_type)

    plan = make_build_plan(registry, Top)

    assert plan.root is Top
    assert plan.build_order == [Leaf, Middle, Top]


def test_build_plan_requires_registered_dependencies(registry):
    registry.register(Middle)

    with pytest.raises(DependencyError, match="Leaf is not registered"):
        make_build_plan(registry, Middle)


def test_build_plan_detects_cycles(registry):
    registry.register(Ping)
    registry.register(Pong)

    with pytest.raises(CycleDetected):
        make_build_plan(registry, Ping)


def test_graph_traversal_yields_each_node_after_its_dependencies():
    graph = DependencyGraph()
    graph.add_dependencies("app", ["db", "cache"])
    graph.add_dependencies("cache", ["db"])
    graph.add_dependencies("db", [])

    assert list(graph.traverse()) == ["db", "cache", "app"]


def test_graph_traversal_can_be_repeated():
    graph = DependencyGraph()
    graph.add_dependencies("app", ["db"])
    graph.add_dependencies("db", [])

    assert list(graph.traverse()) == list(graph.traverse()) == ["db", "app"]


def test_graph_traversal_reports_the_cycle_it_is_blocked_on():
    graph = DependencyGraph()
    graph.add_dependencies("app", ["db", "api"])
    graph.add_dependencies("db", [])
    graph.add_dependencies("api", ["auth"])
    graph.add_dependencies("auth", ["api"])

    with pytest.raises(CycleDetected, match="Unresolvable dependencies: api -> auth -> api$"):
        list(graph.traverse())


def test_graph_traversal_reports_undeclared_nodes():
    graph = DependencyGraph()
    graph.add_dependencies("app", ["db"])

    with pytest.raises(CycleDetected, match=r"app -> db \(undeclared\)"):
        list(graph.traverse())
