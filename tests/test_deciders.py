import pytest

from uipdec.deciders import (
    Decider,
    DeciderRegistry,
    global_registry,
    register_datatype,
    structural_decider,
)
from uipdec.helpers import ap, c, ctor, data
from uipdec.terms import App, Lam, Pair, Prod, Tt, Unit, Var

SHAPE_DT = data("shape", ctor("sunit"), ctor("spair", c("shape"), c("shape")))


def test_default_registry_has_unit_and_pairs() -> None:
    registry = DeciderRegistry.default()
    assert Unit() in registry
    assert Prod(Unit(), Prod(Unit(), Unit())) in registry
    assert c("shape") not in registry
    assert Prod(c("shape"), Unit()) not in registry


def test_pair_decider_compares_componentwise() -> None:
    registry = DeciderRegistry.default()
    register_datatype(registry, SHAPE_DT)
    decider = registry.lookup(Prod(c("shape"), Unit()))
    assert decider is not None
    assert decider.decide(Pair(c("sunit"), Tt()), Pair(c("sunit"), Tt()))
    assert not decider.decide(Pair(c("sunit"), Tt()), Pair(ap("spair", c("sunit"), c("sunit")), Tt()))


def test_lookup_normalizes_the_type() -> None:
    registry = DeciderRegistry.default()
    assert App(Lam("x", Unit(), Var("x")), Unit()) in registry


def test_registry_is_append_only() -> None:
    registry = DeciderRegistry.default()
    with pytest.raises(ValueError):
        registry.register(Unit(), Decider("again", lambda a, b: True))


def test_structural_decider() -> None:
    decider = structural_decider(SHAPE_DT)
    node = ap("spair", c("sunit"), c("sunit"))
    assert decider.name == "shape"
    assert decider.decide(node, node)
    assert not decider.decide(node, c("sunit"))


def test_global_registry_is_a_singleton() -> None:
    assert global_registry() is global_registry()
    assert Unit() in global_registry()
