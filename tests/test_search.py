from uipdec.deciders import DeciderRegistry, register_datatype
from uipdec.helpers import ap, c, ctor, data, eq, goal, v
from uipdec.kernel import Kernel
from uipdec.proof import ProofStep, replay
from uipdec.search import search
from uipdec.signature import Environment

SHAPE = c("shape")


def get_kernel() -> Kernel:
    shape = data("shape", ctor("sunit"), ctor("spair", SHAPE, SHAPE))
    registry = DeciderRegistry.default()
    register_datatype(registry, shape)
    return Kernel(Environment.of(shape), registry)


def test_reflexivity_first() -> None:
    k = get_kernel()
    g = goal([], eq(SHAPE, c("sunit"), c("sunit")))
    assert search(k, g, 0) == ProofStep("reflexivity", (), ())


def test_symmetric_assumption() -> None:
    k = get_kernel()
    g = goal(
        [("x", SHAPE), ("H", eq(SHAPE, c("sunit"), v("x")))],
        eq(SHAPE, v("x"), c("sunit")),
    )
    proof = search(k, g, 0)
    assert proof == ProofStep("symmetry", (), (ProofStep("assumption", ("H",), ()),))
    assert replay(k, g, proof) == ()


def test_congruence_recurses_into_arguments() -> None:
    k = get_kernel()
    g = goal(
        [("x", SHAPE), ("y", SHAPE), ("H", eq(SHAPE, v("y"), v("x")))],
        eq(SHAPE, ap("spair", c("sunit"), v("x")), ap("spair", c("sunit"), v("y"))),
    )
    proof = search(k, g, 1)
    assert isinstance(proof, ProofStep)
    assert proof.rule == "congruence"
    assert replay(k, g, proof) == ()


def test_depth_bounds_congruence() -> None:
    k = get_kernel()
    g = goal(
        [("x", SHAPE), ("y", SHAPE), ("H", eq(SHAPE, v("y"), v("x")))],
        eq(SHAPE, ap("spair", c("sunit"), v("x")), ap("spair", c("sunit"), v("y"))),
    )
    assert search(k, g, 0) is None


def test_gives_up_on_unrelated_variables() -> None:
    k = get_kernel()
    g = goal([("x", SHAPE), ("y", SHAPE)], eq(SHAPE, v("x"), v("y")))
    assert search(k, g, 3) is None
