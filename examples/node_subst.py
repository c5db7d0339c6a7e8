"""
Indices that mention hypotheses, solved by substitution.

    S : shape -> Type
    s_leaf : S sunit
    s_node : forall (a b : shape), S (spair a b)

    x y : shape, h : S (spair x y)  |-  h = s_node x y

The sides are written the other way round; the engine swaps them so that
``h`` is the scrutinee.
"""

from uipdec import DeciderRegistry, Environment, Obligation, register_datatype
from uipdec.helpers import ap, c, ctor, data, eq, family, fctor, goal, v


def node_subst_obligation() -> Obligation:
    shape = data("shape", ctor("sunit"), ctor("spair", c("shape"), c("shape")))
    s = family(
        "S",
        [c("shape")],
        fctor("s_leaf", [], [c("sunit")]),
        fctor("s_node", [("a", c("shape")), ("b", c("shape"))], [ap("spair", v("a"), v("b"))]),
    )
    registry = DeciderRegistry.default()
    register_datatype(registry, shape)

    evidence_ty = ap("S", ap("spair", v("x"), v("y")))
    return Obligation(
        name="node_subst",
        env=Environment.of(shape, s),
        goal=goal(
            [("x", c("shape")), ("y", c("shape")), ("h", evidence_ty)],
            eq(evidence_ty, v("h"), ap("s_node", v("x"), v("y"))),
        ),
        icount=1,
        registry=registry,
    )
