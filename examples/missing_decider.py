"""
No decider for one index type: the surviving case is left open.

    Q : unit -> shape -> Type
    q_leaf : Q tt sunit
    q_node : forall (a b : shape), Q tt (spair a b)

Only the base deciders are registered, so transport elimination for
``q_leaf`` is blocked on ``shape``. ``q_node`` is still discriminated.
"""

from uipdec import DeciderRegistry, Environment, Obligation
from uipdec.helpers import ap, c, ctor, data, eq, family, fctor, goal, tt, unit, v


def missing_decider_obligation() -> Obligation:
    shape = data("shape", ctor("sunit"), ctor("spair", c("shape"), c("shape")))
    q = family(
        "Q",
        [unit(), c("shape")],
        fctor("q_leaf", [], [tt(), c("sunit")]),
        fctor(
            "q_node",
            [("a", c("shape")), ("b", c("shape"))],
            [tt(), ap("spair", v("a"), v("b"))],
        ),
    )
    evidence_ty = ap("Q", tt(), c("sunit"))
    return Obligation(
        name="missing_decider",
        env=Environment.of(shape, q),
        goal=goal([("h", evidence_ty)], eq(evidence_ty, c("q_leaf"), v("h"))),
        icount=2,
        registry=DeciderRegistry.default(),
    )
