"""
A family indexed by a user data type, with one impossible case.

    shape = sunit | spair shape shape
    R : shape -> Type
    r_unit : R sunit
    r_pair : forall (a b : shape), R (spair a b)

For ``h : R sunit`` the ``r_pair`` case would need ``sunit = spair a b``,
which is discriminated. ``shape`` gets a structural decider.
"""

from uipdec import DeciderRegistry, Environment, Obligation, register_datatype
from uipdec.helpers import ap, c, ctor, data, eq, family, fctor, goal, v


def shape_index_obligation() -> Obligation:
    shape = data("shape", ctor("sunit"), ctor("spair", c("shape"), c("shape")))
    r = family(
        "R",
        [c("shape")],
        fctor("r_unit", [], [c("sunit")]),
        fctor("r_pair", [("a", c("shape")), ("b", c("shape"))], [ap("spair", v("a"), v("b"))]),
    )
    registry = DeciderRegistry.default()
    register_datatype(registry, shape)

    evidence_ty = ap("R", c("sunit"))
    return Obligation(
        name="shape_index",
        env=Environment.of(shape, r),
        goal=goal([("h", evidence_ty)], eq(evidence_ty, c("r_unit"), v("h"))),
        icount=1,
        registry=registry,
    )
