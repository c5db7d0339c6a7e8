"""
Two indices of decidable types: ``unit`` and ``unit * unit``.

    P : unit -> unit * unit -> Type
    mkP : P tt (tt, tt)

Any ``h : P tt (tt, tt)`` equals ``mkP``. Both index types have base
deciders, so the single case closes.
"""

from uipdec import DeciderRegistry, Environment, Obligation
from uipdec.helpers import ap, c, eq, family, fctor, goal, pair, prod, tt, unit, v


def unit_pair_obligation() -> Obligation:
    p = family(
        "P",
        [unit(), prod(unit(), unit())],
        fctor("mkP", [], [tt(), pair(tt(), tt())]),
    )
    evidence_ty = ap("P", tt(), pair(tt(), tt()))
    return Obligation(
        name="unit_pair",
        env=Environment.of(p),
        goal=goal([("h", evidence_ty)], eq(evidence_ty, c("mkP"), v("h"))),
        icount=2,
        registry=DeciderRegistry.default(),
    )
