from pathlib import Path

import pytest

from uipdec.errors import StructuralMismatch
from uipdec.helpers import ap, c, eq, pair, prod, tt, unit, v
from uipdec.introspect import introspect, is_application_shaped, orient
from uipdec.kernel import Goal
from uipdec.load import load_obligation_from_file
from uipdec.obligation import Obligation
from uipdec.signature import Environment

EXAMPLES = Path(__file__).parent.parent / "examples"


def get_obligation(name: str) -> Obligation:
    obligation = load_obligation_from_file(str(EXAMPLES / f"{name}.py"))
    assert isinstance(obligation, Obligation), obligation
    return obligation


def test_application_shape() -> None:
    ob = get_obligation("shape_index")
    env = Environment.of(
        *ob.env.datatypes.values(),
        *ob.env.families.values(),
        constants={"f": c("shape")},
    )
    assert is_application_shaped(env, v("h"))
    assert is_application_shaped(env, ap(v("g"), tt()))
    assert is_application_shaped(env, c("f"))
    assert not is_application_shaped(env, c("r_unit"))
    assert not is_application_shaped(env, ap("spair", c("sunit"), c("sunit")))
    assert not is_application_shaped(env, pair(tt(), tt()))


def test_orient_swaps_only_value_on_the_right() -> None:
    ob = get_obligation("shape_index")
    ty = ap("R", c("sunit"))
    swapped, flag = orient(ob.env, eq(ty, v("h"), c("r_unit")))
    assert flag
    assert swapped == eq(ty, c("r_unit"), v("h"))

    kept, flag = orient(ob.env, eq(ty, v("h1"), v("h2")))
    assert not flag
    assert kept.rhs == v("h2")


def test_introspect_reads_indices_in_both_orders() -> None:
    ob = get_obligation("unit_pair")
    intro = introspect(ob.kernel, ob.goal, 2)
    assert intro.head == c("P")
    assert intro.icount == 2
    assert intro.rev_types == (prod(unit(), unit()), unit())
    assert intro.index_types == (unit(), prod(unit(), unit()))
    assert intro.rev_values.values == (pair(tt(), tt()), tt())
    assert intro.index_values.values == (tt(), pair(tt(), tt()))
    assert intro.lhs == c("mkP")
    assert intro.rhs == v("h")
    assert not intro.swapped
    assert intro.evidence_type == ap("P", tt(), pair(tt(), tt()))


def test_smaller_icount_keeps_leading_arguments_in_head() -> None:
    ob = get_obligation("unit_pair")
    intro = introspect(ob.kernel, ob.goal, 1)
    assert intro.head == ap("P", tt())
    assert intro.index_types == (prod(unit(), unit()),)

    intro = introspect(ob.kernel, ob.goal, 0)
    assert intro.head == ap("P", tt(), pair(tt(), tt()))
    assert intro.index_values.is_empty


def test_introspect_rejects_excess_arity() -> None:
    ob = get_obligation("unit_pair")
    with pytest.raises(StructuralMismatch):
        introspect(ob.kernel, ob.goal, 3)
    with pytest.raises(StructuralMismatch):
        introspect(ob.kernel, ob.goal, -1)


def test_introspect_rejects_non_equations() -> None:
    ob = get_obligation("unit_pair")
    with pytest.raises(StructuralMismatch):
        introspect(ob.kernel, Goal(ob.goal.hyps, unit()), 1)


def test_introspect_rejects_untypable_scrutinee() -> None:
    ob = get_obligation("unit_pair")
    ty = ap("P", tt(), pair(tt(), tt()))
    with pytest.raises(StructuralMismatch):
        introspect(ob.kernel, Goal((), eq(ty, c("mkP"), v("missing"))), 2)
