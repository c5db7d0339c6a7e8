import logging
from dataclasses import replace
from pathlib import Path

import pytest

from uipdec.config import EngineConfig
from uipdec.deciders import DeciderRegistry, pair_rule, register_datatype
from uipdec.engine import BranchStatus, OpenReason, Phase, uniqueness
from uipdec.errors import StructuralMismatch
from uipdec.helpers import ap, c, ctor, data, eq, family, fctor, goal, tt, unit, v
from uipdec.kernel import Kernel
from uipdec.load import load_obligation_from_file
from uipdec.obligation import Obligation
from uipdec.proof import Hole, ProofStep, replay
from uipdec.signature import Environment
from uipdec.terms import Eq

EXAMPLES = Path(__file__).parent.parent / "examples"


def get_obligation(name: str) -> Obligation:
    obligation = load_obligation_from_file(str(EXAMPLES / f"{name}.py"))
    assert isinstance(obligation, Obligation), obligation
    return obligation


def statuses(result) -> dict[str, BranchStatus]:
    return {b.constructor: b.status for b in result.branches}


# ---------------------------------------------------------------------------
# Closing
# ---------------------------------------------------------------------------


def test_unit_and_pair_indices_close() -> None:
    ob = get_obligation("unit_pair")
    result = ob.solve()
    assert result.closed
    assert statuses(result) == {"mkP": BranchStatus.DISCHARGED}
    assert result.phases == (
        Phase.INIT,
        Phase.ORIENTED,
        Phase.INTROSPECTED,
        Phase.GENERALIZED,
        Phase.SPLIT,
    )


def test_certificate_replays_against_original_goal() -> None:
    for name in ("unit_pair", "shape_index", "node_subst"):
        ob = get_obligation(name)
        result = ob.solve()
        assert result.closed, name
        assert ob.check(result) == ()


def test_swapped_sides_are_recorded() -> None:
    ob = get_obligation("node_subst")
    result = ob.solve()
    assert result.introspection.swapped
    assert isinstance(result.proof, ProofStep)
    assert result.proof.rule == "symmetry"
    assert statuses(result) == {
        "s_leaf": BranchStatus.CONTRADICTED,
        "s_node": BranchStatus.DISCHARGED,
    }


def test_contradictory_case_is_pruned() -> None:
    ob = get_obligation("shape_index")
    result = ob.solve()
    assert result.closed
    assert result.open_branches == ()
    (pruned,) = result.contradicted_branches
    assert pruned.constructor == "r_pair"
    assert pruned.proof is not None


# ---------------------------------------------------------------------------
# Open branches
# ---------------------------------------------------------------------------


def test_missing_decider_leaves_one_branch_open() -> None:
    ob = get_obligation("missing_decider")
    result = ob.solve()
    assert not result.closed
    (open_branch,) = result.open_branches
    assert open_branch.constructor == "q_leaf"
    assert open_branch.reason == OpenReason.MISSING_DECIDER
    assert "shape" in open_branch.detail
    assert statuses(result)["q_node"] == BranchStatus.CONTRADICTED
    assert result.open_goals == (open_branch.residual,)


def test_open_goals_survive_replay() -> None:
    ob = get_obligation("missing_decider")
    result = ob.solve()
    assert ob.check(result) == result.open_goals


def test_missing_unit_decider_blocks_every_surviving_case() -> None:
    ob = get_obligation("unit_pair")
    registry = DeciderRegistry()
    registry.register_rule(pair_rule)
    result = uniqueness(ob.env, ob.goal, ob.icount, registry)
    assert [b.status for b in result.branches] == [BranchStatus.OPEN]
    assert result.branches[0].reason == OpenReason.MISSING_DECIDER
    assert len(result.open_goals) == 1


def test_open_branch_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    ob = get_obligation("missing_decider")
    with caplog.at_level(logging.WARNING, logger="uipdec.engine"):
        ob.solve()
    assert any("q_leaf" in r.getMessage() for r in caplog.records)


def get_wrapper() -> Obligation:
    shape = data("shape", ctor("sunit"), ctor("spair", c("shape"), c("shape")))
    w = family("W", [unit()], fctor("w_mk", [("s", c("shape"))], [tt()]))
    registry = DeciderRegistry.default()
    register_datatype(registry, shape)
    ty = ap("W", tt())
    return Obligation(
        name="wrapper",
        env=Environment.of(shape, w),
        goal=goal([("h", ty)], eq(ty, ap("w_mk", ap("spair", c("sunit"), c("sunit"))), v("h"))),
        icount=1,
        registry=registry,
    )


def test_unprovable_residual_is_unresolved() -> None:
    ob = get_wrapper()
    result = ob.solve()
    (branch,) = result.branches
    assert branch.status == BranchStatus.OPEN
    assert branch.reason == OpenReason.UNRESOLVED
    assert isinstance(result.open_goals[0].target, Eq)
    assert ob.check(result) == result.open_goals


def test_destructuring_step_limit() -> None:
    ob = get_obligation("node_subst")
    result = ob.solve(replace(EngineConfig(), max_destruct_steps=1))
    assert statuses(result)["s_node"] == BranchStatus.OPEN
    assert not {b.constructor: b for b in result.branches}["s_node"].destructed
    assert ob.check(result) == result.open_goals


# ---------------------------------------------------------------------------
# Arity
# ---------------------------------------------------------------------------


def test_excess_icount_is_a_structural_mismatch() -> None:
    ob = get_obligation("unit_pair")
    with pytest.raises(StructuralMismatch):
        uniqueness(ob.env, ob.goal, 3, ob.registry)


@pytest.mark.parametrize("icount", [0, 1, 2])
def test_smaller_icount_still_closes(icount: int) -> None:
    ob = get_obligation("unit_pair")
    result = uniqueness(ob.env, ob.goal, icount, ob.registry)
    assert result.closed
    assert result.motive.rev_types == result.introspection.rev_types
    assert len(result.introspection.index_types) == icount
    assert replay(Kernel(ob.env, ob.registry), ob.goal, result.proof) == ()


def test_fixed_indices_that_clash_are_pruned_by_the_split() -> None:
    ob = get_obligation("shape_index")
    result = uniqueness(ob.env, ob.goal, 0, ob.registry)
    assert result.closed
    pruned = {b.constructor: b for b in result.contradicted_branches}
    assert pruned["r_pair"].proof is None
    assert not pruned["r_pair"].destructed


def get_tagged() -> Obligation:
    shape = data("shape", ctor("sunit"), ctor("spair", c("shape"), c("shape")))
    t = family("T", [c("shape"), unit()], fctor("t_any", [("a", c("shape"))], [v("a"), tt()]))
    registry = DeciderRegistry.default()
    register_datatype(registry, shape)
    ty = ap("T", c("sunit"), tt())
    return Obligation(
        name="tagged",
        env=Environment.of(shape, t),
        goal=goal([("h", ty)], eq(ty, ap("t_any", c("sunit")), v("h"))),
        icount=2,
        registry=registry,
    )


def test_constructor_binder_in_an_index_is_substituted() -> None:
    ob = get_tagged()
    result = ob.solve()
    assert result.closed
    assert ob.check(result) == ()


def test_fixing_a_variable_index_is_a_structural_mismatch() -> None:
    ob = get_tagged()
    with pytest.raises(StructuralMismatch):
        uniqueness(ob.env, ob.goal, 1, ob.registry)


def test_holes_carry_the_residual_goal() -> None:
    ob = get_obligation("missing_decider")
    result = ob.solve()
    (branch,) = result.open_branches
    node = branch.proof
    while isinstance(node, ProofStep):
        (node,) = node.children
    assert node == Hole(branch.residual)


def test_branches_record_whether_destructuring_finished() -> None:
    closed = {b.constructor: b for b in get_obligation("node_subst").solve().branches}
    assert closed["s_node"].destructed
    assert closed["s_leaf"].destructed

    blocked = {b.constructor: b for b in get_obligation("missing_decider").solve().branches}
    assert blocked["q_leaf"].status == BranchStatus.OPEN
    assert blocked["q_leaf"].destructed
