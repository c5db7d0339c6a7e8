from pathlib import Path

from uipdec.load import load_obligation_from_file
from uipdec.obligation import Obligation
from uipdec.pretty import show_goal, show_term
from uipdec.report import format_report
from uipdec.helpers import ap, c, eq, pair, prod, tt, unit, v
from uipdec.terms import Lam, Pi, Refl, Transport

EXAMPLES = Path(__file__).parent.parent / "examples"


def get_obligation(name: str) -> Obligation:
    obligation = load_obligation_from_file(str(EXAMPLES / f"{name}.py"))
    assert isinstance(obligation, Obligation), obligation
    return obligation


def test_show_term() -> None:
    assert show_term(ap("spair", c("sunit"), ap("spair", v("x"), v("y")))) == "spair sunit (spair x y)"
    assert show_term(Pi("_", unit(), prod(unit(), unit()))) == "unit -> unit * unit"
    assert show_term(Pi("x", unit(), eq(unit(), v("x"), tt()))) == "forall (x : unit), x = tt"
    assert show_term(Lam("x", unit(), pair(v("x"), tt()))) == "fun (x : unit) => (x, tt)"
    assert show_term(Transport(c("P"), tt(), tt(), Refl(unit(), tt()), v("h"))) == "transport (eq_refl tt) h"


def test_show_goal() -> None:
    ob = get_obligation("shape_index")
    assert show_goal(ob.goal).splitlines() == [
        "h : R sunit",
        "=" * 28,
        "r_unit = h",
    ]


def test_closed_report() -> None:
    ob = get_obligation("shape_index")
    text = format_report(ob.name, ob.solve())
    assert text.startswith("# shape_index")
    assert "| r_unit | discharged |" in text
    assert "| r_pair | contradicted |" in text
    assert "no open goals" in text
    assert "init -> oriented -> introspected -> generalized -> split" in text


def test_open_report_lists_residual_goals() -> None:
    ob = get_obligation("missing_decider")
    text = format_report(ob.name, ob.solve())
    assert "open (missing_decider)" in text
    assert "1 open goal(s)" in text
    assert "transport pf q_leaf = q_leaf" in text
    assert "```" in text
