from uipdec.reduce import alpha_eq, convertible, fresh, normalize, occurs, subst
from uipdec.terms import App, Const, Eq, Lam, Pair, Pi, Refl, Transport, Tt, Unit, Var


def test_fresh_skips_taken_names() -> None:
    assert fresh("x", set()) == "x"
    assert fresh("x", {"x", "x1"}) == "x2"


def test_subst_replaces_free_occurrences() -> None:
    term = Pair(Var("x"), Lam("x", Unit(), Var("x")))
    assert subst(term, "x", Tt()) == Pair(Tt(), Lam("x", Unit(), Var("x")))


def test_subst_avoids_capture() -> None:
    term = Lam("y", Unit(), App(Var("f"), Var("x")))
    assert subst(term, "x", Var("y")) == Lam("y1", Unit(), App(Var("f"), Var("y")))


def test_subst_in_pi_domain_and_body() -> None:
    term = Pi("z", Var("A"), Eq(Var("A"), Var("z"), Var("z")))
    assert subst(term, "A", Unit()) == Pi("z", Unit(), Eq(Unit(), Var("z"), Var("z")))


def test_occurs() -> None:
    assert occurs("x", App(Const("f"), Var("x")))
    assert not occurs("x", Lam("x", Unit(), Var("x")))


def test_normalize_beta() -> None:
    term = App(Lam("x", Unit(), Pair(Var("x"), Var("x"))), Tt())
    assert normalize(term) == Pair(Tt(), Tt())


def test_transport_along_refl_computes() -> None:
    refl = Transport(Const("P"), Tt(), Tt(), Refl(Unit(), Tt()), Var("h"))
    assert normalize(refl) == Var("h")
    stuck = Transport(Const("P"), Tt(), Tt(), Var("pf"), Var("h"))
    assert normalize(stuck) == stuck


def test_alpha_equivalence() -> None:
    assert alpha_eq(Lam("x", Unit(), Var("x")), Lam("y", Unit(), Var("y")))
    assert alpha_eq(Lam("x", Unit(), Var("z")), Lam("y", Unit(), Var("z")))
    assert not alpha_eq(Lam("x", Unit(), Var("y")), Lam("y", Unit(), Var("y")))
    assert not alpha_eq(Const("a"), Var("a"))


def test_convertible_up_to_beta() -> None:
    redex = App(Lam("x", Unit(), Var("x")), Tt())
    assert convertible(redex, Tt())
    assert not convertible(redex, Unit())
