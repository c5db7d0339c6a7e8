"""Plain-text rendering of terms and goals."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .terms import (
    ANON,
    App,
    Const,
    Eq,
    Lam,
    Pair,
    Pi,
    Prod,
    Refl,
    Sort,
    Term,
    Transport,
    Tt,
    Unit,
    Var,
    free_vars,
    spine,
)

if TYPE_CHECKING:
    from .kernel import Goal


def show_term(term: Term) -> str:
    match term:
        case Var(name) | Const(name):
            return name
        case Sort():
            return "Type"
        case Unit():
            return "unit"
        case Tt():
            return "tt"
        case App():
            head, args = spine(term)
            return " ".join([_atom(head), *(_atom(a) for a in args)])
        case Lam(x, ty, body):
            return f"fun ({x} : {show_term(ty)}) => {show_term(body)}"
        case Pi(x, ty, body):
            if x == ANON or x not in free_vars(body):
                return f"{_atom(ty)} -> {show_term(body)}"
            return f"forall ({x} : {show_term(ty)}), {show_term(body)}"
        case Prod(a, b):
            return f"{_atom(a)} * {_atom(b)}"
        case Pair(a, b):
            return f"({show_term(a)}, {show_term(b)})"
        case Eq(_, lhs, rhs):
            return f"{show_term(lhs)} = {show_term(rhs)}"
        case Refl(_, value):
            return f"eq_refl {_atom(value)}"
        case Transport(_, _, _, proof, value):
            return f"transport {_atom(proof)} {_atom(value)}"
    raise TypeError(f"Unknown term type: {type(term)}")


def _atom(term: Term) -> str:
    text = show_term(term)
    if isinstance(term, (App, Lam, Pi, Prod, Eq, Refl, Transport)):
        return f"({text})"
    return text


def show_goal(goal: Goal) -> str:
    lines = [f"{h.name} : {show_term(h.ty)}" for h in goal.hyps]
    lines.append("=" * 28)
    lines.append(show_term(goal.target))
    return "\n".join(lines)
