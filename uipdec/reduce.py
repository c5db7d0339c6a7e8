"""Substitution, normalization and conversion.

Reduction rules:
  - beta:       (fun x => b) a          ~>  b[x := a]
  - transport:  transport(_, _, _, refl, v)  ~>  v

There are no definitions to unfold, so normalization always terminates on
well-typed terms. Conversion is alpha-equivalence of normal forms.
"""

from __future__ import annotations

from dataclasses import fields

from .terms import (
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
)


def fresh(base: str, avoid: frozenset[str] | set[str]) -> str:
    """``base`` if unused, otherwise ``base1``, ``base2``, ..."""
    if base not in avoid:
        return base
    n = 1
    while f"{base}{n}" in avoid:
        n += 1
    return f"{base}{n}"


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------


def subst(term: Term, name: str, value: Term) -> Term:
    """Capture-avoiding ``term[name := value]``."""
    return _subst(term, name, value, free_vars(value))


def _subst(term: Term, name: str, value: Term, fv: frozenset[str]) -> Term:
    match term:
        case Var(n):
            return value if n == name else term
        case Const() | Sort() | Unit() | Tt():
            return term
        case App(fn, arg):
            return App(_subst(fn, name, value, fv), _subst(arg, name, value, fv))
        case Lam(x, ty, body) | Pi(x, ty, body):
            ty2 = _subst(ty, name, value, fv)
            if x == name:
                return type(term)(x, ty2, body)
            if x in fv and name in free_vars(body):
                renamed = fresh(x, fv | free_vars(body) | {name})
                body = _subst(body, x, Var(renamed), frozenset((renamed,)))
                x = renamed
            return type(term)(x, ty2, _subst(body, name, value, fv))
        case Prod(a, b) | Pair(a, b):
            return type(term)(_subst(a, name, value, fv), _subst(b, name, value, fv))
        case Eq(ty, lhs, rhs):
            return Eq(
                _subst(ty, name, value, fv),
                _subst(lhs, name, value, fv),
                _subst(rhs, name, value, fv),
            )
        case Refl(ty, v):
            return Refl(_subst(ty, name, value, fv), _subst(v, name, value, fv))
        case Transport(head, src, dst, proof, v):
            return Transport(
                _subst(head, name, value, fv),
                _subst(src, name, value, fv),
                _subst(dst, name, value, fv),
                _subst(proof, name, value, fv),
                _subst(v, name, value, fv),
            )
    raise TypeError(f"Unknown term type: {type(term)}")


def occurs(name: str, term: Term) -> bool:
    return name in free_vars(term)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize(term: Term) -> Term:
    match term:
        case Var() | Const() | Sort() | Unit() | Tt():
            return term
        case App(fn, arg):
            f = normalize(fn)
            a = normalize(arg)
            if isinstance(f, Lam):
                return normalize(subst(f.body, f.name, a))
            return App(f, a)
        case Lam(x, ty, body) | Pi(x, ty, body):
            return type(term)(x, normalize(ty), normalize(body))
        case Prod(a, b) | Pair(a, b):
            return type(term)(normalize(a), normalize(b))
        case Eq(ty, lhs, rhs):
            return Eq(normalize(ty), normalize(lhs), normalize(rhs))
        case Refl(ty, v):
            return Refl(normalize(ty), normalize(v))
        case Transport(head, src, dst, proof, v):
            p = normalize(proof)
            if isinstance(p, Refl):
                return normalize(v)
            return Transport(normalize(head), normalize(src), normalize(dst), p, normalize(v))
    raise TypeError(f"Unknown term type: {type(term)}")


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def alpha_eq(a: Term, b: Term) -> bool:
    return _alpha(a, b, {}, {}, 0)


def _alpha(a: Term, b: Term, ma: dict[str, int], mb: dict[str, int], depth: int) -> bool:
    match a, b:
        case Var(x), Var(y):
            ia, ib = ma.get(x), mb.get(y)
            if ia is None and ib is None:
                return x == y
            return ia == ib
        case (Lam(x, ta, ba), Lam(y, tb, bb)) | (Pi(x, ta, ba), Pi(y, tb, bb)):
            if not _alpha(ta, tb, ma, mb, depth):
                return False
            return _alpha(ba, bb, {**ma, x: depth}, {**mb, y: depth}, depth + 1)
    if type(a) is not type(b):
        return False
    for f in fields(a):  # type: ignore[arg-type]
        va, vb = getattr(a, f.name), getattr(b, f.name)
        if isinstance(va, str):
            if va != vb:
                return False
        elif not _alpha(va, vb, ma, mb, depth):
            return False
    return True


def convertible(a: Term, b: Term) -> bool:
    return alpha_eq(normalize(a), normalize(b))
