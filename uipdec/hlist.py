"""Heterogeneous sequences indexed by a list of types.

A TypeList doubles as the parameter signature of a curried function
(``arrow``) and as the element schema of a heterogeneous tuple
(``tuple_type`` / ``HTuple``). Tuples are encoded structurally, as
right-nested pairs ending in ``tt``; the type of such a tuple is the
matching right-nested product ending in ``unit``.

The goal introspector discovers index values innermost-first, which is the
reverse of the order a predicate takes them in. ``reverse`` and
``tuple_reverse`` bridge the two orders, and ``curry`` turns a statement
over a whole tuple back into a function of its components.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .reduce import fresh
from .terms import App, Lam, Pair, Prod, Term, Tt, Unit, Var, arrow_ty

TypeList = tuple[Term, ...]


def arrow(xs: TypeList, res: Term) -> Term:
    """``x1 -> ... -> xn -> res``; ``res`` itself for the empty list."""
    if not xs:
        return res
    return arrow_ty(xs[0], arrow(xs[1:], res))


def tuple_type(xs: TypeList) -> Term:
    """``x1 * (... * (xn * unit))``; ``unit`` for the empty list."""
    if not xs:
        return Unit()
    return Prod(xs[0], tuple_type(xs[1:]))


def tuple_components(term: Term) -> tuple[Term, ...] | None:
    """Decode a nested-pair tuple term. None if it is not one."""
    parts: list[Term] = []
    while isinstance(term, Pair):
        parts.append(term.fst)
        term = term.snd
    if not isinstance(term, Tt):
        return None
    return tuple(parts)


@dataclass(frozen=True)
class HTuple:
    """A value of ``tuple_type(types)``, kept with its type tags.

    ``values[i]`` has type ``types[i]``. The lengths are validated here;
    per-slot typing is enforced by the kernel whenever the encoded tuple
    is type-checked.
    """

    types: TypeList
    values: tuple[Term, ...]

    def __post_init__(self) -> None:
        if len(self.types) != len(self.values):
            raise ValueError(
                f"HTuple has {len(self.values)} values for {len(self.types)} types"
            )

    def __len__(self) -> int:
        return len(self.types)

    @property
    def is_empty(self) -> bool:
        return not self.types

    def head(self) -> tuple[Term, Term]:
        return self.types[0], self.values[0]

    def tail(self) -> HTuple:
        return HTuple(self.types[1:], self.values[1:])

    def to_term(self) -> Term:
        if self.is_empty:
            return Tt()
        return Pair(self.values[0], self.tail().to_term())

    @property
    def ty(self) -> Term:
        return tuple_type(self.types)

    @classmethod
    def from_term(cls, types: TypeList, term: Term) -> HTuple:
        parts = tuple_components(term)
        if parts is None or len(parts) != len(types):
            raise ValueError(f"Term is not a {len(types)}-tuple: {term!r}")
        return cls(types, parts)


def apply(f: Term, args: HTuple) -> Term:
    """Feed ``args`` to ``f : arrow(args.types, res)`` front to back."""
    if args.is_empty:
        return f
    _, value = args.head()
    return apply(App(f, value), args.tail())


def curry(
    xs: TypeList,
    body: Callable[[HTuple], Term],
    avoid: frozenset[str] = frozenset(),
    base: str = "x",
) -> Term:
    """``fun (x1 : X1) ... (xn : Xn) => body((x1, ..., xn))``.

    ``body`` receives a tuple of fresh variables; binder names avoid
    everything in ``avoid``.
    """
    names: list[str] = []
    taken = set(avoid)
    for _ in xs:
        name = fresh(base, frozenset(taken))
        taken.add(name)
        names.append(name)

    result = body(HTuple(xs, tuple(Var(n) for n in names)))
    for name, ty in zip(reversed(names), reversed(xs), strict=True):
        result = Lam(name, ty, result)
    return result


def reverse(xs: TypeList) -> TypeList:
    return _reverse(xs, ())


def _reverse(xs: TypeList, acc: TypeList) -> TypeList:
    if not xs:
        return acc
    return _reverse(xs[1:], (xs[0],) + acc)


def tuple_reverse(t: HTuple) -> HTuple:
    """Reverse a tuple, moving each type tag together with its value."""
    return _tuple_reverse(t, HTuple((), ()))


def _tuple_reverse(t: HTuple, acc: HTuple) -> HTuple:
    if t.is_empty:
        return acc
    ty, value = t.head()
    return _tuple_reverse(t.tail(), HTuple((ty,) + acc.types, (value,) + acc.values))
