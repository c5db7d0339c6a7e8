"""Builder helpers for writing obligations.

Obligation files and tests should use these rather than constructing
declarations and goals field by field.
"""

from uipdec.kernel import Goal, Hyp
from uipdec.signature import Binder, DataCtor, DataType, Family, FamilyCtor
from uipdec.terms import Const, Eq, Pair, Prod, Term, Tt, Unit, Var, app


def c(name: str) -> Const:
    return Const(name)


def v(name: str) -> Var:
    return Var(name)


def ap(fn: str | Term, *args: Term) -> Term:
    """``fn a1 ... an``, with ``fn`` given as a constant name or a term."""
    return app(Const(fn) if isinstance(fn, str) else fn, *args)


def eq(ty: Term, lhs: Term, rhs: Term) -> Eq:
    return Eq(ty, lhs, rhs)


def unit() -> Unit:
    return Unit()


def tt() -> Tt:
    return Tt()


def prod(a: Term, b: Term) -> Prod:
    return Prod(a, b)


def pair(a: Term, b: Term) -> Pair:
    return Pair(a, b)


def ctor(name: str, *arg_types: Term) -> DataCtor:
    return DataCtor(name=name, arg_types=tuple(arg_types))


def data(name: str, *ctors: DataCtor) -> DataType:
    return DataType(name=name, constructors=tuple(ctors))


def fctor(name: str, binders: list[tuple[str, Term]], indices: list[Term]) -> FamilyCtor:
    return FamilyCtor(
        name=name,
        binders=tuple(Binder(n, t) for n, t in binders),
        indices=tuple(indices),
    )


def family(name: str, index_types: list[Term], *ctors: FamilyCtor) -> Family:
    return Family(name=name, index_types=tuple(index_types), constructors=tuple(ctors))


def goal(hyps: list[tuple[str, Term]], target: Term) -> Goal:
    return Goal(hyps=tuple(Hyp(n, t) for n, t in hyps), target=target)
