"""Terms of the small dependent type theory the engine works over.

A term is one of:
  - Variables (hypotheses and binder occurrences, referenced by name)
  - Constants (type formers, constructors, opaque declarations)
  - Applications, lambdas and dependent products
  - The built-in unit and pair types used to encode heterogeneous tuples
  - Identity types, reflexivity, and transport along an identity proof

Types are terms too. Everything is immutable and hashable, so terms can
key dictionaries (the decider registry does this).
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Term AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Var:
    """A reference to a hypothesis or to an enclosing binder.

    Example: e   ==  Var("e")
    """

    name: str


@dataclass(frozen=True)
class Const:
    """A global symbol declared in the environment.

    Example: spair   ==  Const("spair")
    Example: shape   ==  Const("shape")
    """

    name: str


@dataclass(frozen=True)
class App:
    """Curried application of one argument.

    Example: spair x y   ==  App(App(Const("spair"), Var("x")), Var("y"))
    """

    fn: Term
    arg: Term


@dataclass(frozen=True)
class Lam:
    """Lambda abstraction.

    Example: fun (x : shape) => x   ==  Lam("x", Const("shape"), Var("x"))
    """

    name: str
    ty: Term
    body: Term


@dataclass(frozen=True)
class Pi:
    """Dependent product. Non-dependent arrows use the binder name "_".

    Example: forall (a : shape), S a
    Example: shape -> shape   ==  Pi("_", Const("shape"), Const("shape"))
    """

    name: str
    ty: Term
    body: Term


@dataclass(frozen=True)
class Sort:
    """The universe of types."""


@dataclass(frozen=True)
class Unit:
    """The unit type; terminal element of every tuple type."""


@dataclass(frozen=True)
class Tt:
    """The sole inhabitant of Unit."""


@dataclass(frozen=True)
class Prod:
    """Non-dependent pair type."""

    fst: Term
    snd: Term


@dataclass(frozen=True)
class Pair:
    """Pair value."""

    fst: Term
    snd: Term


@dataclass(frozen=True)
class Eq:
    """Identity type: lhs = rhs at type ty.

    Example: e1 = e2 : P tt   ==  Eq(App(Const("P"), Tt()), Var("e1"), Var("e2"))
    """

    ty: Term
    lhs: Term
    rhs: Term


@dataclass(frozen=True)
class Refl:
    """Reflexivity proof of value = value."""

    ty: Term
    value: Term


@dataclass(frozen=True)
class Transport:
    """Transport of ``value`` along ``proof : src = dst``.

    ``src`` and ``dst`` are index tuples in reversed (discovery) order,
    encoded as nested pairs. ``value`` lives in the family ``head`` applied
    to the components of ``src`` in natural order; the result lives at
    ``dst``. Transport along ``Refl`` computes to ``value``.
    """

    head: Term
    src: Term
    dst: Term
    proof: Term
    value: Term


# Union of all term forms
Term = Var | Const | App | Lam | Pi | Sort | Unit | Tt | Prod | Pair | Eq | Refl | Transport

ANON = "_"


# ---------------------------------------------------------------------------
# Small structural helpers
# ---------------------------------------------------------------------------


def app(fn: Term, *args: Term) -> Term:
    """Left-nested application ``fn a1 ... an``."""
    result = fn
    for a in args:
        result = App(result, a)
    return result


def arrow_ty(dom: Term, cod: Term) -> Pi:
    return Pi(ANON, dom, cod)


def spine(term: Term) -> tuple[Term, tuple[Term, ...]]:
    """Split ``f a1 ... an`` into ``(f, (a1, ..., an))``."""
    args: list[Term] = []
    while isinstance(term, App):
        args.append(term.arg)
        term = term.fn
    args.reverse()
    return term, tuple(args)


def free_vars(term: Term) -> frozenset[str]:
    match term:
        case Var(name):
            return frozenset((name,))
        case Const() | Sort() | Unit() | Tt():
            return frozenset()
        case App(fn, arg):
            return free_vars(fn) | free_vars(arg)
        case Lam(name, ty, body) | Pi(name, ty, body):
            return free_vars(ty) | (free_vars(body) - {name})
        case Prod(a, b) | Pair(a, b):
            return free_vars(a) | free_vars(b)
        case Eq(ty, lhs, rhs):
            return free_vars(ty) | free_vars(lhs) | free_vars(rhs)
        case Refl(ty, value):
            return free_vars(ty) | free_vars(value)
        case Transport(head, src, dst, proof, value):
            return (
                free_vars(head)
                | free_vars(src)
                | free_vars(dst)
                | free_vars(proof)
                | free_vars(value)
            )
    raise TypeError(f"Unknown term type: {type(term)}")
