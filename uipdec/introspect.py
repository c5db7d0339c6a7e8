"""Goal introspection: orient the equation and read off the indices.

Given ``lhs = rhs`` and an index count n, the scrutinee is the right-hand
side after orientation. Exactly n applied arguments are peeled from its
type, innermost first; what remains is the predicate head. The peeled
values (and their inferred types) therefore come out in reversed order,
which is the order the motive builder consumes them in.

The arity is never inferred: an index may itself be an application that
must not be taken apart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import RuleError, StructuralMismatch
from .hlist import HTuple, TypeList, apply, reverse, tuple_reverse
from .kernel import Goal, Kernel, constructor_head
from .pretty import show_term
from .reduce import normalize
from .signature import Environment
from .terms import App, Const, Eq, Term, Var, spine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Introspection:
    """What the introspector learned about one obligation."""

    head: Term
    rev_types: TypeList
    rev_values: HTuple
    lhs: Term
    rhs: Term
    swapped: bool

    @property
    def icount(self) -> int:
        return len(self.rev_types)

    @property
    def index_types(self) -> TypeList:
        return reverse(self.rev_types)

    @property
    def index_values(self) -> HTuple:
        return tuple_reverse(self.rev_values)

    @property
    def evidence_type(self) -> Term:
        return apply(self.head, self.index_values)


def is_application_shaped(env: Environment, term: Term) -> bool:
    """Whether ``term`` is a neutral application: a hypothesis, or a
    hypothesis or opaque constant applied to arguments.

    Constructor-built terms are values, not application-shaped.
    """
    head, _ = spine(term)
    if not isinstance(head, (Var, Const)):
        return False
    return constructor_head(env, term) is None


def orient(env: Environment, target: Term) -> tuple[Eq, bool]:
    """Put the application-shaped side of the equation on the right."""
    target = normalize(target)
    if not isinstance(target, Eq):
        raise StructuralMismatch(f"goal is not an equation: {show_term(target)}")
    if not is_application_shaped(env, target.rhs) and is_application_shaped(env, target.lhs):
        logger.debug("Swapping sides of %s", show_term(target))
        return Eq(target.ty, target.rhs, target.lhs), True
    return target, False


def introspect(kernel: Kernel, goal: Goal, icount: int) -> Introspection:
    if icount < 0:
        raise StructuralMismatch(f"index count must be non-negative, got {icount}")
    eq, swapped = orient(kernel.env, goal.target)
    ctx = goal.context

    try:
        current = kernel.infer(ctx, eq.rhs)
    except RuleError as e:
        raise StructuralMismatch(f"cannot type the scrutinee: {e}") from e

    types: list[Term] = []
    values: list[Term] = []
    for found in range(icount):
        if not isinstance(current, App):
            raise StructuralMismatch(
                f"{show_term(eq.rhs)} has a type with {found} applied argument(s), "
                f"{icount} requested"
            )
        try:
            types.append(kernel.infer(ctx, current.arg))
        except RuleError as e:
            raise StructuralMismatch(f"cannot type index {show_term(current.arg)}: {e}") from e
        values.append(current.arg)
        current = current.fn

    rev_types = tuple(types)
    result = Introspection(
        head=current,
        rev_types=rev_types,
        rev_values=HTuple(rev_types, tuple(values)),
        lhs=eq.lhs,
        rhs=eq.rhs,
        swapped=swapped,
    )
    logger.debug(
        "Introspected head %s with %d index(es): %s",
        show_term(result.head),
        icount,
        ", ".join(show_term(v) for v in result.index_values.values),
    )
    return result
