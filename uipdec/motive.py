"""The generalized case-split statement.

For reversed index types ``rts``, reversed index values ``rv`` and left-hand
evidence ``lhs`` the motive is

    M(ainds, e) := forall (pf : rv = ainds),
                   transport pf lhs = e        (at head applied to ainds)

It is first written over a whole reversed tuple ``ainds`` and then curried
back into the predicate's natural argument order, so that the case rule can
apply it to the constructor indices one at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .hlist import HTuple, TypeList, apply, curry, reverse, tuple_reverse, tuple_type
from .introspect import Introspection
from .kernel import family_at
from .pretty import show_term
from .reduce import fresh, normalize
from .terms import Eq, Lam, Pi, Refl, Term, Transport, Var, free_vars

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Motive:
    head: Term
    rev_types: TypeList
    rev_values: HTuple
    lhs: Term
    avoid: frozenset[str]

    @property
    def tuple_ty(self) -> Term:
        return tuple_type(self.rev_types)

    def family(self, ainds: HTuple) -> Term:
        return family_at(self.head, ainds)

    def transport(self, ainds: HTuple, proof: Term) -> Term:
        return Transport(self.head, self.rev_values.to_term(), ainds.to_term(), proof, self.lhs)

    def statement(self, ainds: HTuple, evidence: Term) -> Term:
        """``M(ainds, evidence)`` for a reversed index tuple ``ainds``."""
        taken = self.avoid | free_vars(evidence) | free_vars(ainds.to_term())
        pf = fresh("pf", taken)
        return Pi(
            pf,
            Eq(self.tuple_ty, self.rev_values.to_term(), ainds.to_term()),
            Eq(self.family(ainds), self.transport(ainds, Var(pf)), evidence),
        )

    def curried(self) -> Term:
        """``fun i1 .. in e => M(reverse (i1, .., in), e)``."""
        e = fresh("e", self.avoid)

        def body(xs: HTuple) -> Term:
            return Lam(e, apply(self.head, xs), self.statement(tuple_reverse(xs), Var(e)))

        return curry(reverse(self.rev_types), body, avoid=self.avoid | {e}, base="i")

    def target(self, values: HTuple, evidence: Term) -> Term:
        """The motive instantiated at natural-order ``values``."""
        return normalize(self.statement(tuple_reverse(values), evidence))

    def refl_witness(self) -> Term:
        return Refl(self.tuple_ty, self.rev_values.to_term())

    def reflexive_lhs(self) -> Term:
        """``lhs`` transported along reflexivity; convertible with ``lhs``."""
        return self.transport(self.rev_values, self.refl_witness())


def build_motive(intro: Introspection, avoid: frozenset[str]) -> Motive:
    motive = Motive(
        head=intro.head,
        rev_types=intro.rev_types,
        rev_values=intro.rev_values,
        lhs=intro.lhs,
        avoid=avoid | free_vars(intro.lhs) | free_vars(intro.rhs),
    )
    logger.debug("Motive: %s", show_term(motive.curried()))
    return motive
