"""The proof kernel: type inference and primitive rules.

Every step the engine takes is one of the rules below. A rule takes a goal,
checks its own preconditions, and returns the subgoals that remain (an
empty tuple closes the goal). A failed precondition raises ``RuleError``;
nothing is ever closed on trust.

Rules:
  change        replace the target by a convertible one
  symmetry      a = b   from   b = a
  generalize    G       from   forall x : A, B   and a witness of A with B[x := w] ≡ G
  case          dependent case analysis of an indexed-family value
  intro         move a leading product into the hypotheses
  injection     split an equation between pairs or equal-headed constructors
  discriminate  close a goal from an equation between distinct constructors
  subst         eliminate a variable using an equation
  clear         drop an unused hypothesis
  uip           replace a reflexive-typed equation proof by refl (needs a decider)
  reflexivity, assumption, congruence, decide   closing steps for equations
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from .deciders import DeciderRegistry
from .errors import MissingDecider, RuleError
from .hlist import HTuple, apply, tuple_components, tuple_reverse, tuple_type
from .pretty import show_term
from .reduce import convertible, fresh, normalize, occurs, subst
from .signature import Binder, Environment, FamilyCtor
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
    app,
    free_vars,
    spine,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Hyp:
    name: str
    ty: Term


@dataclass(frozen=True)
class Goal:
    """Ordered hypotheses and a target; each hypothesis type may mention
    only hypotheses declared before it."""

    hyps: tuple[Hyp, ...]
    target: Term

    @property
    def names(self) -> frozenset[str]:
        return frozenset(h.name for h in self.hyps)

    @property
    def context(self) -> dict[str, Term]:
        return {h.name: h.ty for h in self.hyps}

    def lookup(self, name: str) -> Term | None:
        for h in self.hyps:
            if h.name == name:
                return h.ty
        return None

    def position(self, name: str) -> int:
        for i, h in enumerate(self.hyps):
            if h.name == name:
                return i
        return -1

    def with_target(self, target: Term) -> Goal:
        return Goal(self.hyps, target)


def constructor_head(env: Environment, term: Term) -> str | None:
    """Name of the constructor heading ``term``, if it is constructor-built."""
    head, _ = spine(term)
    if isinstance(head, Const) and env.is_constructor(head.name):
        return head.name
    return None


# ---------------------------------------------------------------------------
# Kernel
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Kernel:
    env: Environment
    registry: DeciderRegistry

    # -- typing -------------------------------------------------------------

    def infer(self, ctx: Mapping[str, Term], term: Term) -> Term:
        """The normalized type of ``term`` in ``ctx``."""
        return normalize(self._infer(ctx, term))

    def check(self, ctx: Mapping[str, Term], term: Term, ty: Term) -> None:
        actual = self.infer(ctx, term)
        if not convertible(actual, ty):
            raise RuleError(
                f"{show_term(term)} has type {show_term(actual)}, expected {show_term(ty)}"
            )

    def expect_type(self, ctx: Mapping[str, Term], term: Term) -> None:
        if not isinstance(self.infer(ctx, term), Sort):
            raise RuleError(f"{show_term(term)} is not a type")

    def _infer(self, ctx: Mapping[str, Term], term: Term) -> Term:
        match term:
            case Var(name):
                if name not in ctx:
                    raise RuleError(f"unbound variable {name}")
                return ctx[name]
            case Const(name):
                ty = self.env.const_type(name)
                if ty is None:
                    raise RuleError(f"undeclared constant {name}")
                return ty
            case Sort() | Unit():
                return Sort()
            case Tt():
                return Unit()
            case Prod(a, b):
                self.expect_type(ctx, a)
                self.expect_type(ctx, b)
                return Sort()
            case Pair(a, b):
                return Prod(self.infer(ctx, a), self.infer(ctx, b))
            case App(fn, arg):
                fty = self.infer(ctx, fn)
                if not isinstance(fty, Pi):
                    raise RuleError(f"{show_term(fn)} is not a function")
                self.check(ctx, arg, fty.ty)
                return subst(fty.body, fty.name, arg)
            case Pi(x, ty, body):
                self.expect_type(ctx, ty)
                x, body = _open_binder(ctx, x, body)
                self.expect_type({**ctx, x: ty}, body)
                return Sort()
            case Lam(x, ty, body):
                self.expect_type(ctx, ty)
                x, body = _open_binder(ctx, x, body)
                return Pi(x, ty, self.infer({**ctx, x: ty}, body))
            case Eq(ty, lhs, rhs):
                self.expect_type(ctx, ty)
                self.check(ctx, lhs, ty)
                self.check(ctx, rhs, ty)
                return Sort()
            case Refl(ty, value):
                self.expect_type(ctx, ty)
                self.check(ctx, value, ty)
                return Eq(ty, value, value)
            case Transport(head, src, dst, proof, value):
                return self._infer_transport(ctx, head, src, dst, proof, value)
        raise RuleError(f"cannot type {term!r}")

    def _infer_transport(
        self,
        ctx: Mapping[str, Term],
        head: Term,
        src: Term,
        dst: Term,
        proof: Term,
        value: Term,
    ) -> Term:
        src_parts = tuple_components(normalize(src))
        dst_parts = tuple_components(normalize(dst))
        if src_parts is None or dst_parts is None or len(src_parts) != len(dst_parts):
            raise RuleError("transport endpoints must be index tuples of equal length")
        types = tuple(self.infer(ctx, p) for p in src_parts)
        self.check(ctx, dst, tuple_type(types))
        self.check(ctx, proof, Eq(tuple_type(types), src, dst))
        self.check(ctx, value, family_at(head, HTuple(types, src_parts)))
        return family_at(head, HTuple(types, dst_parts))

    # -- dispatch -----------------------------------------------------------

    def apply(self, rule: str, goal: Goal, *args: object) -> tuple[Goal, ...]:
        handler: Callable[..., tuple[Goal, ...]] | None = getattr(self, f"rule_{rule}", None)
        if handler is None:
            raise RuleError(f"unknown rule {rule!r}")
        subgoals = handler(goal, *args)
        logger.debug("rule %s -> %d subgoal(s)", rule, len(subgoals))
        return subgoals

    # -- helpers ------------------------------------------------------------

    def _equation(self, goal: Goal, name: str) -> Eq:
        ty = goal.lookup(name)
        if ty is None:
            raise RuleError(f"no hypothesis named {name}")
        ty = normalize(ty)
        if not isinstance(ty, Eq):
            raise RuleError(f"{name} is not an equation")
        return ty

    def _target_equation(self, goal: Goal) -> Eq:
        target = normalize(goal.target)
        if not isinstance(target, Eq):
            raise RuleError("target is not an equation")
        return target

    def _fresh_names(self, goal: Goal, names: tuple[str, ...], count: int) -> None:
        if len(names) != count or len(set(names)) != count:
            raise RuleError(f"expected {count} distinct names, got {names}")
        for n in names:
            if n in goal.names:
                raise RuleError(f"name {n} is already in use")

    def _unused(self, goal: Goal, name: str) -> None:
        if occurs(name, goal.target):
            raise RuleError(f"{name} is still used in the target")
        for h in goal.hyps:
            if h.name != name and occurs(name, h.ty):
                raise RuleError(f"{name} is still used by {h.name}")

    # -- structural rules ---------------------------------------------------

    def rule_change(self, goal: Goal, target: Term) -> tuple[Goal, ...]:
        self.expect_type(goal.context, target)
        if not convertible(goal.target, target):
            raise RuleError("new target is not convertible with the old one")
        return (goal.with_target(target),)

    def rule_symmetry(self, goal: Goal) -> tuple[Goal, ...]:
        eq = self._target_equation(goal)
        return (goal.with_target(Eq(eq.ty, eq.rhs, eq.lhs)),)

    def rule_generalize(self, goal: Goal, target: Term, witness: Term) -> tuple[Goal, ...]:
        ctx = goal.context
        self.expect_type(ctx, target)
        pi = normalize(target)
        if not isinstance(pi, Pi):
            raise RuleError("generalized target must be a product")
        self.check(ctx, witness, pi.ty)
        if not convertible(subst(pi.body, pi.name, witness), goal.target):
            raise RuleError("instantiated generalization does not match the goal")
        return (goal.with_target(target),)

    def rule_intro(self, goal: Goal, name: str) -> tuple[Goal, ...]:
        pi = normalize(goal.target)
        if not isinstance(pi, Pi):
            raise RuleError("nothing to introduce")
        self._fresh_names(goal, (name,), 1)
        hyps = goal.hyps + (Hyp(name, pi.ty),)
        return (Goal(hyps, subst(pi.body, pi.name, Var(name))),)

    def rule_clear(self, goal: Goal, name: str) -> tuple[Goal, ...]:
        if goal.lookup(name) is None:
            raise RuleError(f"no hypothesis named {name}")
        self._unused(goal, name)
        return (Goal(tuple(h for h in goal.hyps if h.name != name), goal.target),)

    # -- case analysis ------------------------------------------------------

    def rule_case(
        self, goal: Goal, scrutinee: Term, icount: int, motive: Term
    ) -> tuple[Goal, ...]:
        return tuple(
            g for _, g in self.case_branches(goal, scrutinee, icount, motive) if g is not None
        )

    def case_branches(
        self, goal: Goal, scrutinee: Term, icount: int, motive: Term
    ) -> tuple[tuple[FamilyCtor, Goal | None], ...]:
        """Branch goals of a case split, one per constructor.

        The motive generalizes the last ``icount`` indices and the evidence;
        leading indices stay fixed. A constructor whose fixed leading
        indices clash with the scrutinee's is impossible and yields None.
        """
        ctx = goal.context
        head, args = spine(self.infer(ctx, scrutinee))
        if not isinstance(head, Const) or (fam := self.env.get_family(head.name)) is None:
            raise RuleError(f"{show_term(scrutinee)} is not evidence of an indexed family")
        if len(args) != fam.arity or not 0 <= icount <= fam.arity:
            raise RuleError(f"cannot generalize {icount} of {fam.arity} indices")
        lead = fam.arity - icount
        fixed, indices = args[:lead], args[lead:]

        self._check_motive(ctx, motive, fam.name, fam.index_types[lead:], fixed)
        if not convertible(app(motive, *indices, scrutinee), goal.target):
            raise RuleError("motive does not match the goal")

        taken = set(goal.names) | set(free_vars(motive))
        branches: list[tuple[FamilyCtor, Goal | None]] = []
        for ctor in fam.constructors:
            binders, ctor_indices = _freshen(ctor, taken)
            ctor_lead = tuple(normalize(t) for t in ctor_indices[:lead])
            if any(self._clash(a, b) for a, b in zip(ctor_lead, fixed, strict=True)):
                branches.append((ctor, None))
                continue
            if not all(convertible(a, b) for a, b in zip(ctor_lead, fixed, strict=True)):
                raise RuleError(
                    f"constructor {ctor.name} fixes an index outside the generalized tuple"
                )
            evidence = app(Const(ctor.name), *(Var(b.name) for b in binders))
            target = normalize(app(motive, *ctor_indices[lead:], evidence))
            hyps = goal.hyps + tuple(Hyp(b.name, b.ty) for b in binders)
            branches.append((ctor, Goal(hyps, target)))
        return tuple(branches)

    def _check_motive(
        self,
        ctx: Mapping[str, Term],
        motive: Term,
        family: str,
        index_types: tuple[Term, ...],
        fixed: tuple[Term, ...],
    ) -> None:
        mty = self.infer(ctx, motive)
        names: list[str] = []
        for ity in index_types:
            if not isinstance(mty, Pi) or not convertible(mty.ty, ity):
                raise RuleError("motive does not abstract over the index types")
            names.append(mty.name)
            mty = mty.body
        evidence_ty = app(Const(family), *fixed, *(Var(n) for n in names))
        if not isinstance(mty, Pi) or not convertible(mty.ty, evidence_ty):
            raise RuleError("motive does not abstract over the evidence")
        if not isinstance(normalize(mty.body), Sort):
            raise RuleError("motive does not return a type")

    def _clash(self, a: Term, b: Term) -> bool:
        ha, hb = constructor_head(self.env, a), constructor_head(self.env, b)
        return ha is not None and hb is not None and ha != hb

    # -- equations ----------------------------------------------------------

    def rule_injection(self, goal: Goal, name: str, names: tuple[str, ...]) -> tuple[Goal, ...]:
        eq = self._equation(goal, name)
        lhs, rhs = normalize(eq.lhs), normalize(eq.rhs)
        parts: list[Eq] = []
        match eq.ty, lhs, rhs:
            case Prod(a, b), Pair(l1, l2), Pair(r1, r2):
                parts = [Eq(a, l1, r1), Eq(b, l2, r2)]
            case _:
                ctor = constructor_head(self.env, lhs)
                found = self.env.data_ctor(ctor) if ctor is not None else None
                if found is None or constructor_head(self.env, rhs) != ctor:
                    raise RuleError(f"{name} is not an equation between equal constructors")
                _, dc = found
                _, largs = spine(lhs)
                _, rargs = spine(rhs)
                if len(largs) != dc.arity or len(rargs) != dc.arity:
                    raise RuleError(f"{ctor} is not fully applied in {name}")
                parts = [
                    Eq(t, la, ra)
                    for t, la, ra in zip(dc.arg_types, largs, rargs, strict=True)
                ]
        self._fresh_names(goal, names, len(parts))
        hyps = goal.hyps + tuple(Hyp(n, p) for n, p in zip(names, parts, strict=True))
        return (Goal(hyps, goal.target),)

    def rule_discriminate(self, goal: Goal, name: str) -> tuple[Goal, ...]:
        eq = self._equation(goal, name)
        lhs, rhs = normalize(eq.lhs), normalize(eq.rhs)
        lc, rc = constructor_head(self.env, lhs), constructor_head(self.env, rhs)
        if lc is None or rc is None or lc == rc or self.env.data_ctor(lc) is None:
            raise RuleError(f"{name} does not equate distinct constructors")
        return ()

    def rule_subst(self, goal: Goal, name: str, var: str) -> tuple[Goal, ...]:
        eq = self._equation(goal, name)
        lhs, rhs = normalize(eq.lhs), normalize(eq.rhs)
        if rhs == Var(var):
            value = lhs
        elif lhs == Var(var):
            value = rhs
        else:
            raise RuleError(f"{name} does not have {var} on either side")
        if var == name or goal.lookup(var) is None:
            raise RuleError(f"{var} is not a hypothesis that can be eliminated")
        if occurs(var, value):
            raise RuleError(f"{var} occurs in {show_term(value)}")
        self._unused(goal, name)
        hyps = [
            Hyp(h.name, subst(h.ty, var, value))
            for h in goal.hyps
            if h.name not in (var, name)
        ]
        return (Goal(_reorder(hyps), subst(goal.target, var, value)),)

    def rule_uip(self, goal: Goal, name: str) -> tuple[Goal, ...]:
        """Any proof of ``x = x`` is ``refl`` when equality on the type is decidable."""
        eq = self._equation(goal, name)
        if not convertible(eq.lhs, eq.rhs):
            raise RuleError(f"{name} is not a reflexive equation")
        if self.registry.lookup(eq.ty) is None:
            raise MissingDecider(eq.ty)
        for h in goal.hyps:
            if h.name != name and occurs(name, h.ty):
                raise RuleError(f"{name} is still used by {h.name}")
        hyps = tuple(h for h in goal.hyps if h.name != name)
        return (Goal(hyps, subst(goal.target, name, Refl(eq.ty, eq.lhs))),)

    # -- closing rules ------------------------------------------------------

    def rule_reflexivity(self, goal: Goal) -> tuple[Goal, ...]:
        eq = self._target_equation(goal)
        if not convertible(eq.lhs, eq.rhs):
            raise RuleError("sides are not convertible")
        return ()

    def rule_assumption(self, goal: Goal, name: str) -> tuple[Goal, ...]:
        ty = goal.lookup(name)
        if ty is None or not convertible(ty, goal.target):
            raise RuleError(f"{name} does not prove the target")
        return ()

    def rule_decide(self, goal: Goal) -> tuple[Goal, ...]:
        eq = self._target_equation(goal)
        if free_vars(eq.lhs) or free_vars(eq.rhs):
            raise RuleError("decision procedures only apply to closed values")
        decider = self.registry.lookup(eq.ty)
        if decider is None:
            raise MissingDecider(eq.ty)
        if not decider.decide(eq.lhs, eq.rhs):
            raise RuleError(f"decider {decider.name} does not establish the equation")
        return ()

    def rule_congruence(self, goal: Goal) -> tuple[Goal, ...]:
        """``c a1..an = c b1..bn``   from   ``ai = bi``.

        Only for constructors whose argument types are closed, and only where
        the differing arguments do not flow into the result indices.
        """
        eq = self._target_equation(goal)
        ctor = constructor_head(self.env, eq.lhs)
        if ctor is None or constructor_head(self.env, eq.rhs) != ctor:
            raise RuleError("sides are not headed by the same constructor")
        _, largs = spine(eq.lhs)
        _, rargs = spine(eq.rhs)
        binders = self._ctor_binders(ctor)
        if len(largs) != len(binders) or len(rargs) != len(binders):
            raise RuleError(f"{ctor} is not fully applied")
        index_vars = self._index_vars(ctor)
        bound = {b.name for b in binders}
        subgoals: list[Goal] = []
        for b, la, ra in zip(binders, largs, rargs, strict=True):
            if free_vars(b.ty) & bound:
                raise RuleError(f"{ctor} has dependent argument types")
            if b.name in index_vars and not convertible(la, ra):
                raise RuleError(f"argument {b.name} of {ctor} determines an index")
            subgoals.append(goal.with_target(Eq(b.ty, la, ra)))
        return tuple(subgoals)

    def _ctor_binders(self, ctor: str) -> tuple[Binder, ...]:
        if (found := self.env.data_ctor(ctor)) is not None:
            _, dc = found
            return tuple(Binder(f"_{i}", t) for i, t in enumerate(dc.arg_types))
        if (found_f := self.env.family_ctor(ctor)) is not None:
            _, fc = found_f
            return fc.binders
        raise RuleError(f"{ctor} is not a constructor")

    def _index_vars(self, ctor: str) -> frozenset[str]:
        if (found := self.env.family_ctor(ctor)) is not None:
            _, fc = found
            return frozenset().union(*(free_vars(t) for t in fc.indices))
        return frozenset()


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def family_at(head: Term, reversed_indices: HTuple) -> Term:
    """The family ``head`` at an index tuple given in reversed order."""
    return normalize(apply(head, tuple_reverse(reversed_indices)))


def _open_binder(ctx: Mapping[str, Term], name: str, body: Term) -> tuple[str, Term]:
    if name not in ctx:
        return name, body
    renamed = fresh(name, set(ctx) | free_vars(body))
    return renamed, subst(body, name, Var(renamed))


def _freshen(ctor: FamilyCtor, taken: set[str]) -> tuple[tuple[Binder, ...], tuple[Term, ...]]:
    """Rename a constructor's binders away from ``taken`` (which is updated)."""
    renaming: dict[str, str] = {}
    binders: list[Binder] = []
    for b in ctor.binders:
        name = fresh(b.name, taken)
        taken.add(name)
        binders.append(Binder(name, _rename(b.ty, renaming)))
        renaming[b.name] = name
    indices = tuple(_rename(t, renaming) for t in ctor.indices)
    return tuple(binders), indices


def _rename(term: Term, renaming: Mapping[str, str]) -> Term:
    """Simultaneous renaming of free variables."""
    staged = {old: f"#{i}" for i, old in enumerate(renaming)}
    for old, tmp in staged.items():
        term = subst(term, old, Var(tmp))
    for old, tmp in staged.items():
        term = subst(term, tmp, Var(renaming[old]))
    return term


def _reorder(hyps: list[Hyp]) -> tuple[Hyp, ...]:
    """Stable dependency order: each hypothesis after everything it mentions."""
    names = {h.name for h in hyps}
    placed: list[Hyp] = []
    done: set[str] = set()
    pending = list(hyps)
    while pending:
        for i, h in enumerate(pending):
            if (free_vars(h.ty) & names) <= done:
                placed.append(h)
                done.add(h.name)
                del pending[i]
                break
        else:
            raise RuleError("hypotheses cannot be ordered after substitution")
    return tuple(placed)
