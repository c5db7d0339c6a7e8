"""The uniqueness engine.

Proves ``lhs = rhs`` between two pieces of evidence of an indexed family,
given decidable equality on the index types:

  Init -> Oriented -> Introspected -> Generalized -> Split
       -> per branch: Destructed -> Discharged | Contradicted | Open

Every step is a kernel rule, recorded in a certificate that ``replay`` can
re-check from the original goal. A malformed obligation raises
``StructuralMismatch``; anything that goes wrong inside a branch only
leaves that branch open.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .config import EngineConfig
from .deciders import DeciderRegistry, global_registry
from .errors import MissingDecider, RuleError, StructuralMismatch, UniquenessError, UnresolvedBranch
from .introspect import Introspection, introspect
from .kernel import Goal, Kernel, constructor_head
from .motive import Motive, build_motive
from .pretty import show_term
from .proof import Hole, Proof, ProofStep, chain, holes
from .reduce import convertible, fresh, normalize, occurs
from .result import Err, Ok, Result
from .search import search
from .signature import Environment
from .terms import Eq, Pair, Prod, Term, Var, spine

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Invocation-wide stages, in order.

    Per-case progress is on each BranchReport: ``destructed`` marks a case
    whose index equation was fully simplified, and ``status`` its outcome.
    """

    INIT = "init"
    ORIENTED = "oriented"
    INTROSPECTED = "introspected"
    GENERALIZED = "generalized"
    SPLIT = "split"


class BranchStatus(Enum):
    DISCHARGED = "discharged"
    CONTRADICTED = "contradicted"
    OPEN = "open"


class OpenReason(Enum):
    MISSING_DECIDER = "missing_decider"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class BranchReport:
    """Outcome of one constructor case.

    ``proof`` is None for a case the split itself ruled out.
    """

    constructor: str
    status: BranchStatus
    proof: Proof | None
    reason: OpenReason | None = None
    detail: str = ""
    residual: Goal | None = None
    destructed: bool = False


@dataclass(frozen=True)
class UniquenessResult:
    goal: Goal
    introspection: Introspection
    motive: Motive
    proof: Proof
    branches: tuple[BranchReport, ...]
    phases: tuple[Phase, ...]

    @property
    def open_goals(self) -> tuple[Goal, ...]:
        return holes(self.proof)

    @property
    def closed(self) -> bool:
        return not self.open_goals

    def with_status(self, status: BranchStatus) -> tuple[BranchReport, ...]:
        return tuple(b for b in self.branches if b.status == status)

    @property
    def open_branches(self) -> tuple[BranchReport, ...]:
        return self.with_status(BranchStatus.OPEN)

    @property
    def contradicted_branches(self) -> tuple[BranchReport, ...]:
        return self.with_status(BranchStatus.CONTRADICTED)


@dataclass
class _Trail:
    """Applies single-subgoal rules and remembers them for the certificate."""

    kernel: Kernel
    goal: Goal
    steps: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    destructed: bool = False

    def step(self, rule: str, *args: Any) -> Goal:
        subgoals = self.kernel.apply(rule, self.goal, *args)
        if len(subgoals) != 1:
            raise RuleError(f"rule {rule} left {len(subgoals)} subgoals, expected one")
        self.goal = subgoals[0]
        self.steps.append((rule, args))
        return self.goal

    def finish(self, tail: Proof) -> Proof:
        return chain(self.steps, tail)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def uniqueness(
    env: Environment,
    goal: Goal,
    icount: int,
    registry: DeciderRegistry | None = None,
    config: EngineConfig | None = None,
) -> UniquenessResult:
    """Run the engine on ``goal``, generalizing the last ``icount`` indices."""
    if registry is None:
        registry = global_registry()
    if config is None:
        config = EngineConfig()
    kernel = Kernel(env, registry)
    phases = [Phase.INIT]

    intro = introspect(kernel, goal, icount)
    phases += [Phase.ORIENTED, Phase.INTROSPECTED]

    trail = _Trail(kernel, goal)
    motive = build_motive(intro, goal.names)
    curried = motive.curried()
    try:
        if intro.swapped:
            trail.step("symmetry")
        trail.step("change", Eq(intro.evidence_type, motive.reflexive_lhs(), intro.rhs))
        trail.step(
            "generalize", motive.target(intro.index_values, intro.rhs), motive.refl_witness()
        )
        phases.append(Phase.GENERALIZED)
        cases = kernel.case_branches(trail.goal, intro.rhs, icount, curried)
    except RuleError as e:
        raise StructuralMismatch(f"cannot split {show_term(intro.rhs)}: {e}") from e
    phases.append(Phase.SPLIT)
    logger.debug("Split %s into %d case(s)", show_term(intro.rhs), len(cases))

    reports: list[BranchReport] = []
    children: list[Proof] = []
    for ctor, branch in cases:
        if branch is None:
            logger.debug("Case %s is impossible at these indices", ctor.name)
            reports.append(BranchReport(ctor.name, BranchStatus.CONTRADICTED, None))
            continue
        report = _run_branch(kernel, ctor.name, branch, config)
        reports.append(report)
        assert report.proof is not None
        children.append(report.proof)

    proof = trail.finish(ProofStep("case", (intro.rhs, icount, curried), tuple(children)))
    result = UniquenessResult(
        goal=goal,
        introspection=intro,
        motive=motive,
        proof=proof,
        branches=tuple(reports),
        phases=tuple(phases),
    )
    logger.info(
        "%d case(s): %d discharged, %d contradicted, %d open",
        len(reports),
        len(result.with_status(BranchStatus.DISCHARGED)),
        len(result.contradicted_branches),
        len(result.open_branches),
    )
    return result


# ---------------------------------------------------------------------------
# Branches
# ---------------------------------------------------------------------------


def _run_branch(kernel: Kernel, ctor: str, goal: Goal, config: EngineConfig) -> BranchReport:
    trail = _Trail(kernel, goal)
    match _discharge(trail, config):
        case Ok((status, proof)):
            logger.debug("Case %s: %s", ctor, status.value)
            return BranchReport(ctor, status, proof, destructed=trail.destructed)
        case Err(MissingDecider() as error):
            reason = OpenReason.MISSING_DECIDER
        case Err(error):
            reason = OpenReason.UNRESOLVED

    residual = trail.goal
    logger.warning("Case %s left open (%s): %s", ctor, reason.value, error)
    return BranchReport(
        ctor,
        BranchStatus.OPEN,
        trail.finish(Hole(residual)),
        reason=reason,
        detail=str(error),
        residual=residual,
        destructed=trail.destructed,
    )


def _discharge(
    trail: _Trail, config: EngineConfig
) -> Result[tuple[BranchStatus, Proof], UniquenessError]:
    try:
        pf = fresh("pf", trail.goal.names)
        trail.step("intro", pf)
        trail.step("change", normalize(trail.goal.target))

        contradiction = _destructure(trail, pf, config.max_destruct_steps)
        trail.destructed = True
        if contradiction is not None:
            closing = ProofStep("discriminate", (contradiction,), ())
            return Ok((BranchStatus.CONTRADICTED, trail.finish(closing)))

        trail.step("uip", pf)
        trail.step("change", normalize(trail.goal.target))
        found = search(trail.kernel, trail.goal, config.search_depth)
        if found is None:
            raise UnresolvedBranch(
                f"no structural proof of {show_term(trail.goal.target)}", trail.goal
            )
        return Ok((BranchStatus.DISCHARGED, trail.finish(found)))
    except (RuleError, UnresolvedBranch) as e:
        return Err(e)


def _destructure(trail: _Trail, pf: str, limit: int) -> str | None:
    """Simplify the index equation ``pf`` until it is reflexive.

    Returns the name of an equation between distinct constructors, if one
    turns up. ``pf`` itself is split but never cleared: the target still
    mentions it.
    """
    env = trail.kernel.env
    pending = deque([pf])
    used = 0
    while pending:
        name = pending.popleft()
        ty = trail.goal.lookup(name)
        if ty is None:
            continue
        used += 1
        if used > limit:
            raise UnresolvedBranch(f"index equation not simplified in {limit} steps", trail.goal)

        eq = normalize(ty)
        assert isinstance(eq, Eq)
        lhs, rhs = eq.lhs, eq.rhs
        if convertible(lhs, rhs):
            if name != pf:
                trail.step("clear", name)
            continue

        width = _injection_width(env, eq.ty, lhs, rhs)
        if width is not None:
            taken = set(trail.goal.names)
            parts: list[str] = []
            for _ in range(width):
                part = fresh("H", taken)
                taken.add(part)
                parts.append(part)
            trail.step("injection", name, tuple(parts))
            if name != pf:
                trail.step("clear", name)
            pending.extend(parts)
            continue

        lc, rc = constructor_head(env, lhs), constructor_head(env, rhs)
        if lc is not None and rc is not None and lc != rc and env.data_ctor(lc) is not None:
            logger.debug("%s equates %s and %s", name, lc, rc)
            return name

        var = _eliminable(trail.goal, lhs, rhs)
        if var is None:
            raise UnresolvedBranch(f"cannot simplify {name} : {show_term(eq)}", trail.goal)
        trail.step("subst", name, var)
    return None


def _injection_width(env: Environment, ty: Term, lhs: Term, rhs: Term) -> int | None:
    if isinstance(ty, Prod) and isinstance(lhs, Pair) and isinstance(rhs, Pair):
        return 2
    ctor = constructor_head(env, lhs)
    if ctor is None or constructor_head(env, rhs) != ctor:
        return None
    if (found := env.data_ctor(ctor)) is None:
        return None
    _, dc = found
    _, largs = spine(lhs)
    _, rargs = spine(rhs)
    if len(largs) != dc.arity or len(rargs) != dc.arity:
        return None
    return dc.arity


def _eliminable(goal: Goal, lhs: Term, rhs: Term) -> str | None:
    """A hypothesis variable the equation can eliminate.

    When both sides are variables the later-declared one goes, so that
    earlier hypotheses keep their names.
    """
    candidates = [
        (side, other)
        for side, other in ((lhs, rhs), (rhs, lhs))
        if isinstance(side, Var) and goal.lookup(side.name) is not None
    ]
    candidates.sort(key=lambda c: goal.position(c[0].name), reverse=True)
    for side, other in candidates:
        if not occurs(side.name, other):
            return side.name
    return None
