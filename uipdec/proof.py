"""Proof certificates and their replay.

A certificate is a tree of kernel rule applications. Each step names a rule
and its arguments; its children prove the subgoals the rule leaves, in
order. A ``Hole`` stands for a goal left open.

``replay`` re-runs every rule from the original goal, so a certificate is
trusted only as far as the kernel's own checks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .errors import RuleError
from .kernel import Goal, Kernel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofStep:
    rule: str
    args: tuple[Any, ...]
    children: tuple[Proof, ...]


@dataclass(frozen=True)
class Hole:
    """An open goal."""

    goal: Goal


Proof = ProofStep | Hole


def chain(steps: list[tuple[str, tuple[Any, ...]]], tail: Proof) -> Proof:
    """Nest single-subgoal steps, outermost first, around ``tail``."""
    proof = tail
    for rule, args in reversed(steps):
        proof = ProofStep(rule, args, (proof,))
    return proof


def holes(proof: Proof) -> tuple[Goal, ...]:
    match proof:
        case Hole(goal):
            return (goal,)
        case ProofStep(children=children):
            return tuple(g for c in children for g in holes(c))
    raise TypeError(f"Unknown proof node: {type(proof)}")


def size(proof: Proof) -> int:
    match proof:
        case Hole():
            return 0
        case ProofStep(children=children):
            return 1 + sum(size(c) for c in children)
    raise TypeError(f"Unknown proof node: {type(proof)}")


def replay(kernel: Kernel, goal: Goal, proof: Proof) -> tuple[Goal, ...]:
    """Check ``proof`` against ``goal``; return the goals it leaves open.

    Raises RuleError if any step does not apply.
    """
    match proof:
        case Hole(expected):
            if expected != goal:
                raise RuleError("open goal does not match the replayed goal")
            return (goal,)
        case ProofStep(rule, args, children):
            subgoals = kernel.apply(rule, goal, *args)
            if len(subgoals) != len(children):
                raise RuleError(
                    f"rule {rule} left {len(subgoals)} subgoal(s), "
                    f"certificate covers {len(children)}"
                )
            return tuple(
                g for sub, child in zip(subgoals, children, strict=True)
                for g in replay(kernel, sub, child)
            )
    raise TypeError(f"Unknown proof node: {type(proof)}")
