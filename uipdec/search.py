"""Structural-match search for residual evidence equalities.

A small, bounded proof search over the closing rules. Deciders registered
for a type act as hints through the ``decide`` rule.
"""

from __future__ import annotations

import logging

from .errors import RuleError
from .kernel import Goal, Kernel
from .proof import Proof, ProofStep

logger = logging.getLogger(__name__)


def search(kernel: Kernel, goal: Goal, depth: int) -> Proof | None:
    """Try to close ``goal``; return a certificate or None."""
    if depth < 0:
        return None

    for rule, args in _closers(goal):
        try:
            if kernel.apply(rule, goal, *args) == ():
                return ProofStep(rule, args, ())
        except RuleError:
            continue

    try:
        (flipped,) = kernel.apply("symmetry", goal)
    except RuleError:
        flipped = None
    if flipped is not None:
        for h in flipped.hyps:
            try:
                kernel.apply("assumption", flipped, h.name)
            except RuleError:
                continue
            return ProofStep("symmetry", (), (ProofStep("assumption", (h.name,), ()),))

    if depth == 0:
        return None
    try:
        subgoals = kernel.apply("congruence", goal)
    except RuleError:
        return None
    children: list[Proof] = []
    for sub in subgoals:
        child = search(kernel, sub, depth - 1)
        if child is None:
            logger.debug("Congruence subgoal not closed at depth %d", depth)
            return None
        children.append(child)
    return ProofStep("congruence", (), tuple(children))


def _closers(goal: Goal) -> list[tuple[str, tuple[object, ...]]]:
    return [
        ("reflexivity", ()),
        *(("assumption", (h.name,)) for h in goal.hyps),
        ("decide", ()),
    ]
