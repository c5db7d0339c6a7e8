"""Exceptions raised by the kernel and the uniqueness engine.

StructuralMismatch aborts a whole invocation. MissingDecider and
UnresolvedBranch stay local to one branch: the engine catches them and
reports the branch as open.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .pretty import show_term
from .terms import Term

if TYPE_CHECKING:
    from .kernel import Goal


class UniquenessError(Exception):
    """Base class for everything this package raises on purpose."""


class RuleError(UniquenessError):
    """A kernel rule was applied where its preconditions do not hold."""


class MissingDecider(RuleError):
    """No decidable-equality fact is registered for a type."""

    def __init__(self, ty: Term) -> None:
        super().__init__(f"no decider registered for {show_term(ty)}")
        self.ty = ty


class StructuralMismatch(UniquenessError):
    """The obligation does not have the shape the engine handles."""


class UnresolvedBranch(UniquenessError):
    """A branch survived pruning but could not be closed."""

    def __init__(self, message: str, goal: Goal) -> None:
        super().__init__(message)
        self.goal = goal
