"""A packaged proof obligation: environment, goal, arity and deciders."""

from __future__ import annotations

from dataclasses import dataclass

from .config import EngineConfig
from .deciders import DeciderRegistry, global_registry
from .engine import UniquenessResult, uniqueness
from .kernel import Goal, Kernel
from .proof import replay
from .signature import Environment


@dataclass(frozen=True)
class Obligation:
    name: str
    env: Environment
    goal: Goal
    icount: int
    registry: DeciderRegistry | None = None

    @property
    def kernel(self) -> Kernel:
        return Kernel(self.env, self.registry if self.registry is not None else global_registry())

    def solve(self, config: EngineConfig | None = None) -> UniquenessResult:
        return uniqueness(self.env, self.goal, self.icount, self.kernel.registry, config)

    def check(self, result: UniquenessResult) -> tuple[Goal, ...]:
        """Replay ``result``'s certificate against this obligation's goal."""
        return replay(self.kernel, self.goal, result.proof)
