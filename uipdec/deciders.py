"""Registry of decidable-equality facts.

A decider for type T is a decision procedure on closed normal values of T.
``decide(a, b)`` returns True only when it establishes ``a = b``.

The registry is append-only: facts and composition rules can be added,
never removed or replaced. The base facts (unit, and pairs of decidable
types) are installed by ``DeciderRegistry.default()``; callers register
facts for their own index types before invoking the engine.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from .reduce import alpha_eq, normalize
from .signature import DataType
from .terms import Const, Pair, Prod, Term, Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decider:
    """Evidence that equality on some type is decidable."""

    name: str
    decide: Callable[[Term, Term], bool]


DeciderRule = Callable[[Term, "DeciderRegistry"], Decider | None]


class DeciderRegistry:
    """Type → decider lookup, extended by exact facts and by rules."""

    def __init__(self) -> None:
        self._facts: dict[Term, Decider] = {}
        self._rules: list[DeciderRule] = []
        self._lock = threading.Lock()

    @classmethod
    def default(cls) -> DeciderRegistry:
        registry = cls()
        registry.register(Unit(), UNIT_DECIDER)
        registry.register_rule(pair_rule)
        return registry

    def register(self, ty: Term, decider: Decider) -> None:
        key = normalize(ty)
        with self._lock:
            if key in self._facts:
                raise ValueError(f"A decider is already registered for {key!r}")
            self._facts[key] = decider
        logger.debug("Registered decider %s", decider.name)

    def register_rule(self, rule: DeciderRule) -> None:
        with self._lock:
            self._rules.append(rule)

    def lookup(self, ty: Term) -> Decider | None:
        key = normalize(ty)
        found = self._facts.get(key)
        if found is not None:
            return found
        for rule in tuple(self._rules):
            derived = rule(key, self)
            if derived is not None:
                return derived
        return None

    def __contains__(self, ty: Term) -> bool:
        return self.lookup(ty) is not None


# ---------------------------------------------------------------------------
# Base facts
# ---------------------------------------------------------------------------

UNIT_DECIDER = Decider("unit", lambda a, b: True)


def pair_rule(ty: Term, registry: DeciderRegistry) -> Decider | None:
    """Equality on ``A * B`` is decidable when it is on A and on B."""
    if not isinstance(ty, Prod):
        return None
    left = registry.lookup(ty.fst)
    right = registry.lookup(ty.snd)
    if left is None or right is None:
        return None

    def decide(a: Term, b: Term) -> bool:
        match a, b:
            case Pair(a1, a2), Pair(b1, b2):
                return left.decide(a1, b1) and right.decide(a2, b2)
        return False

    return Decider(f"prod({left.name}, {right.name})", decide)


def structural_decider(datatype: DataType) -> Decider:
    """Decider for a plain data type, comparing constructor trees."""
    return Decider(datatype.name, alpha_eq)


def register_datatype(registry: DeciderRegistry, datatype: DataType) -> None:
    registry.register(Const(datatype.name), structural_decider(datatype))


_GLOBAL: DeciderRegistry | None = None
_GLOBAL_LOCK = threading.Lock()


def global_registry() -> DeciderRegistry:
    """Process-wide registry, created with the base facts on first use."""
    global _GLOBAL
    with _GLOBAL_LOCK:
        if _GLOBAL is None:
            _GLOBAL = DeciderRegistry.default()
        return _GLOBAL
