"""Engine settings, read from the environment (or a .env file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from .result import Err, Ok, Result

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EngineConfig:
    """Bounds for one engine invocation.

    ``search_depth`` limits congruence nesting in the structural search;
    ``max_destruct_steps`` limits rule applications while destructuring a
    branch's index equation.
    """

    search_depth: int = 3
    max_destruct_steps: int = 64
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Result[EngineConfig, ValueError]:
        """Read ``UIPDEC_*`` variables, falling back to the defaults."""
        load_dotenv(find_dotenv(usecwd=True))
        defaults = cls()
        try:
            depth = _int_var("UIPDEC_SEARCH_DEPTH", defaults.search_depth)
            steps = _int_var("UIPDEC_MAX_DESTRUCT_STEPS", defaults.max_destruct_steps)
        except ValueError as e:
            return Err(e)

        level = os.getenv("UIPDEC_LOG_LEVEL", defaults.log_level).strip().upper()
        match level:
            case str(name) if name in _LEVELS:
                return Ok(cls(search_depth=depth, max_destruct_steps=steps, log_level=name))
            case _:
                return Err(ValueError(f"UIPDEC_LOG_LEVEL must be one of {', '.join(_LEVELS)}"))


def _int_var(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


def configure_logging(config: EngineConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
