"""Load obligations from hand-written ``.py`` files.

An obligation file builds its declarations with the ``uipdec`` builders and
exposes a zero-argument factory, conventionally named ``*_obligation``,
that returns an :class:`~uipdec.obligation.Obligation`. The builders are
pre-imported, so short files can skip their own import lines.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from uipdec.obligation import Obligation

_PRELUDE = "from uipdec import *\nfrom uipdec.helpers import *\n"


def _own_functions(namespace: dict[str, Any], path: str) -> list[tuple[str, Callable[..., Any]]]:
    """Public functions whose code was compiled from ``path``.

    Pre-imported and re-imported library functions are excluded: only what
    the file itself defines can be a factory.
    """
    return [
        (name, obj)
        for name, obj in namespace.items()
        if not name.startswith("_")
        and inspect.isfunction(obj)
        and obj.__code__.co_filename == path
    ]


def load_obligation_from_file(path: str) -> Obligation | str:
    """Execute ``path`` and call its obligation factory.

    Factories named ``*_obligation`` are tried first, then any other
    function the file defines. Returns the first Obligation produced, or a
    message describing why none was.
    """
    try:
        with open(path) as f:
            source = f.read()
    except OSError as e:
        return f"Could not read file: {e}"

    namespace: dict[str, Any] = {"__name__": "__obligation__"}
    try:
        exec(_PRELUDE, namespace)
        exec(compile(source, path, "exec"), namespace)
    except Exception as e:
        return f"Code execution failed: {e}"

    functions = _own_functions(namespace, path)
    named = [(n, fn) for n, fn in functions if n.endswith("_obligation")]
    candidates = named or functions
    if not candidates:
        return "No callable obligation factory found in file"

    errors: list[str] = []
    for name, fn in candidates:
        try:
            result = fn()
        except Exception as e:
            errors.append(f"'{name}()' raised: {e}")
            continue
        match result:
            case Obligation():
                return result
            case _:
                errors.append(f"'{name}()' returned {type(result).__name__}, expected Obligation")
    return "; ".join(errors)
