"""Human-readable and JSON reports of an engine run."""

from __future__ import annotations

from typing import Any

from .engine import BranchReport, UniquenessResult
from .pretty import show_term
from .proof import size
from .render import render
from .serialization import goal_to_json, proof_to_json, term_to_json


def format_report(name: str, result: UniquenessResult) -> str:
    return render("report.md.j2", name=name, result=result, steps=size(result.proof))


def _branch_to_json(b: BranchReport) -> dict[str, Any]:
    return {
        "constructor": b.constructor,
        "status": b.status.value,
        "reason": b.reason.value if b.reason else None,
        "detail": b.detail,
        "residual": goal_to_json(b.residual) if b.residual else None,
        "destructed": b.destructed,
    }


def report_json(name: str, result: UniquenessResult) -> dict[str, Any]:
    intro = result.introspection
    return {
        "type": "report",
        "name": name,
        "closed": result.closed,
        "head": show_term(intro.head),
        "icount": intro.icount,
        "swapped": intro.swapped,
        "index_types": [term_to_json(t) for t in intro.index_types],
        "motive": term_to_json(result.motive.curried()),
        "phases": [p.value for p in result.phases],
        "branches": [_branch_to_json(b) for b in result.branches],
        "open_goals": [goal_to_json(g) for g in result.open_goals],
        "steps": size(result.proof),
        "proof": proof_to_json(result.proof),
    }
