"""JSON serialization for terms, goals, environments and certificates.

Every type serializes to a dict with a "type" discriminator field.
Round-trip: from_json(to_json(x)) == x for terms, goals and environments.
Certificates serialize one way only (rule arguments are rendered as JSON
values), which is enough for reports.
"""

from __future__ import annotations

import json
from typing import Any

from .kernel import Goal, Hyp
from .proof import Hole, Proof, ProofStep
from .signature import Binder, DataCtor, DataType, Environment, Family, FamilyCtor
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
)

# ---------------------------------------------------------------------------
# Terms
# ---------------------------------------------------------------------------


def term_to_json(t: Term) -> dict[str, Any]:
    if isinstance(t, Var):
        return {"type": "var", "name": t.name}
    elif isinstance(t, Const):
        return {"type": "const", "name": t.name}
    elif isinstance(t, App):
        return {"type": "app", "fn": term_to_json(t.fn), "arg": term_to_json(t.arg)}
    elif isinstance(t, Lam):
        return {
            "type": "lam",
            "name": t.name,
            "ty": term_to_json(t.ty),
            "body": term_to_json(t.body),
        }
    elif isinstance(t, Pi):
        return {
            "type": "pi",
            "name": t.name,
            "ty": term_to_json(t.ty),
            "body": term_to_json(t.body),
        }
    elif isinstance(t, Sort):
        return {"type": "sort"}
    elif isinstance(t, Unit):
        return {"type": "unit"}
    elif isinstance(t, Tt):
        return {"type": "tt"}
    elif isinstance(t, Prod):
        return {"type": "prod", "fst": term_to_json(t.fst), "snd": term_to_json(t.snd)}
    elif isinstance(t, Pair):
        return {"type": "pair", "fst": term_to_json(t.fst), "snd": term_to_json(t.snd)}
    elif isinstance(t, Eq):
        return {
            "type": "eq",
            "ty": term_to_json(t.ty),
            "lhs": term_to_json(t.lhs),
            "rhs": term_to_json(t.rhs),
        }
    elif isinstance(t, Refl):
        return {"type": "refl", "ty": term_to_json(t.ty), "value": term_to_json(t.value)}
    elif isinstance(t, Transport):
        return {
            "type": "transport",
            "head": term_to_json(t.head),
            "src": term_to_json(t.src),
            "dst": term_to_json(t.dst),
            "proof": term_to_json(t.proof),
            "value": term_to_json(t.value),
        }
    raise TypeError(f"Unknown term type: {type(t)}")


def term_from_json(d: dict[str, Any]) -> Term:
    t = d["type"]
    if t == "var":
        return Var(d["name"])
    elif t == "const":
        return Const(d["name"])
    elif t == "app":
        return App(term_from_json(d["fn"]), term_from_json(d["arg"]))
    elif t == "lam":
        return Lam(d["name"], term_from_json(d["ty"]), term_from_json(d["body"]))
    elif t == "pi":
        return Pi(d["name"], term_from_json(d["ty"]), term_from_json(d["body"]))
    elif t == "sort":
        return Sort()
    elif t == "unit":
        return Unit()
    elif t == "tt":
        return Tt()
    elif t == "prod":
        return Prod(term_from_json(d["fst"]), term_from_json(d["snd"]))
    elif t == "pair":
        return Pair(term_from_json(d["fst"]), term_from_json(d["snd"]))
    elif t == "eq":
        return Eq(term_from_json(d["ty"]), term_from_json(d["lhs"]), term_from_json(d["rhs"]))
    elif t == "refl":
        return Refl(term_from_json(d["ty"]), term_from_json(d["value"]))
    elif t == "transport":
        return Transport(
            head=term_from_json(d["head"]),
            src=term_from_json(d["src"]),
            dst=term_from_json(d["dst"]),
            proof=term_from_json(d["proof"]),
            value=term_from_json(d["value"]),
        )
    raise ValueError(f"Unknown term type: {t}")


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


def goal_to_json(g: Goal) -> dict[str, Any]:
    return {
        "type": "goal",
        "hyps": [{"name": h.name, "ty": term_to_json(h.ty)} for h in g.hyps],
        "target": term_to_json(g.target),
    }


def goal_from_json(d: dict[str, Any]) -> Goal:
    hyps = tuple(Hyp(h["name"], term_from_json(h["ty"])) for h in d["hyps"])
    return Goal(hyps=hyps, target=term_from_json(d["target"]))


# ---------------------------------------------------------------------------
# Environments
# ---------------------------------------------------------------------------


def datatype_to_json(dt: DataType) -> dict[str, Any]:
    return {
        "type": "datatype",
        "name": dt.name,
        "constructors": [
            {"name": c.name, "arg_types": [term_to_json(a) for a in c.arg_types]}
            for c in dt.constructors
        ],
    }


def datatype_from_json(d: dict[str, Any]) -> DataType:
    ctors = tuple(
        DataCtor(c["name"], tuple(term_from_json(a) for a in c["arg_types"]))
        for c in d["constructors"]
    )
    return DataType(name=d["name"], constructors=ctors)


def family_to_json(fam: Family) -> dict[str, Any]:
    return {
        "type": "family",
        "name": fam.name,
        "index_types": [term_to_json(t) for t in fam.index_types],
        "constructors": [
            {
                "name": c.name,
                "binders": [{"name": b.name, "ty": term_to_json(b.ty)} for b in c.binders],
                "indices": [term_to_json(i) for i in c.indices],
            }
            for c in fam.constructors
        ],
    }


def family_from_json(d: dict[str, Any]) -> Family:
    ctors = tuple(
        FamilyCtor(
            name=c["name"],
            binders=tuple(Binder(b["name"], term_from_json(b["ty"])) for b in c["binders"]),
            indices=tuple(term_from_json(i) for i in c["indices"]),
        )
        for c in d["constructors"]
    )
    return Family(
        name=d["name"],
        index_types=tuple(term_from_json(t) for t in d["index_types"]),
        constructors=ctors,
    )


def env_to_json(env: Environment) -> dict[str, Any]:
    return {
        "type": "environment",
        "datatypes": [datatype_to_json(dt) for dt in env.datatypes.values()],
        "families": [family_to_json(f) for f in env.families.values()],
        "constants": {name: term_to_json(ty) for name, ty in env.constants.items()},
    }


def env_from_json(d: dict[str, Any]) -> Environment:
    return Environment.of(
        *(datatype_from_json(dt) for dt in d["datatypes"]),
        *(family_from_json(f) for f in d["families"]),
        constants={name: term_from_json(ty) for name, ty in d.get("constants", {}).items()},
    )


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------


def _arg_to_json(arg: Any) -> Any:
    if isinstance(arg, (str, int)):
        return arg
    elif isinstance(arg, tuple):
        return [_arg_to_json(a) for a in arg]
    return term_to_json(arg)


def proof_to_json(p: Proof) -> dict[str, Any]:
    if isinstance(p, Hole):
        return {"type": "hole", "goal": goal_to_json(p.goal)}
    elif isinstance(p, ProofStep):
        return {
            "type": "step",
            "rule": p.rule,
            "args": [_arg_to_json(a) for a in p.args],
            "children": [proof_to_json(c) for c in p.children],
        }
    raise TypeError(f"Unknown proof node: {type(p)}")


# ---------------------------------------------------------------------------
# Convenience: dump / load goals as JSON strings
# ---------------------------------------------------------------------------


def dumps(g: Goal) -> str:
    return json.dumps(goal_to_json(g), indent=2)


def loads(s: str) -> Goal:
    return goal_from_json(json.loads(s))
