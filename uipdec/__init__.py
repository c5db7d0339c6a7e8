"""uipdec: uniqueness of evidence for indexed predicates with decidable indices."""

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
from .signature import Binder, DataCtor, DataType, Environment, Family, FamilyCtor
from .hlist import HTuple, TypeList
from .kernel import Goal, Hyp, Kernel
from .deciders import Decider, DeciderRegistry, global_registry, register_datatype, structural_decider
from .errors import (
    MissingDecider,
    RuleError,
    StructuralMismatch,
    UniquenessError,
    UnresolvedBranch,
)
from .proof import Hole, ProofStep, replay
from .config import EngineConfig
from .engine import BranchReport, BranchStatus, OpenReason, UniquenessResult, uniqueness
from .obligation import Obligation
from .serialization import dumps, loads
from .result import Ok, Err, Result

__all__ = [
    # Terms
    "App", "Const", "Eq", "Lam", "Pair", "Pi", "Prod", "Refl", "Sort",
    "Term", "Transport", "Tt", "Unit", "Var",
    # Environment
    "Binder", "DataCtor", "DataType", "Environment", "Family", "FamilyCtor",
    # Sequences
    "HTuple", "TypeList",
    # Kernel
    "Goal", "Hyp", "Kernel", "Hole", "ProofStep", "replay",
    # Deciders
    "Decider", "DeciderRegistry", "global_registry", "register_datatype",
    "structural_decider",
    # Errors
    "MissingDecider", "RuleError", "StructuralMismatch", "UniquenessError",
    "UnresolvedBranch",
    # Engine
    "EngineConfig", "BranchReport", "BranchStatus", "OpenReason",
    "UniquenessResult", "uniqueness", "Obligation",
    # Serialization
    "dumps", "loads",
    # Result
    "Ok", "Err", "Result",
]
