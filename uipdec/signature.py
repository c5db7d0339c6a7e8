"""Declarations the engine reasons about.

An environment Σ = (D, F, C) consists of:
  D: plain inductive data types, each with constructors taking closed
     argument types (e.g. ``shape = sunit | spair shape shape``)
  F: indexed families (the predicates whose evidence the engine compares),
     each with index types and constructors that fix the indices
  C: opaque constants with declared types

Index types of a family are closed: later indices' types never depend on
earlier indices' values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .hlist import TypeList, arrow
from .terms import Const, Pi, Sort, Term, app

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DataCtor:
    """A constructor of a plain data type.

    Example: spair : shape -> shape -> shape
    """

    name: str
    arg_types: TypeList = ()

    @property
    def arity(self) -> int:
        return len(self.arg_types)


@dataclass(frozen=True)
class DataType:
    name: str
    constructors: tuple[DataCtor, ...]

    def get_ctor(self, name: str) -> DataCtor | None:
        for c in self.constructors:
            if c.name == name:
                return c
        return None


# ---------------------------------------------------------------------------
# Indexed families
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Binder:
    """A named, typed constructor argument."""

    name: str
    ty: Term


@dataclass(frozen=True)
class FamilyCtor:
    """A constructor of an indexed family.

    Example:
        s_node : forall (a b : shape), S (spair a b)
        FamilyCtor("s_node",
                   binders=(Binder("a", shape), Binder("b", shape)),
                   indices=(app(Const("spair"), Var("a"), Var("b")),))
    """

    name: str
    binders: tuple[Binder, ...]
    indices: tuple[Term, ...]

    @property
    def arity(self) -> int:
        return len(self.binders)


@dataclass(frozen=True)
class Family:
    """An indexed predicate ``name : I1 -> ... -> In -> Type``."""

    name: str
    index_types: TypeList
    constructors: tuple[FamilyCtor, ...]

    @property
    def arity(self) -> int:
        return len(self.index_types)

    def get_ctor(self, name: str) -> FamilyCtor | None:
        for c in self.constructors:
            if c.name == name:
                return c
        return None


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

_EMPTY_CONSTANTS: Mapping[str, Term] = MappingProxyType({})


@dataclass(frozen=True)
class Environment:
    """All global declarations, keyed by name.

    Invariant: data type, family, constructor and constant names are
    pairwise distinct.
    """

    datatypes: Mapping[str, DataType]
    families: Mapping[str, Family]
    constants: Mapping[str, Term] = field(default_factory=lambda: _EMPTY_CONSTANTS)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        names: list[str] = [*self.datatypes, *self.families, *self.constants]
        for dt in self.datatypes.values():
            names.extend(c.name for c in dt.constructors)
        for fam in self.families.values():
            names.extend(c.name for c in fam.constructors)
        for name in names:
            if name in seen:
                raise ValueError(f"Duplicate declaration: {name!r}")
            seen.add(name)

    @classmethod
    def of(
        cls,
        *decls: DataType | Family,
        constants: Mapping[str, Term] | None = None,
    ) -> Environment:
        return cls(
            datatypes={d.name: d for d in decls if isinstance(d, DataType)},
            families={d.name: d for d in decls if isinstance(d, Family)},
            constants=dict(constants or {}),
        )

    def get_datatype(self, name: str) -> DataType | None:
        return self.datatypes.get(name)

    def get_family(self, name: str) -> Family | None:
        return self.families.get(name)

    def data_ctor(self, name: str) -> tuple[DataType, DataCtor] | None:
        for dt in self.datatypes.values():
            c = dt.get_ctor(name)
            if c is not None:
                return dt, c
        return None

    def family_ctor(self, name: str) -> tuple[Family, FamilyCtor] | None:
        for fam in self.families.values():
            c = fam.get_ctor(name)
            if c is not None:
                return fam, c
        return None

    def is_constructor(self, name: str) -> bool:
        return self.data_ctor(name) is not None or self.family_ctor(name) is not None

    def const_type(self, name: str) -> Term | None:
        """The declared type of a global symbol, or None if undeclared."""
        if name in self.datatypes:
            return Sort()
        if (fam := self.families.get(name)) is not None:
            return arrow(fam.index_types, Sort())
        if (found := self.data_ctor(name)) is not None:
            dt, dc = found
            return arrow(dc.arg_types, Const(dt.name))
        if (found_f := self.family_ctor(name)) is not None:
            fam, fc = found_f
            result: Term = app(Const(fam.name), *fc.indices)
            for b in reversed(fc.binders):
                result = Pi(b.name, b.ty, result)
            return result
        return self.constants.get(name)
