"""Small predicate algebra shared by the keyset builder and data-store adapters.

Adapters translate these nodes into their native query form. Two equality
forms carry NULL semantics: ``Comparison(col, Operator.EQ, None)`` means
``IS NULL`` and ``Comparison(col, Operator.NE, None)`` means ``IS NOT NULL``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union


class Operator(str, Enum):
    """Comparison operators understood by every adapter."""

    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    EQ = "="
    NE = "!="


@dataclass(frozen=True)
class ColumnRef:
    """A column on the paginated entity, or on a joined entity when ``alias`` is set."""

    name: str
    alias: Optional[str] = None

    @property
    def qualified_name(self) -> str:
        return f"{self.alias}.{self.name}" if self.alias else self.name


@dataclass(frozen=True)
class Comparison:
    column: ColumnRef
    op: Operator
    value: Any


@dataclass(frozen=True)
class IsNull:
    column: ColumnRef


@dataclass(frozen=True)
class And:
    clauses: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    clauses: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Native:
    """A filter already expressed in the collaborator's own query language."""

    value: Any


Predicate = Union[Comparison, IsNull, And, Or, Native]

PREDICATE_TYPES = (Comparison, IsNull, And, Or, Native)


def and_(*clauses: Optional[Predicate]) -> Optional[Predicate]:
    """AND the given clauses together, skipping ``None``."""
    present = tuple(clause for clause in clauses if clause is not None)
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return And(present)


def or_(*clauses: Optional[Predicate]) -> Optional[Predicate]:
    """OR the given clauses together, skipping ``None``."""
    present = tuple(clause for clause in clauses if clause is not None)
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return Or(present)


def column_ref(key: str) -> ColumnRef:
    """Parse ``"column"`` or ``"alias.column"`` into a reference."""
    alias, _, name = key.rpartition(".")
    return ColumnRef(name=name, alias=alias or None)


def as_predicate(where: Any) -> Optional[Predicate]:
    """Coerce a caller-supplied filter into the predicate algebra.

    Mappings become an AND of equalities, predicates pass through unchanged
    and anything else is wrapped in :class:`Native` for the adapter to handle.
    """
    if where is None:
        return None
    if isinstance(where, PREDICATE_TYPES):
        return where
    if isinstance(where, Mapping):
        return and_(*(
            Comparison(column_ref(key), Operator.EQ, value)
            for key, value in where.items()
        ))
    return Native(where)
