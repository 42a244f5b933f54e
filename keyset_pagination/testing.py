"""In-memory data store for tests and prototypes.

Usage::

    from keyset_pagination.testing import InMemoryModel

    model = InMemoryModel([{"id": 1, "counter": 3}, {"id": 2, "counter": 1}])
    page = await paginate(model, order=[["counter", "asc"]], limit=10)

Filtering follows SQL NULL semantics (a comparison against NULL is never
true) and ordering follows PostgreSQL defaults (NULL sorts as the largest
value, so plain ASC puts NULLs last and plain DESC puts them first).
"""

import operator
from datetime import date, datetime, time
from decimal import Decimal
from functools import cmp_to_key, lru_cache
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from .errors.problem_details import InvalidFilterError
from .pagination.cursor import read_term_value
from .pagination.order import JoinedTerm, NullPlacement, OrderTerm, PlainTerm
from .pagination.predicate import (
    And, ColumnRef, Comparison, IsNull, Native, Operator, Or, Predicate
)

_OPERATORS: Dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.LT: operator.lt,
    Operator.LTE: operator.le,
    Operator.GT: operator.gt,
    Operator.GTE: operator.ge,
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
}

# Record value types a string filter value is parsed into before comparing
_PARSED_TYPES = (datetime, date, time, Decimal, UUID, int, float)


@lru_cache(maxsize=None)
def _adapter(value_type: type) -> TypeAdapter:
    return TypeAdapter(value_type)


def _column_value(record: Any, column: ColumnRef) -> Any:
    if column.alias:
        return read_term_value(record, JoinedTerm(column.alias, column.name))
    return read_term_value(record, PlainTerm(column.name))


def _coerce(actual: Any, value: Any, column: ColumnRef) -> Any:
    """Parse a string ``value`` into the type of the record's ``actual`` value."""
    if not isinstance(value, str) or not isinstance(actual, _PARSED_TYPES):
        return value
    try:
        return _adapter(type(actual)).validate_python(value)
    except ValidationError:
        raise InvalidFilterError(
            f"Value {value!r} does not match the type of column {column.qualified_name!r}"
        )


def evaluate(predicate: Optional[Predicate], record: Any) -> bool:
    """Return whether ``record`` satisfies ``predicate``.

    Raises:
        InvalidFilterError: For non-callable native filters or values that
            cannot be compared with the record's values
    """
    if predicate is None:
        return True
    if isinstance(predicate, And):
        return all(evaluate(clause, record) for clause in predicate.clauses)
    if isinstance(predicate, Or):
        return any(evaluate(clause, record) for clause in predicate.clauses)
    if isinstance(predicate, IsNull):
        return _column_value(record, predicate.column) is None
    if isinstance(predicate, Comparison):
        actual = _column_value(record, predicate.column)
        if predicate.value is None and predicate.op is Operator.EQ:
            return actual is None
        if predicate.value is None and predicate.op is Operator.NE:
            return actual is not None
        if actual is None or predicate.value is None:
            return False
        value = _coerce(actual, predicate.value, predicate.column)
        return _OPERATORS[predicate.op](actual, value)
    if isinstance(predicate, Native):
        if not callable(predicate.value):
            raise InvalidFilterError("In-memory filters must be callables taking a record")
        return bool(predicate.value(record))
    raise InvalidFilterError(f"Unsupported predicate: {predicate!r}")


def _compare_terms(left: Any, right: Any, term: OrderTerm) -> int:
    a = read_term_value(left, term)
    b = read_term_value(right, term)
    direction = term.direction

    if a is None and b is None:
        return 0
    if a is None or b is None:
        nulls_first = direction.nulls is NullPlacement.FIRST or (
            direction.nulls is NullPlacement.DEFAULT and not direction.ascending
        )
        null_side = -1 if nulls_first else 1
        return null_side if a is None else -null_side
    if a == b:
        return 0

    result = -1 if a < b else 1
    return result if direction.ascending else -result


def sort_records(records: Iterable[Any], order: Sequence[OrderTerm]) -> List[Any]:
    """Sort records by an order specification."""
    def compare(left: Any, right: Any) -> int:
        for term in order:
            result = _compare_terms(left, right, term)
            if result:
                return result
        return 0

    return sorted(records, key=cmp_to_key(compare))


class InMemoryModel:
    """Drop-in data store that keeps its records in a list.

    Args:
        records: Mappings or objects exposing column values; joined entities
            are nested under their alias
        primary_key: Primary-key column name(s) used as the pagination tie-break
    """

    def __init__(
        self,
        records: Iterable[Any] = (),
        *,
        primary_key: Union[str, Sequence[str]] = "id"
    ):
        self.records = list(records)
        self.primary_key = primary_key
        self._calls: List[Dict[str, Any]] = []

    @property
    def calls(self) -> List[Dict[str, Any]]:
        """Requests received, for assertions in tests."""
        return self._calls

    async def find_all(
        self,
        *,
        where: Optional[Predicate] = None,
        order: Sequence[OrderTerm] = (),
        limit: Optional[int] = None,
        **options: Any
    ) -> List[Any]:
        self._calls.append({"method": "find_all", "where": where, "order": order, "limit": limit, **options})
        rows = sort_records((r for r in self.records if evaluate(where, r)), order)
        return rows if limit is None else rows[:limit]

    async def count(self, *, where: Optional[Predicate] = None, **options: Any) -> int:
        self._calls.append({"method": "count", "where": where, **options})
        return sum(1 for r in self.records if evaluate(where, r))
