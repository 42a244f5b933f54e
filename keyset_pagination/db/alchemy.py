"""SQLAlchemy Core translation and data store for keyset pagination."""

import logging
import operator
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import Table, and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql.selectable import FromClause
from sqlalchemy.sql.elements import ClauseElement, ColumnElement

from ..errors.problem_details import InvalidFilterError
from ..pagination.order import NullPlacement, OrderTerm
from ..pagination.predicate import (
    And, ColumnRef, Comparison, IsNull, Native, Operator, Or, Predicate
)


logger = logging.getLogger(__name__)

_OPERATORS = {
    Operator.LT: operator.lt,
    Operator.LTE: operator.le,
    Operator.GT: operator.gt,
    Operator.GTE: operator.ge,
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
}


# eq=False: SQLAlchemy expressions overload ==
@dataclass(frozen=True, eq=False)
class JoinedTable:
    """A to-one association, usually ``table.alias("name")``, and its ON clause."""

    selectable: FromClause
    onclause: ColumnElement

    @property
    def name(self) -> str:
        return self.selectable.name


def _column(ref: ColumnRef, table: FromClause, joined: Mapping[str, FromClause]):
    source = table if ref.alias is None else joined.get(ref.alias)
    if source is None:
        raise InvalidFilterError(f"Unknown join alias: {ref.alias!r}")
    try:
        return source.c[ref.name]
    except KeyError:
        raise InvalidFilterError(f"Unknown column: {ref.qualified_name!r}")


@lru_cache(maxsize=None)
def _adapter(python_type: type) -> TypeAdapter:
    return TypeAdapter(python_type)


def _coerce(column: ColumnElement, value: Any) -> Any:
    """Convert ``value`` to the Python type of ``column``.

    Cursors and caller filters may carry ISO strings for temporal columns or
    strings for numeric ones; bound as-is they compare as text on backends
    such as SQLite.
    """
    if value is None:
        return value
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if isinstance(value, python_type):
        return value
    try:
        return _adapter(python_type).validate_python(value)
    except ValidationError:
        raise InvalidFilterError(f"Value {value!r} does not match the type of column {column.name!r}")


def to_clause(
    predicate: Predicate,
    table: FromClause,
    joined: Optional[Mapping[str, FromClause]] = None
) -> ClauseElement:
    """Translate a predicate into a SQLAlchemy clause.

    Args:
        predicate: Predicate to translate
        table: Table that plain columns belong to
        joined: Join aliases mapped to their selectables

    Raises:
        InvalidFilterError: For unknown aliases/columns, values that do not fit
            their column, or non-SQLAlchemy native filters
    """
    joined = joined or {}

    if isinstance(predicate, And):
        return and_(*(to_clause(clause, table, joined) for clause in predicate.clauses))
    if isinstance(predicate, Or):
        return or_(*(to_clause(clause, table, joined) for clause in predicate.clauses))
    if isinstance(predicate, IsNull):
        return _column(predicate.column, table, joined).is_(None)
    if isinstance(predicate, Comparison):
        column = _column(predicate.column, table, joined)
        if predicate.value is None and predicate.op is Operator.EQ:
            return column.is_(None)
        if predicate.value is None and predicate.op is Operator.NE:
            return column.is_not(None)
        return _OPERATORS[predicate.op](column, _coerce(column, predicate.value))
    if isinstance(predicate, Native):
        if isinstance(predicate.value, ClauseElement):
            return predicate.value
        raise InvalidFilterError("Native filters must be SQLAlchemy clause elements")

    raise InvalidFilterError(f"Unsupported predicate: {predicate!r}")


def to_order_by(
    order: Sequence[OrderTerm],
    table: FromClause,
    joined: Optional[Mapping[str, FromClause]] = None
) -> List[ColumnElement]:
    """Translate an order specification into ORDER BY expressions."""
    joined = joined or {}
    expressions = []

    for term in order:
        column = _column(term.ref, table, joined)
        expression = column.asc() if term.direction.ascending else column.desc()
        if term.direction.nulls is NullPlacement.FIRST:
            expression = expression.nulls_first()
        elif term.direction.nulls is NullPlacement.LAST:
            expression = expression.nulls_last()
        expressions.append(expression)

    return expressions


class SQLAlchemyTable:
    """A SQLAlchemy Core table exposed through ``find_all`` and ``count``.

    Records are plain dicts; columns of each joined table are nested under
    its alias (``None`` when the outer join found no row).
    """

    def __init__(
        self,
        engine: AsyncEngine,
        table: Table,
        primary_key: Optional[Union[str, Sequence[str]]] = None,
        joins: Sequence[JoinedTable] = ()
    ):
        self.engine = engine
        self.table = table
        if primary_key is None:
            names = [column.name for column in table.primary_key.columns]
            primary_key = names[0] if len(names) == 1 else names
        self.primary_key = primary_key
        self.joins = tuple(joins)

    def _joins(self, include: Optional[Sequence[JoinedTable]]) -> List[JoinedTable]:
        joins = list(self.joins)
        for join in include or ():
            if all(join is not existing for existing in joins):
                joins.append(join)
        return joins

    def _from_clause(self, joins: Sequence[JoinedTable]) -> FromClause:
        from_clause = self.table
        for join in joins:
            from_clause = from_clause.outerjoin(join.selectable, join.onclause)
        return from_clause

    def _to_record(self, row: Mapping[str, Any], joins: Sequence[JoinedTable]) -> Dict[str, Any]:
        record = {column.name: row[column.name] for column in self.table.c}
        for join in joins:
            nested = {
                column.name: row[f"{join.name}__{column.name}"]
                for column in join.selectable.c
            }
            record[join.name] = nested if any(v is not None for v in nested.values()) else None
        return record

    async def find_all(
        self,
        *,
        where: Optional[Predicate] = None,
        order: Sequence[OrderTerm] = (),
        limit: Optional[int] = None,
        include: Optional[Sequence[JoinedTable]] = None
    ) -> List[Dict[str, Any]]:
        """Fetch rows matching ``where`` in ``order``.

        Raises:
            SQLAlchemyError: Database errors propagate unchanged
        """
        joins = self._joins(include)
        joined = {join.name: join.selectable for join in joins}

        columns = list(self.table.c)
        for join in joins:
            columns.extend(
                column.label(f"{join.name}__{column.name}") for column in join.selectable.c
            )

        stmt = select(*columns).select_from(self._from_clause(joins))
        if where is not None:
            stmt = stmt.where(to_clause(where, self.table, joined))
        order_by = to_order_by(order, self.table, joined)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.error(f"Database error listing {self.table.name}: {e}")
            raise

        logger.debug(f"Fetched {len(rows)} rows from {self.table.name}")
        return [self._to_record(row, joins) for row in rows]

    async def count(
        self,
        *,
        where: Optional[Predicate] = None,
        include: Optional[Sequence[JoinedTable]] = None
    ) -> int:
        """Count rows matching ``where``.

        Raises:
            SQLAlchemyError: Database errors propagate unchanged
        """
        joins = self._joins(include)
        joined = {join.name: join.selectable for join in joins}

        stmt = select(func.count()).select_from(self._from_clause(joins))
        if where is not None:
            stmt = stmt.where(to_clause(where, self.table, joined))

        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Database error counting {self.table.name}: {e}")
            raise
