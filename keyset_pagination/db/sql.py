"""PostgreSQL query text for keyset pagination, parameterized for asyncpg."""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from ..errors.problem_details import InvalidFilterError
from ..pagination.order import OrderTerm
from ..pagination.predicate import (
    And, ColumnRef, Comparison, IsNull, Native, Operator, Or, Predicate
)


@dataclass(frozen=True)
class Join:
    """A to-one association joined under ``alias``.

    The joined row is selected as JSON and nested under ``alias`` in every
    returned record.
    """

    table: str
    alias: str
    local_key: str
    remote_key: str = "id"


def quote_identifier(name: str) -> str:
    """Quote an identifier, keeping schema qualification (``schema.table``)."""
    return ".".join('"' + part.replace('"', '""') + '"' for part in name.split("."))


def compile_column(column: ColumnRef, table: str) -> str:
    owner = column.alias or table
    return f"{quote_identifier(owner)}.{quote_identifier(column.name)}"


def compile_predicate(predicate: Predicate, table: str, params: List[Any]) -> str:
    """Compile a predicate into SQL, appending bound values to ``params``.

    Args:
        predicate: Predicate to compile
        table: Base table that plain columns belong to
        params: Parameter list; placeholders are numbered after its current length

    Returns:
        SQL condition text

    Raises:
        InvalidFilterError: If the predicate contains a native filter
    """
    if isinstance(predicate, (And, Or)):
        joiner = " AND " if isinstance(predicate, And) else " OR "
        parts = [compile_predicate(clause, table, params) for clause in predicate.clauses]
        if len(parts) == 1:
            return parts[0]
        return "(" + joiner.join(parts) + ")"

    if isinstance(predicate, IsNull):
        return f"{compile_column(predicate.column, table)} IS NULL"

    if isinstance(predicate, Comparison):
        column = compile_column(predicate.column, table)
        if predicate.value is None and predicate.op is Operator.EQ:
            return f"{column} IS NULL"
        if predicate.value is None and predicate.op is Operator.NE:
            return f"{column} IS NOT NULL"
        params.append(predicate.value)
        return f"{column} {predicate.op.value} ${len(params)}"

    if isinstance(predicate, Native):
        raise InvalidFilterError("Native filters are not supported by the asyncpg adapter")

    raise InvalidFilterError(f"Unsupported predicate: {predicate!r}")


def compile_order(order: Sequence[OrderTerm], table: str) -> str:
    """Compile an order specification into an ORDER BY clause."""
    if not order:
        return ""
    terms = [f"{compile_column(term.ref, table)} {term.direction.value}" for term in order]
    return "ORDER BY " + ", ".join(terms)


def _from_clause(table: str, joins: Sequence[Join]) -> str:
    parts = [f"FROM {quote_identifier(table)}"]
    for join in joins:
        parts.append(
            f"LEFT JOIN {quote_identifier(join.table)} AS {quote_identifier(join.alias)} "
            f"ON {quote_identifier(join.alias)}.{quote_identifier(join.remote_key)} = "
            f"{quote_identifier(table)}.{quote_identifier(join.local_key)}"
        )
    return " ".join(parts)


def build_select_query(
    table: str,
    where: Optional[Predicate] = None,
    order: Sequence[OrderTerm] = (),
    limit: Optional[int] = None,
    joins: Sequence[Join] = ()
) -> Tuple[str, List[Any]]:
    """Build a paginated SELECT.

    Returns:
        Tuple of (query, parameters)
    """
    params: List[Any] = []
    columns = [f"{quote_identifier(table)}.*"]
    columns.extend(
        f"to_jsonb({quote_identifier(join.alias)}.*) AS {quote_identifier(join.alias)}"
        for join in joins
    )

    parts = ["SELECT " + ", ".join(columns), _from_clause(table, joins)]
    if where is not None:
        parts.append("WHERE " + compile_predicate(where, table, params))

    order_clause = compile_order(order, table)
    if order_clause:
        parts.append(order_clause)

    if limit is not None:
        params.append(limit)
        parts.append(f"LIMIT ${len(params)}")

    return " ".join(parts), params


def build_count_query(
    table: str,
    where: Optional[Predicate] = None,
    joins: Sequence[Join] = ()
) -> Tuple[str, List[Any]]:
    """Build a COUNT(*) over the same FROM clause as :func:`build_select_query`.

    Returns:
        Tuple of (query, parameters)
    """
    params: List[Any] = []
    parts = ["SELECT COUNT(*)", _from_clause(table, joins)]
    if where is not None:
        parts.append("WHERE " + compile_predicate(where, table, params))
    return " ".join(parts), params
