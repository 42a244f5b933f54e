"""Keyset predicate construction.

For an order ``[t0, t1, ..., tn]`` and cursor ``[c0, c1, ..., cn]`` the
predicate selecting rows strictly after the cursor is built recursively::

    t0 op c0  OR  (t0 = c0 AND <predicate for [t1..tn], [c1..cn]>)

where ``op`` is ``>`` for ascending terms and ``<`` for descending ones.
Terms with explicit NULL placement adjust ``t0 op c0`` whenever a later
term exists to break the tie.
"""

from typing import Any, Optional, Sequence

from .order import NullPlacement, OrderTerm
from .predicate import And, Comparison, IsNull, Operator, Or, Predicate


def is_valid_cursor(cursor: Sequence[Any], order: Sequence[OrderTerm]) -> bool:
    """A cursor fits an order when it carries one value per term."""
    return len(cursor) == len(order)


def build_keyset_predicate(
    order: Sequence[OrderTerm],
    cursor: Sequence[Any]
) -> Optional[Predicate]:
    """Build the predicate selecting rows strictly after ``cursor`` under ``order``.

    Args:
        order: Canonical order specification
        cursor: Decoded cursor values

    Returns:
        The predicate, or None if the cursor does not fit the order
    """
    if not order or not is_valid_cursor(cursor, order):
        return None
    return _build(list(order), list(cursor))


def _build(order, cursor) -> Predicate:
    term, value = order[0], cursor[0]
    column = term.ref
    direction = term.direction

    operator_filter: Predicate = Comparison(column, direction.comparison, value)

    if len(order) == 1:
        return operator_filter

    if value is None and direction.nulls is NullPlacement.FIRST:
        # NULL already sorts first, so every non-null row is after it
        operator_filter = Comparison(column, Operator.NE, None)
    elif value is not None and direction.nulls is NullPlacement.LAST:
        # NULL rows sort after every non-null value
        operator_filter = Or((IsNull(column), operator_filter))

    return Or((
        operator_filter,
        And((
            Comparison(column, Operator.EQ, value),
            _build(order[1:], cursor[1:]),
        )),
    ))
