"""Order specifications: parsing, normalization and reversal."""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors.problem_details import InvalidOrderError
from .predicate import ColumnRef, Operator


logger = logging.getLogger(__name__)


class NullPlacement(str, Enum):
    """Where NULLs sort relative to non-null values."""

    DEFAULT = "default"
    FIRST = "first"
    LAST = "last"


class Direction(str, Enum):
    """Sort direction of an order term, including explicit NULL placement."""

    ASC = "ASC"
    DESC = "DESC"
    ASC_NULLS_FIRST = "ASC NULLS FIRST"
    ASC_NULLS_LAST = "ASC NULLS LAST"
    DESC_NULLS_FIRST = "DESC NULLS FIRST"
    DESC_NULLS_LAST = "DESC NULLS LAST"

    @classmethod
    def parse(cls, value: Any) -> "Direction":
        """Parse a caller-supplied direction; ``None`` and ``""`` mean ASC."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.ASC
        if not isinstance(value, str):
            raise InvalidOrderError(f"Order direction must be a string, got {value!r}")

        token = " ".join(value.split()).upper()
        try:
            return cls(token)
        except ValueError:
            raise InvalidOrderError(f"Unknown order direction: {value!r}")

    @property
    def ascending(self) -> bool:
        return _DIRECTIONS[self][0] is Operator.GT

    @property
    def comparison(self) -> Operator:
        """Operator selecting rows strictly after a value in this direction."""
        return _DIRECTIONS[self][0]

    @property
    def nulls(self) -> NullPlacement:
        return _DIRECTIONS[self][1]


_DIRECTIONS = {
    Direction.ASC: (Operator.GT, NullPlacement.DEFAULT),
    Direction.DESC: (Operator.LT, NullPlacement.DEFAULT),
    Direction.ASC_NULLS_FIRST: (Operator.GT, NullPlacement.FIRST),
    Direction.ASC_NULLS_LAST: (Operator.GT, NullPlacement.LAST),
    Direction.DESC_NULLS_FIRST: (Operator.LT, NullPlacement.FIRST),
    Direction.DESC_NULLS_LAST: (Operator.LT, NullPlacement.LAST),
}

# Plain toggle; NULLS qualifiers are dropped.
_REVERSED = {
    Direction.ASC: Direction.DESC,
    Direction.DESC: Direction.ASC,
    Direction.ASC_NULLS_FIRST: Direction.DESC,
    Direction.ASC_NULLS_LAST: Direction.DESC,
    Direction.DESC_NULLS_FIRST: Direction.ASC,
    Direction.DESC_NULLS_LAST: Direction.ASC,
}

# Toggle that keeps NULLs at the same end of the reversed sequence.
# Plain ASC/DESC assume PostgreSQL defaults (NULLs sort as the largest value).
_REVERSED_NULLS_ENFORCED = {
    Direction.ASC: Direction.DESC_NULLS_FIRST,
    Direction.DESC: Direction.ASC_NULLS_LAST,
    Direction.ASC_NULLS_FIRST: Direction.DESC_NULLS_LAST,
    Direction.ASC_NULLS_LAST: Direction.DESC_NULLS_FIRST,
    Direction.DESC_NULLS_FIRST: Direction.ASC_NULLS_LAST,
    Direction.DESC_NULLS_LAST: Direction.ASC_NULLS_FIRST,
}


@dataclass(frozen=True)
class PlainTerm:
    """Order by a column of the paginated entity."""

    column: str
    direction: Direction = Direction.ASC

    @property
    def ref(self) -> ColumnRef:
        return ColumnRef(self.column)


@dataclass(frozen=True)
class JoinedTerm:
    """Order by a column of an entity joined under ``alias``."""

    alias: str
    column: str
    direction: Direction = Direction.ASC

    @property
    def ref(self) -> ColumnRef:
        return ColumnRef(self.column, self.alias)


OrderTerm = Union[PlainTerm, JoinedTerm]
Order = Tuple[OrderTerm, ...]


def _entity_alias(entity: Any) -> Optional[str]:
    """Return the join alias of an entity reference, or None if it is not one."""
    if isinstance(entity, Mapping):
        alias = entity.get("as") or entity.get("alias")
        if not isinstance(alias, str) or not alias:
            raise InvalidOrderError(f"Entity reference needs an 'as' alias: {entity!r}")
        return alias
    return None


def parse_term(item: Any) -> OrderTerm:
    """Parse one loosely-specified order item into a term."""
    if isinstance(item, (PlainTerm, JoinedTerm)):
        return item
    if isinstance(item, str):
        return PlainTerm(item)
    if not isinstance(item, (list, tuple)) or not item:
        raise InvalidOrderError(f"Unsupported order item: {item!r}")
    if len(item) > 3:
        raise InvalidOrderError(f"Order item has too many elements: {item!r}")

    alias = _entity_alias(item[0])
    if alias is None and len(item) == 3:
        if not isinstance(item[0], str):
            raise InvalidOrderError(f"Unsupported entity reference: {item[0]!r}")
        alias = item[0]

    if alias is None:
        column, direction = item[0], item[1] if len(item) > 1 else None
    else:
        if len(item) < 2:
            raise InvalidOrderError(f"Joined order item needs a column: {item!r}")
        column, direction = item[1], item[2] if len(item) > 2 else None

    if not isinstance(column, str) or not column:
        raise InvalidOrderError(f"Order column must be a non-empty string: {item!r}")

    if alias is None:
        return PlainTerm(column, Direction.parse(direction))
    return JoinedTerm(alias, column, Direction.parse(direction))


def normalize_primary_key_field(primary_key_field: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(primary_key_field, str):
        return [primary_key_field]
    return list(primary_key_field)


def normalize_order(
    order: Any,
    primary_key_field: Union[str, Sequence[str]] = "id",
    omit_primary_key_from_order: bool = False
) -> Order:
    """Convert a loosely-specified order into a canonical one.

    Args:
        order: None, a column name, or a sequence of order items
        primary_key_field: Primary-key column name(s) used as tie-break
        omit_primary_key_from_order: Skip appending the primary key

    Returns:
        Tuple of order terms, ending with any primary-key fields that were
        missing so the order is total

    Raises:
        InvalidOrderError: If an item has an unsupported shape or direction
    """
    if order is None:
        items: Sequence[Any] = ()
    elif isinstance(order, (str, PlainTerm, JoinedTerm)):
        items = (order,)
    else:
        items = order

    terms = [parse_term(item) for item in items]

    if omit_primary_key_from_order:
        return tuple(terms)

    present = {term.column for term in terms if isinstance(term, PlainTerm)}
    missing = [
        field for field in normalize_primary_key_field(primary_key_field)
        if field not in present
    ]
    if missing:
        logger.debug(f"Appending primary key tie-break {missing} to order")

    return tuple(terms) + tuple(PlainTerm(field) for field in missing)


def reverse_order(order: Sequence[OrderTerm], enforce_null_order: bool = False) -> Order:
    """Flip every term so the order walks backward.

    With ``enforce_null_order`` NULL placement is flipped too, which keeps
    the reversed sequence the exact mirror of the original one.
    """
    table = _REVERSED_NULLS_ENFORCED if enforce_null_order else _REVERSED
    return tuple(replace(term, direction=table[term.direction]) for term in order)
