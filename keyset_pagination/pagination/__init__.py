"""Pagination module for keyset (cursor) pagination."""

from .cursor import (
    encode_cursor,
    decode_cursor,
    create_cursor,
    read_term_value
)
from .order import (
    Direction,
    NullPlacement,
    PlainTerm,
    JoinedTerm,
    OrderTerm,
    normalize_order,
    reverse_order
)
from .predicate import (
    Operator,
    ColumnRef,
    Comparison,
    IsNull,
    And,
    Or,
    Native,
    Predicate,
    and_,
    or_,
    as_predicate
)
from .keyset import build_keyset_predicate, is_valid_cursor
from .links import create_link_header
from .paginator import PaginatedModel, paginate, with_pagination

__all__ = [
    "encode_cursor",
    "decode_cursor",
    "create_cursor",
    "read_term_value",
    "Direction",
    "NullPlacement",
    "PlainTerm",
    "JoinedTerm",
    "OrderTerm",
    "normalize_order",
    "reverse_order",
    "Operator",
    "ColumnRef",
    "Comparison",
    "IsNull",
    "And",
    "Or",
    "Native",
    "Predicate",
    "and_",
    "or_",
    "as_predicate",
    "build_keyset_predicate",
    "is_valid_cursor",
    "create_link_header",
    "PaginatedModel",
    "paginate",
    "with_pagination"
]
