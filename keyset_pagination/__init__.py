"""Keyset (cursor) pagination over ordered, filtered record collections."""

from .config import Settings, get_settings, configure_logging
from .models import PageRequest, PageInfo, Edge, PageResult
from .pagination import (
    Direction,
    PlainTerm,
    JoinedTerm,
    encode_cursor,
    decode_cursor,
    normalize_order,
    reverse_order,
    build_keyset_predicate,
    create_link_header,
    paginate,
    with_pagination
)

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "PageRequest",
    "PageInfo",
    "Edge",
    "PageResult",
    "Direction",
    "PlainTerm",
    "JoinedTerm",
    "encode_cursor",
    "decode_cursor",
    "normalize_order",
    "reverse_order",
    "build_keyset_predicate",
    "create_link_header",
    "paginate",
    "with_pagination"
]
