"""Cursor encoding and decoding for keyset pagination."""

import json
import base64
import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, Any, List, Mapping, Sequence
from uuid import UUID

from pydantic import TypeAdapter
from pydantic_core import to_json

from .order import OrderTerm, JoinedTerm


logger = logging.getLogger(__name__)

# Values JSON has no type for are stored as {"$type": tag, "value": ...}
# so they decode back to the type the column compares against.
TYPE_KEY = "$type"
VALUE_KEY = "value"

# datetime before date: datetime is a date subclass
_TAGGED_TYPES = (
    ("datetime", datetime),
    ("date", date),
    ("time", time),
    ("decimal", Decimal),
    ("uuid", UUID),
)
_ADAPTERS = {tag: TypeAdapter(type_) for tag, type_ in _TAGGED_TYPES}


def _tag(value: Any) -> Any:
    for tag, type_ in _TAGGED_TYPES:
        if isinstance(value, type_):
            return {TYPE_KEY: tag, VALUE_KEY: value}
    return value


def _untag(value: Any) -> Any:
    if isinstance(value, dict) and value.keys() == {TYPE_KEY, VALUE_KEY}:
        adapter = _ADAPTERS.get(value[TYPE_KEY])
        if adapter is not None:
            return adapter.validate_python(value[VALUE_KEY])
    return value


def encode_cursor(values: Sequence[Any]) -> str:
    """Encode a sort-key tuple into an opaque cursor.

    Datetimes, dates, times, Decimals and UUIDs keep their type through a
    round-trip.

    Args:
        values: Sort-key values, one per order term

    Returns:
        URL-safe base64 encoded cursor string
    """
    cursor_bytes = to_json([_tag(value) for value in values])
    return base64.urlsafe_b64encode(cursor_bytes).decode('ascii')


def decode_cursor(cursor: Optional[str]) -> Optional[List[Any]]:
    """Decode an opaque cursor back into its sort-key values.

    Args:
        cursor: Cursor string produced by :func:`encode_cursor`

    Returns:
        The decoded values, or None if the cursor is missing or malformed
    """
    if not cursor:
        return None

    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        cursor_bytes = base64.urlsafe_b64decode(padded.encode('ascii'))
        values = json.loads(cursor_bytes.decode('utf-8'))
        if not isinstance(values, list):
            logger.debug(f"Discarding cursor that is not a list: {type(values).__name__}")
            return None
        # pydantic's ValidationError is a ValueError
        return [_untag(value) for value in values]
    except (ValueError, TypeError) as e:
        logger.debug(f"Discarding malformed cursor: {e}")
        return None


def _read(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def read_term_value(record: Any, term: OrderTerm) -> Any:
    """Read the value a record has for an order term.

    Joined terms read from the association payload nested under the alias.
    """
    if isinstance(term, JoinedTerm):
        return _read(_read(record, term.alias), term.column)
    return _read(record, term.column)


def create_cursor(record: Any, order: Sequence[OrderTerm]) -> str:
    """Build the cursor pointing at ``record`` under ``order``."""
    return encode_cursor([read_term_value(record, term) for term in order])
