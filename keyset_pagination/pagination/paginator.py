"""Page assembly: fetch a window of rows and wrap it in a page result."""

import asyncio
import logging
from typing import Any, Optional, Protocol, Sequence, Union

from ..config import Settings, get_settings
from ..errors.problem_details import (
    ConflictingCursorsError, InvalidCursorError, InvalidLimitError
)
from ..models.page import Edge, PageInfo, PageRequest, PageResult
from .cursor import create_cursor, decode_cursor
from .keyset import build_keyset_predicate
from .order import Order, normalize_order, reverse_order
from .predicate import Predicate, and_, as_predicate


logger = logging.getLogger(__name__)


class PaginatedModel(Protocol):
    """Data-store capability required by :func:`paginate`."""

    async def find_all(
        self,
        *,
        where: Optional[Predicate],
        order: Order,
        limit: Optional[int],
        **options: Any
    ) -> Sequence[Any]:
        ...

    async def count(self, *, where: Optional[Predicate], **options: Any) -> int:
        ...


def _resolve_limit(limit: Optional[int], settings: Settings) -> int:
    if limit is None:
        return settings.default_page_size
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidLimitError(limit, settings.max_page_size)
    if limit < 1 or limit > settings.max_page_size:
        raise InvalidLimitError(limit, settings.max_page_size)
    return limit


def _resolve_keyset(
    request: PageRequest,
    query_order: Order,
    settings: Settings
) -> Optional[Predicate]:
    """Decode the request's cursor into a keyset predicate for ``query_order``."""
    token = request.after or request.before
    if token is None:
        return None

    cursor = decode_cursor(token)
    if cursor is None:
        if settings.strict_cursors:
            raise InvalidCursorError("Cursor could not be decoded", cursor=token)
        logger.warning("Ignoring malformed cursor, paginating from the first page")
        return None

    predicate = build_keyset_predicate(query_order, cursor)
    if predicate is None:
        if settings.strict_cursors:
            raise InvalidCursorError(
                f"Cursor has {len(cursor)} values but the order has {len(query_order)} terms",
                cursor=token
            )
        logger.warning(
            f"Ignoring cursor with {len(cursor)} values for an order of {len(query_order)} terms"
        )
    return predicate


async def paginate(
    model: PaginatedModel,
    *,
    limit: Optional[int] = None,
    after: Optional[str] = None,
    before: Optional[str] = None,
    order: Any = None,
    where: Any = None,
    primary_key_field: Optional[Union[str, Sequence[str]]] = None,
    omit_primary_key_from_order: bool = False,
    settings: Optional[Settings] = None,
    **options: Any
) -> PageResult:
    """Fetch one page of ``model`` rows using keyset pagination.

    Args:
        model: Data store exposing async ``find_all`` and ``count``
        limit: Page size, defaults to ``settings.default_page_size``
        after: Return rows strictly after this cursor
        before: Return rows strictly before this cursor
        order: Order specification (see :func:`normalize_order`)
        where: Caller filter; mapping, predicate or adapter-native filter
        primary_key_field: Tie-break column(s), defaults to the model's
            ``primary_key`` or ``settings.primary_key_field``
        omit_primary_key_from_order: Do not append the primary key
        settings: Settings override
        **options: Forwarded unchanged to ``find_all`` and ``count``

    Returns:
        The assembled page

    Raises:
        ConflictingCursorsError: If both ``after`` and ``before`` are given
        InvalidLimitError: If ``limit`` is out of bounds
        InvalidOrderError: If ``order`` cannot be parsed
        InvalidCursorError: If strict cursors are enabled and a cursor is unusable
    """
    settings = settings or get_settings()
    after, before = after or None, before or None

    if after is not None and before is not None:
        raise ConflictingCursorsError()

    request = PageRequest(
        limit=_resolve_limit(limit, settings),
        after=after,
        before=before,
        order=order,
        where=where,
        options=options
    )

    if primary_key_field is None:
        primary_key_field = getattr(model, "primary_key", None) or settings.primary_key_field

    canonical_order = normalize_order(request.order, primary_key_field, omit_primary_key_from_order)
    backward = request.backward
    query_order = (
        reverse_order(canonical_order, enforce_null_order=settings.enforce_null_order)
        if backward else canonical_order
    )

    keyset = _resolve_keyset(request, query_order, settings)
    base_where = as_predicate(request.where)

    logger.debug(
        f"Paginating {'backward' if backward else 'forward'} with limit {request.limit}, "
        f"order {[term.ref.qualified_name for term in query_order]}"
    )

    rows, total_count = await asyncio.gather(
        model.find_all(
            where=and_(keyset, base_where),
            order=query_order,
            limit=request.limit + 1,
            **request.options
        ),
        model.count(where=base_where, **request.options)
    )

    rows = list(rows)
    has_more = len(rows) > request.limit
    rows = rows[:request.limit]
    if backward:
        rows.reverse()

    edges = [Edge(node=row, cursor=create_cursor(row, canonical_order)) for row in rows]
    cursor_applied = keyset is not None

    page_info = PageInfo(
        has_next_page=cursor_applied if backward else has_more,
        has_previous_page=has_more if backward else cursor_applied,
        start_cursor=edges[0].cursor if edges else None,
        end_cursor=edges[-1].cursor if edges else None
    )

    return PageResult(edges=edges, page_info=page_info, total_count=total_count)


def with_pagination(
    method_name: Optional[str] = None,
    primary_key_field: Optional[Union[str, Sequence[str]]] = None,
    omit_primary_key_from_order: bool = False
):
    """Attach a keyset ``paginate`` coroutine to a model.

    Usage::

        with_pagination()(articles)
        page = await articles.paginate(limit=20, order=[["published_at", "desc"]])
    """
    def attach(model):
        name = method_name or get_settings().method_name

        async def paginate_model(**kwargs: Any) -> PageResult:
            kwargs.setdefault("primary_key_field", primary_key_field)
            kwargs.setdefault("omit_primary_key_from_order", omit_primary_key_from_order)
            return await paginate(model, **kwargs)

        paginate_model.__name__ = name
        setattr(model, name, staticmethod(paginate_model) if isinstance(model, type) else paginate_model)
        return model

    return attach
