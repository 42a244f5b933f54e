"""asyncpg-backed data store for keyset pagination."""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import asyncpg
from asyncpg import Pool

from ..pagination.order import OrderTerm
from ..pagination.predicate import Predicate
from .connection import get_db_pool
from .sql import Join, build_count_query, build_select_query


logger = logging.getLogger(__name__)


class AsyncpgTable:
    """A PostgreSQL table exposed through ``find_all`` and ``count``.

    Args:
        table: Table name, optionally schema-qualified
        primary_key: Primary-key column name(s)
        joins: Associations joined on every query
        pool: Pool to use instead of the global one
    """

    def __init__(
        self,
        table: str,
        primary_key: Union[str, Sequence[str]] = "id",
        joins: Sequence[Join] = (),
        pool: Optional[Pool] = None
    ):
        self.table = table
        self.primary_key = primary_key
        self.joins = tuple(joins)
        self._pool = pool

    async def _get_pool(self) -> Pool:
        return self._pool or await get_db_pool()

    def _joins(self, include: Optional[Sequence[Join]]) -> List[Join]:
        joins = list(self.joins)
        for join in include or ():
            if join not in joins:
                joins.append(join)
        return joins

    def _to_record(self, row: Any, joins: Sequence[Join]) -> Dict[str, Any]:
        record = dict(row)
        # asyncpg returns JSONB as text unless a codec is registered
        for join in joins:
            if isinstance(record.get(join.alias), str):
                record[join.alias] = json.loads(record[join.alias])
        return record

    async def find_all(
        self,
        *,
        where: Optional[Predicate] = None,
        order: Sequence[OrderTerm] = (),
        limit: Optional[int] = None,
        include: Optional[Sequence[Join]] = None
    ) -> List[Dict[str, Any]]:
        """Fetch rows matching ``where`` in ``order``.

        Raises:
            asyncpg.PostgresError: Database errors propagate unchanged
        """
        joins = self._joins(include)
        query, params = build_select_query(self.table, where, order, limit, joins)
        pool = await self._get_pool()

        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error listing {self.table}: {e}")
            raise

        logger.debug(f"Fetched {len(rows)} rows from {self.table}")
        return [self._to_record(row, joins) for row in rows]

    async def count(
        self,
        *,
        where: Optional[Predicate] = None,
        include: Optional[Sequence[Join]] = None
    ) -> int:
        """Count rows matching ``where``.

        Raises:
            asyncpg.PostgresError: Database errors propagate unchanged
        """
        query, params = build_count_query(self.table, where, self._joins(include))
        pool = await self._get_pool()

        try:
            async with pool.acquire() as conn:
                return await conn.fetchval(query, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error counting {self.table}: {e}")
            raise
