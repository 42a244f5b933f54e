"""Data-store adapters for keyset pagination."""

from .connection import DatabaseManager, db_manager, get_db_pool
from .sql import (
    Join,
    quote_identifier,
    compile_predicate,
    compile_order,
    build_select_query,
    build_count_query
)
from .table import AsyncpgTable

__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db_pool",
    "Join",
    "quote_identifier",
    "compile_predicate",
    "compile_order",
    "build_select_query",
    "build_count_query",
    "AsyncpgTable"
]
