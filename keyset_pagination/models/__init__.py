"""Pydantic models for keyset pagination."""

from .page import PageRequest, PageInfo, Edge, PageResult

__all__ = [
    "PageRequest",
    "PageInfo",
    "Edge",
    "PageResult"
]
