"""Pydantic models for page requests and results."""

from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class PageRequest(BaseModel):
    """Arguments of a single pagination call."""

    limit: Optional[int] = Field(default=None, description="Maximum number of rows in the page")
    after: Optional[str] = Field(default=None, description="Return rows strictly after this cursor")
    before: Optional[str] = Field(default=None, description="Return rows strictly before this cursor")
    order: Any = Field(default=None, description="Order specification, normalized before use")
    where: Any = Field(default=None, description="Caller filter ANDed with the keyset predicate")
    options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Pass-through options forwarded to the data store (e.g. joins)"
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def backward(self) -> bool:
        """Whether the request walks backward from a ``before`` cursor."""
        return self.before is not None and self.after is None


class PageInfo(BaseModel):
    """Relay-style page metadata."""

    has_next_page: bool = Field(description="Whether rows exist after this page")
    has_previous_page: bool = Field(description="Whether rows exist before this page")
    start_cursor: Optional[str] = Field(default=None, description="Cursor of the first edge")
    end_cursor: Optional[str] = Field(default=None, description="Cursor of the last edge")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Edge(BaseModel):
    """A record together with the cursor pointing at it."""

    node: Any = Field(description="The record as returned by the data store")
    cursor: str = Field(description="Opaque cursor for this record")

    model_config = ConfigDict(arbitrary_types_allowed=True)


class PageResult(BaseModel):
    """A page of records with navigation metadata."""

    edges: List[Edge] = Field(description="Records in display order")
    page_info: PageInfo = Field(description="Navigation metadata")
    total_count: int = Field(description="Rows matching the caller filter, ignoring cursors")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def nodes(self) -> List[Any]:
        return [edge.node for edge in self.edges]
