"""Backend protocols for fullreindex search engine access."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from fullreindex.partition import PartitionQuery


@dataclass
class Page:
    """One page of a cursor-paginated query."""

    documents: list[dict[str, Any]] = field(default_factory=list)
    next_cursor_mark: str = ""


class SearchBackend(Protocol):
    """A client handle bound to a single collection.

    Implementations must tolerate concurrent calls from several worker threads.
    """

    def query(self, partition_query: PartitionQuery, cursor_mark: str) -> Page: ...

    def add(self, documents: list[dict[str, Any]]) -> None: ...

    def commit(self) -> None: ...

    def close(self) -> None: ...


# (cluster_address, collection_name) -> SearchBackend
BackendFactory = Callable[..., SearchBackend]
