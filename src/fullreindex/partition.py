"""Hash partitioning and cursor pagination parameters for a partition worker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ID_FIELD = "id"
VERSION_FIELD = "_version_"
PAGE_SIZE = 50
CURSOR_MARK_START = "*"
MATCH_ALL = "*:*"


@dataclass(frozen=True)
class PartitionQuery:
    """Everything needed to fetch one page of a worker's partition, minus the cursor.

    The partition filter hashes ``partition_key`` into ``worker_count`` buckets
    and keeps bucket ``worker_index``. Pages are sorted ascending on the same
    field, which is what makes cursor marks stable over the partition.
    """

    worker_index: int
    worker_count: int
    rows: int = PAGE_SIZE
    query: str = MATCH_ALL
    partition_key: str = ID_FIELD

    def __post_init__(self) -> None:
        if not 0 <= self.worker_index < self.worker_count:
            raise ValueError(
                f"worker_index {self.worker_index} outside [0, {self.worker_count})"
            )

    @property
    def filter_query(self) -> str:
        return f"{{!hash workers={self.worker_count} worker={self.worker_index}}}"

    @property
    def sort(self) -> str:
        return f"{self.partition_key} asc"

    def params(self, cursor_mark: str) -> list[tuple[str, str]]:
        """Request parameters for the page starting at ``cursor_mark``.

        Returns a fresh list on every call.
        """
        return [
            ("q", self.query),
            ("fq", self.filter_query),
            ("partitionKeys", self.partition_key),
            ("sort", self.sort),
            ("rows", str(self.rows)),
            ("cursorMark", cursor_mark),
        ]


def partitions(worker_count: int) -> list[PartitionQuery]:
    """One query per worker, covering indices 0..worker_count-1."""
    return [PartitionQuery(worker_index=i, worker_count=worker_count) for i in range(worker_count)]


def strip_version(doc: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``doc`` without the engine-assigned version field."""
    return {k: v for k, v in doc.items() if k != VERSION_FIELD}
