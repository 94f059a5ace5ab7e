"""Copy one hash partition of the source collection to the destination."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from fullreindex.backend import SearchBackend
from fullreindex.errors import ReindexError
from fullreindex.partition import CURSOR_MARK_START, PartitionQuery, strip_version

logger = logging.getLogger(__name__)


class WorkerStatus(enum.Enum):
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"


@dataclass
class WorkerResult:
    """Outcome of one partition worker.

    A partial failure means the worker stopped early. Documents it had
    already submitted stay in the destination, and its commit may not have
    been issued.
    """

    worker_index: int
    status: WorkerStatus = WorkerStatus.SUCCESS
    documents_copied: int = 0
    pages_fetched: int = 0
    committed: bool = False
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is WorkerStatus.SUCCESS


class PartitionWorker:
    """Streams one partition page by page and re-submits every document.

    The backends are borrowed from the coordinator and never closed here.
    """

    def __init__(
        self,
        worker_index: int,
        worker_count: int,
        read: SearchBackend,
        write: SearchBackend,
    ) -> None:
        self._query = PartitionQuery(worker_index=worker_index, worker_count=worker_count)
        self._read = read
        self._write = write

    @property
    def worker_index(self) -> int:
        return self._query.worker_index

    def run(self) -> WorkerResult:
        """Copy the partition, then commit once. Never raises ReindexError."""
        idx = self.worker_index
        result = WorkerResult(worker_index=idx)
        try:
            self._copy(result)
            self._write.commit()
            result.committed = True
        except ReindexError as exc:
            logger.exception("Worker[%d]: aborting after %d documents", idx, result.documents_copied)
            result.status = WorkerStatus.PARTIAL_FAILURE
            result.reason = f"{type(exc).__name__}: {exc}"
            return result

        logger.info(
            "Worker[%d]: copied %d documents in %d pages",
            idx, result.documents_copied, result.pages_fetched,
        )
        return result

    def _copy(self, result: WorkerResult) -> None:
        idx = self.worker_index
        cursor_mark = CURSOR_MARK_START
        while True:
            page = self._read.query(self._query, cursor_mark)
            result.pages_fetched += 1

            batch = []
            for doc in page.documents:
                logger.debug("Worker[%d]: %s", idx, doc)
                batch.append(strip_version(doc))
            if batch:
                self._write.add(batch)
                result.documents_copied += len(batch)

            # A cursor that did not move means the partition is exhausted
            if page.next_cursor_mark == cursor_mark:
                return
            cursor_mark = page.next_cursor_mark

