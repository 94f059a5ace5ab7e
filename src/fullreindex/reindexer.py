"""Coordinator: open backends, fan out partition workers, join, clean up."""

from __future__ import annotations

import logging
from concurrent.futures import ALL_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from fullreindex.backend import BackendFactory, SearchBackend
from fullreindex.config import ReindexConfig
from fullreindex.worker import PartitionWorker, WorkerResult, WorkerStatus

logger = logging.getLogger(__name__)


def _solr_factory(url: str, collection_name: str) -> SearchBackend:
    from fullreindex.backends.solr import SolrBackend
    return SolrBackend(url=url, collection_name=collection_name)


@dataclass
class ReindexReport:
    """Per-worker results of a completed run, ordered by worker index."""

    results: list[WorkerResult] = field(default_factory=list)

    @property
    def documents_copied(self) -> int:
        return sum(r.documents_copied for r in self.results)

    @property
    def failed(self) -> list[WorkerResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


class Reindexer:
    """Copies every document of the source collection into the destination."""

    def __init__(
        self,
        config: ReindexConfig,
        backend_factory: BackendFactory | None = None,
    ) -> None:
        self._config = config
        self._backend_factory = backend_factory or _solr_factory
        self._read: SearchBackend | None = None
        self._write: SearchBackend | None = None

    @property
    def config(self) -> ReindexConfig:
        return self._config

    @property
    def connected(self) -> bool:
        return self._read is not None

    def connect(self) -> None:
        """Open the read and write backends; a no-op when already connected.

        Raises ClusterConnectionError if either cannot be opened. A read
        backend opened before the failure is closed again.
        """
        if self.connected:
            return
        config = self._config
        read = self._backend_factory(config.cluster_address, config.source_collection)
        try:
            write = self._backend_factory(config.cluster_address, config.dest_collection)
        except Exception:
            read.close()
            raise
        self._read, self._write = read, write

    def close(self) -> None:
        read, write = self._read, self._write
        self._read = self._write = None
        try:
            if read is not None:
                read.close()
        finally:
            if write is not None:
                write.close()

    def run(self) -> ReindexReport:
        """Run all partition workers to completion, connecting first if needed.

        No worker is started when connecting fails. Worker failures never
        raise: they are reported in the returned ReindexReport. Both backends
        are closed when the run ends.
        """
        config = self._config
        self.connect()
        try:
            logger.info(
                "Reindexing '%s' into '%s' with %d workers",
                config.source_collection, config.dest_collection, config.worker_count,
            )
            report = self._fan_out(self._read, self._write)
        finally:
            self.close()

        for result in report.failed:
            logger.warning(
                "Worker[%d] did not finish its partition: %s",
                result.worker_index, result.reason,
            )
        logger.info(
            "Reindex complete: %d documents copied, %d/%d workers failed",
            report.documents_copied, len(report.failed), config.worker_count,
        )
        return report

    def _fan_out(self, read: SearchBackend, write: SearchBackend) -> ReindexReport:
        count = self._config.worker_count
        workers = [PartitionWorker(i, count, read, write) for i in range(count)]
        with ThreadPoolExecutor(max_workers=count, thread_name_prefix="reindex") as executor:
            futures = {executor.submit(w.run): w.worker_index for w in workers}
            wait(futures, return_when=ALL_COMPLETED)

        results: list[WorkerResult] = []
        for future, idx in futures.items():
            try:
                results.append(future.result())
            except Exception as exc:
                logger.exception("Worker[%d] crashed", idx)
                results.append(WorkerResult(
                    worker_index=idx,
                    status=WorkerStatus.PARTIAL_FAILURE,
                    reason=f"{type(exc).__name__}: {exc}",
                ))
        results.sort(key=lambda r: r.worker_index)
        return ReindexReport(results=results)


def reindex(config: ReindexConfig, backend_factory: BackendFactory | None = None) -> ReindexReport:
    """Convenience wrapper around Reindexer(config).run()."""
    return Reindexer(config, backend_factory=backend_factory).run()
