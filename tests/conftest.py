import threading
import zlib
from collections import Counter

import pytest

from fullreindex.backend import Page
from fullreindex.errors import ClusterConnectionError
from fullreindex.partition import CURSOR_MARK_START, ID_FIELD, PartitionQuery


def bucket(doc_id: str, worker_count: int) -> int:
    """Stable hash partition of an id, standing in for Solr's murmur3 hash."""
    return zlib.crc32(doc_id.encode("utf-8")) % worker_count


class FakeCollection:
    """In-memory collection with Solr-like hash filtering and cursor marks."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: dict[str, dict] = {}
        self.submitted: list[dict] = []
        self.commits = 0
        self.queries: list[tuple[int, str]] = []
        self.query_failures: dict[int, Exception] = {}
        self.write_failure: Exception | None = None
        self.commit_failure: Exception | None = None
        self._lock = threading.Lock()

    def seed(self, ids, version: bool = True) -> None:
        for i in ids:
            doc = {ID_FIELD: str(i), "title": f"doc {i}", "tags": ["a", "b"]}
            if version:
                doc["_version_"] = 1600000000000000000 + int(i)
            self.docs[str(i)] = doc

    @property
    def submitted_ids(self) -> Counter:
        return Counter(d[ID_FIELD] for d in self.submitted)

    def query(self, pq: PartitionQuery, cursor_mark: str) -> Page:
        with self._lock:
            self.queries.append((pq.worker_index, cursor_mark))
            failure = self.query_failures.get(pq.worker_index)
            ids = sorted(
                i for i in self.docs if bucket(i, pq.worker_count) == pq.worker_index
            )
        if failure is not None:
            raise failure
        if cursor_mark != CURSOR_MARK_START:
            last = cursor_mark.split(":", 1)[1]
            ids = [i for i in ids if i > last]
        page_ids = ids[:pq.rows]
        next_mark = f"id:{page_ids[-1]}" if page_ids else cursor_mark
        return Page(documents=[dict(self.docs[i]) for i in page_ids], next_cursor_mark=next_mark)

    def add(self, documents: list[dict]) -> None:
        if self.write_failure is not None:
            raise self.write_failure
        with self._lock:
            for doc in documents:
                self.submitted.append(doc)
                self.docs[doc[ID_FIELD]] = dict(doc)

    def commit(self) -> None:
        if self.commit_failure is not None:
            raise self.commit_failure
        with self._lock:
            self.commits += 1


class FakeBackend:
    """SearchBackend handle over a FakeCollection."""

    def __init__(self, collection: FakeCollection) -> None:
        self.collection = collection
        self.closed = False

    def query(self, partition_query, cursor_mark):
        return self.collection.query(partition_query, cursor_mark)

    def add(self, documents):
        self.collection.add(documents)

    def commit(self):
        self.collection.commit()

    def close(self):
        self.closed = True


class FakeCluster:
    """Backend factory over a set of in-memory collections."""

    def __init__(self, url: str = "http://solr.test:8983/solr") -> None:
        self.url = url
        self.collections: dict[str, FakeCollection] = {}
        self.opened: list[FakeBackend] = []
        self.open_calls: list[tuple[str, str]] = []

    def create(self, name: str) -> FakeCollection:
        self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def __call__(self, url: str, collection_name: str) -> FakeBackend:
        self.open_calls.append((url, collection_name))
        if url != self.url:
            raise ClusterConnectionError(f"Cannot reach {url}")
        if collection_name not in self.collections:
            raise ClusterConnectionError(f"Collection '{collection_name}' not found")
        backend = FakeBackend(self.collections[collection_name])
        self.opened.append(backend)
        return backend


@pytest.fixture
def cluster():
    """A fake cluster with 'source' holding ids 1..100 and an empty 'dest'."""
    c = FakeCluster()
    c.create("source").seed(range(1, 101))
    c.create("dest")
    return c

