"""Solr backend for fullreindex, speaking the JSON request handlers over HTTP."""

from __future__ import annotations

import logging
import threading
from typing import Any

import requests

from fullreindex.backend import Page
from fullreindex.errors import (
    ClusterConnectionError,
    CommitError,
    QueryError,
    WriteError,
)
from fullreindex.partition import MATCH_ALL, PartitionQuery

logger = logging.getLogger(__name__)


class SolrBackend:
    """SearchBackend implementation bound to one Solr collection.

    Each calling thread gets its own requests.Session, so worker threads never
    share a session or its connection pool.
    """

    def __init__(
        self,
        url: str,
        collection_name: str,
        timeout: float | None = None,
    ) -> None:
        self._collection = collection_name
        self._base = f"{url.rstrip('/')}/{collection_name}"
        self._timeout = timeout
        self._local = threading.local()
        self._sessions: list[requests.Session] = []
        self._lock = threading.Lock()
        try:
            self._check_collection()
        except ClusterConnectionError:
            self.close()
            raise

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def _session(self) -> requests.Session:
        """The calling thread's session, created on first use."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            with self._lock:
                self._sessions.append(session)
            self._local.session = session
        return session

    def _check_collection(self) -> None:
        params = [("q", MATCH_ALL), ("rows", "0"), ("wt", "json")]
        try:
            resp = self._session.get(
                f"{self._base}/select", params=params, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise ClusterConnectionError(
                f"Cannot reach collection '{self._collection}' at {self._base}: {exc}"
            ) from exc
        if not resp.ok:
            raise ClusterConnectionError(
                f"Collection '{self._collection}' unavailable at {self._base}: "
                f"HTTP {resp.status_code} {self._error_message(resp)}"
            )
        logger.info("Connected to collection '%s' at %s", self._collection, self._base)

    def query(self, partition_query: PartitionQuery, cursor_mark: str) -> Page:
        params = partition_query.params(cursor_mark)
        params.append(("wt", "json"))
        resp = self._send("get", "select", params=params)
        if not resp.ok:
            raise QueryError(
                f"Query on '{self._collection}' failed: "
                f"HTTP {resp.status_code} {self._error_message(resp)}"
            )
        try:
            body = resp.json()
            docs = body["response"]["docs"]
            next_cursor_mark = body["nextCursorMark"]
        except (ValueError, KeyError, TypeError) as exc:
            raise QueryError(
                f"Malformed query response from '{self._collection}': {exc}"
            ) from exc
        return Page(documents=docs, next_cursor_mark=next_cursor_mark)

    def add(self, documents: list[dict[str, Any]]) -> None:
        if not documents:
            return
        resp = self._send("post", "update", params=[("wt", "json")], json=documents)
        if not resp.ok:
            raise WriteError(
                f"Adding {len(documents)} documents to '{self._collection}' failed: "
                f"HTTP {resp.status_code} {self._error_message(resp)}"
            )

    def commit(self) -> None:
        resp = self._send(
            "post", "update", params=[("commit", "true"), ("wt", "json")], json={}
        )
        if not resp.ok:
            raise CommitError(
                f"Commit on '{self._collection}' failed: "
                f"HTTP {resp.status_code} {self._error_message(resp)}"
            )

    def close(self) -> None:
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    # --- internal helpers ---

    def _send(self, method: str, handler: str, **kwargs) -> requests.Response:
        """Issue one request; transport failures become ClusterConnectionError."""
        url = f"{self._base}/{handler}"
        try:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            raise ClusterConnectionError(f"{method.upper()} {url} failed: {exc}") from exc

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        """Pull Solr's error.msg out of a failed response, falling back to the body."""
        try:
            return resp.json()["error"]["msg"]
        except (ValueError, KeyError, TypeError):
            return resp.text[:200]
