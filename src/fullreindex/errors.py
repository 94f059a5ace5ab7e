"""Exceptions raised by fullreindex."""

from __future__ import annotations


class ReindexError(Exception):
    """Base class for all reindex failures."""


class ConfigurationError(ReindexError, ValueError):
    """A required setting is missing or invalid."""


class ClusterConnectionError(ReindexError, ConnectionError):
    """The cluster could not be reached or the collection does not exist."""


class QueryError(ReindexError):
    """The engine rejected a page query."""


class WriteError(ReindexError):
    """The engine rejected a document submission."""


class CommitError(ReindexError):
    """The engine rejected a commit."""
