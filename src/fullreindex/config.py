"""Run configuration for fullreindex."""

from __future__ import annotations

import os
from dataclasses import dataclass

from fullreindex.errors import ConfigurationError


def default_worker_count() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class ReindexConfig:
    """Settings for one reindex run, built once at startup.

    Validated on construction, so an instance always describes a runnable job.
    """

    source_collection: str
    dest_collection: str
    cluster_address: str
    worker_count: int = 1

    def __post_init__(self) -> None:
        for name in ("source_collection", "dest_collection", "cluster_address"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{name} must be a non-empty string")
        if isinstance(self.worker_count, bool) or not isinstance(self.worker_count, int):
            raise ConfigurationError(
                f"worker_count must be an integer, got {self.worker_count!r}"
            )
        if self.worker_count < 1:
            raise ConfigurationError(
                f"worker_count must be at least 1, got {self.worker_count}"
            )

    @property
    def label(self) -> str:
        return f"{self.source_collection} -> {self.dest_collection}"
