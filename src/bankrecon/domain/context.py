"""Service context holding the record store, settings and read caches."""

import time
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Callable, Generic, Optional, TypeVar

from bankrecon.config import Settings
from bankrecon.domain.entities import NameMapping
from bankrecon.domain.errors import PersistenceFailure
from bankrecon.logging_config import get_logger

if TYPE_CHECKING:
    # The record store imports domain entities; avoid the cycle at runtime
    from bankrecon.database.base import Database

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CachedValue(Generic[T]):
    """A fetched value with the time it was fetched and how long it stays fresh."""

    data: T
    fetched_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.fetched_at < self.ttl

    def expired(self) -> "CachedValue[T]":
        """Return a copy that is no longer fresh but still usable as a fallback."""
        return replace(self, fetched_at=float("-inf"))


@dataclass
class ReconContext:
    """Everything the domain services share.

    Services receive the context instead of reaching for module-level state, so
    two contexts (e.g. two test databases) never see each other's caches.
    """

    db: "Database"
    settings: Settings = field(default_factory=Settings)
    clock: Callable[[], float] = time.monotonic
    _mappings: Optional[CachedValue[tuple[NameMapping, ...]]] = field(default=None, repr=False)
    _directory: Optional[CachedValue[tuple[str, ...]]] = field(default=None, repr=False)

    def get_mappings(self) -> tuple[NameMapping, ...]:
        """Return learned mappings, refetching when the cache is stale.

        A failed refetch falls back to stale data when there is any.
        """
        self._mappings = self._refresh(
            self._mappings, self.db.list_mappings, self.settings.mapping_cache_ttl, "mappings"
        )
        return self._mappings.data

    def get_directory(self) -> tuple[str, ...]:
        """Return directory names in directory order, cached."""
        self._directory = self._refresh(
            self._directory,
            self.db.list_directory_names,
            self.settings.directory_cache_ttl,
            "directory",
        )
        return self._directory.data

    def invalidate_mappings(self) -> None:
        if self._mappings is not None:
            self._mappings = self._mappings.expired()

    def invalidate_directory(self) -> None:
        if self._directory is not None:
            self._directory = self._directory.expired()

    def _refresh(self, cached, fetch, ttl: float, label: str):
        now = self.clock()
        if cached is not None and cached.is_fresh(now):
            return cached
        try:
            data = tuple(fetch())
        except PersistenceFailure:
            if cached is None:
                raise
            logger.warning("Could not refresh %s cache; serving stale copy", label)
            return cached
        return CachedValue(data=data, fetched_at=now, ttl=ttl)
