"""
Snapshot cache with per-surface freshness policies.

Each query surface (the catalogue listing and the random sampler) reads
the inventory through its own cache key, and each key has a
``FreshnessPolicy``:

* younger than ``max_age``: served as is, no upstream call;
* older, but within ``max_age + stale_while_revalidate``: served as is
  while one background refresh is started;
* older still, or invalidated by tag: the caller waits for a
  synchronous refresh.

Snapshots are immutable and an entry is replaced by a single dict
assignment, so a reader sees either the previous snapshot or the new
one, never a mix. Concurrent refreshes of the same key may race; the
last one to finish wins.

When a synchronous refresh fails the error propagates to the caller
even if an expired snapshot is still held. Serving last-known-good data
past the grace period is deliberately not done.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Set, Tuple

from .schemas import Snapshot

logger = logging.getLogger(__name__)

Loader = Callable[[], Snapshot]
Spawner = Callable[[Callable[[], None], str], None]


@dataclass(frozen=True)
class FreshnessPolicy:
    max_age: int
    stale_while_revalidate: int
    tag: str

    @property
    def cache_control(self) -> str:
        return (
            f"public, s-maxage={self.max_age}, "
            f"stale-while-revalidate={self.stale_while_revalidate}"
        )

    @property
    def cdn_cache_control(self) -> str:
        return f"public, s-maxage={self.max_age}"


CATALOG_KEY = "catalog"
RANDOM_KEY = "random"

CATALOG_POLICY = FreshnessPolicy(max_age=3600, stale_while_revalidate=1800, tag="books-data")
RANDOM_POLICY = FreshnessPolicy(max_age=1800, stale_while_revalidate=900, tag="books-random")

DEFAULT_POLICIES: Dict[str, FreshnessPolicy] = {
    CATALOG_KEY: CATALOG_POLICY,
    RANDOM_KEY: RANDOM_POLICY,
}


@dataclass(frozen=True)
class _Entry:
    snapshot: Snapshot
    stored_at: float
    invalidated: bool = False


def _spawn_thread(target: Callable[[], None], name: str) -> None:
    threading.Thread(target=target, name=name, daemon=True).start()


class SnapshotCache:
    """Holds the latest snapshot per key and brokers refreshes.

    Parameters
    ----------
    loader : Callable[[], Snapshot]
        Produces a fresh snapshot, raising on fetch or parse failure.
    policies : Dict[str, FreshnessPolicy]
        Freshness policy for every key that may be read.
    clock : Callable[[], float]
        Monotonic seconds; injectable for tests.
    spawn : Callable
        Runs a background refresh. Defaults to a daemon thread.
    """

    def __init__(
        self,
        loader: Loader,
        policies: Optional[Dict[str, FreshnessPolicy]] = None,
        clock: Callable[[], float] = time.monotonic,
        spawn: Spawner = _spawn_thread,
    ) -> None:
        self._loader = loader
        self._policies = dict(policies or DEFAULT_POLICIES)
        self._clock = clock
        self._spawn = spawn
        self._lock = threading.Lock()
        self._entries: Dict[str, _Entry] = {}
        self._refreshing: Set[str] = set()
        # bumped by invalidate(); a refresh that straddles a bump publishes invalidated
        self._generations: Dict[str, int] = {}

    def policy(self, key: str) -> FreshnessPolicy:
        try:
            return self._policies[key]
        except KeyError:
            raise KeyError(f"No freshness policy registered for {key!r}") from None

    def get(self, key: str) -> Tuple[Snapshot, float]:
        """Return ``(snapshot, age_in_seconds)`` for ``key``.

        Raises whatever the loader raises when a synchronous refresh is
        needed and fails.
        """
        policy = self.policy(key)
        entry = self._entries.get(key)
        if entry is not None and not entry.invalidated:
            age = self._clock() - entry.stored_at
            if age < policy.max_age:
                logger.debug("Cache hit for %s (age %.0fs)", key, age)
                return entry.snapshot, age
            if age < policy.max_age + policy.stale_while_revalidate:
                logger.info("Serving stale %s snapshot (age %.0fs), revalidating", key, age)
                self._refresh_in_background(key)
                return entry.snapshot, age
            logger.info("Cached %s snapshot expired (age %.0fs)", key, age)
        elif entry is not None:
            logger.info("Cached %s snapshot was invalidated", key)

        return self.refresh(key), 0.0

    def refresh(self, key: str) -> Snapshot:
        """Load a new snapshot for ``key`` and publish it."""
        self.policy(key)
        with self._lock:
            generation = self._generations.get(key, 0)
        snapshot = self._loader()
        with self._lock:
            stale = self._generations.get(key, 0) != generation
            self._entries[key] = _Entry(
                snapshot=snapshot, stored_at=self._clock(), invalidated=stale
            )
        logger.info("Published %s snapshot with %d records", key, len(snapshot.records))
        if stale:
            logger.info("%s was invalidated during the refresh, next read reloads", key)
        return snapshot

    def invalidate(self, tag: str) -> bool:
        """Force the next read of every key tagged ``tag`` to refresh.

        Returns ``False`` when no policy carries that tag.
        """
        keys = [key for key, policy in self._policies.items() if policy.tag == tag]
        if not keys:
            logger.warning("Invalidation requested for unknown tag %r", tag)
            return False
        with self._lock:
            for key in keys:
                self._generations[key] = self._generations.get(key, 0) + 1
                entry = self._entries.get(key)
                if entry is not None:
                    self._entries[key] = replace(entry, invalidated=True)
        logger.info("Invalidated tag %r (%s)", tag, ", ".join(keys))
        return True

    def _refresh_in_background(self, key: str) -> None:
        with self._lock:
            if key in self._refreshing:
                return
            self._refreshing.add(key)

        def run() -> None:
            try:
                self.refresh(key)
            except Exception:
                logger.exception("Background refresh of %s failed, keeping stale snapshot", key)
            finally:
                with self._lock:
                    self._refreshing.discard(key)

        self._spawn(run, f"snapshot-refresh-{key}")
