#!/usr/bin/env python3
"""Commit log retrieval between two revisions, backed by a per-repository cache.

The cache is read once, on first use, and written back once by `save()` with
every interval visited since, replacing whatever was stored before.
"""

import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from cache.cache_backend import CacheBackend, repository_key
from .changelog_models import CommitRecord, MalformedLogEntry, UNRELEASED_TAG

logger = logging.getLogger(__name__)


def interval_key(older: Optional[str], newer: str) -> str:
    return f"{older or ''}..{newer}"


class RevisionDiffProvider:
    def __init__(
        self,
        backend,
        repository_path: str,
        cache: Optional[CacheBackend] = None,
        log_limit: int = 1000,
    ) -> None:
        self.backend = backend
        self.cache = cache
        self.cache_key = repository_key(repository_path)
        self.log_limit = int(log_limit)
        self.backend_queries = 0
        self._cached: Dict[str, List[CommitRecord]] = {}
        self._visited: Dict[str, List[CommitRecord]] = {}
        self._loaded = False

    def load(self) -> None:
        """Read the cached intervals for this repository; a bad cache counts as empty."""
        if self._loaded:
            return
        self._loaded = True
        if self.cache is None:
            return

        raw = self.cache.load(self.cache_key) or {}
        for key, records in raw.items():
            try:
                self._cached[key] = [CommitRecord.model_validate(r) for r in records]
            except (ValidationError, TypeError) as e:
                logger.warning(f"Dropping malformed cache entry {key!r}: {e}")
        logger.info(f"Loaded {len(self._cached)} cached intervals for {self.cache_key}")

    def get_diff(self, older: Optional[str], newer: str) -> List[CommitRecord]:
        """Return commits reachable from `newer` but not from `older`.

        Args:
            older: Older endpoint, or None for the whole history of `newer`
            newer: Newer endpoint (a tag, or HEAD)

        Returns:
            Commit records, newest first, capped at `log_limit`
        """
        self.load()
        key = interval_key(older, newer)

        if key in self._cached:
            commits = self._cached[key]
            logger.debug(f"Cache hit for {key}: {len(commits)} commits")
        else:
            raw = self.backend.log_between(older, newer, self.log_limit)
            self.backend_queries += 1
            try:
                commits = [c if isinstance(c, CommitRecord) else CommitRecord.model_validate(c) for c in raw]
            except ValidationError as e:
                raise MalformedLogEntry(f"Unreadable log entry in {key}: {e}") from e
            logger.debug(f"✓ Fetched {len(commits)} commits for {key}")

        # HEAD moves between runs
        if newer != UNRELEASED_TAG:
            self._visited[key] = commits
        return commits

    def save(self) -> None:
        """Replace the stored cache with the intervals visited since the last save."""
        if self.cache is None:
            return
        payload = {
            key: [c.model_dump(mode="json") for c in commits]
            for key, commits in self._visited.items()
        }
        self.cache.save(self.cache_key, payload)
        logger.info(f"Saved {len(payload)} intervals to cache {self.cache_key}")
        self._cached = dict(self._visited)
        self._visited = {}
