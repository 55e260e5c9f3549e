"""Shared fixtures: an in-memory backend standing in for a git repository."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from logging import Logger
from typing import Dict, List, Optional, Tuple

import pytest

from utils.changelog_models import CommitRecord


class FakeBackend:
    """Serves canned tags and logs, recording every range query."""

    def __init__(self, tags: List[str], logs: Optional[Dict[Tuple[Optional[str], str], List[CommitRecord]]] = None):
        self.tags = list(tags)
        self.logs = dict(logs or {})
        self.queries: List[Tuple[Optional[str], str, int]] = []

    def list_tags(self) -> List[str]:
        return list(self.tags)

    def log_between(self, older, newer, limit):
        self.queries.append((older, newer, limit))
        return list(self.logs.get((older, newer), []))[:limit]


def commit(title, name='Jan Kowalski', email='jan@example.com', day=1, month=1, year=2020, sha=None) -> CommitRecord:
    return CommitRecord(
        title=title,
        name=name,
        email=email,
        date=datetime(year, month, day, 12, 0, tzinfo=timezone.utc),
        sha=sha,
    )


@pytest.fixture
def make_backend():
    return FakeBackend


@pytest.fixture
def make_commit():
    return commit


@pytest.fixture(autouse=True)
def _restore_root_logger() -> None:
    root: Logger = logging.getLogger()
    old_level = root.level
    old_handlers = list(root.handlers)
    try:
        yield
    finally:
        root.setLevel(old_level)
        for h in list(root.handlers):
            if h not in old_handlers:
                root.removeHandler(h)
