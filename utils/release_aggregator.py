#!/usr/bin/env python3
"""Release aggregation: one record per consecutive tag interval.

Tags arrive newest first. Each distinct consecutive pair becomes an interval
whose commits are classified, deduplicated and sorted per category.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from .changelog_models import (
    ChangeEntry, ChangelogSettings, CommitRecord, Category, MalformedLogEntry, ReleaseRecord, UNRELEASED_TAG
)
from .classifier import MessageClassifier
from .diff_provider import RevisionDiffProvider

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ucfirst(text: str) -> str:
    return text[:1].upper() + text[1:]


def release_date(commits: Iterable[CommitRecord], date_format: str) -> str:
    """Format the newest commit timestamp; the epoch when there is none.

    Naive timestamps are taken as UTC and the result is rendered in UTC.
    """
    latest = EPOCH
    for commit in commits:
        if commit.date is None:
            continue
        stamp = commit.date if commit.date.tzinfo else commit.date.replace(tzinfo=timezone.utc)
        if stamp > latest:
            latest = stamp
    return latest.astimezone(timezone.utc).strftime(date_format)


class ReleaseAggregator:
    def __init__(
        self,
        provider: RevisionDiffProvider,
        classifier: MessageClassifier,
        settings: ChangelogSettings,
    ) -> None:
        self.provider = provider
        self.classifier = classifier
        self.settings = settings

    def build_groups(self, commits: List[CommitRecord]) -> Dict[Category, List[ChangeEntry]]:
        """Classify commits into categories.

        Categories keep the order in which they were first seen; entries inside
        a category are unique and sorted.

        Raises:
            MalformedLogEntry: If a commit has no title
        """
        retain = self.settings.retain_author_metadata
        groups: Dict[Category, Dict[Tuple[str, str, str], ChangeEntry]] = {}
        for commit in commits:
            if not commit.title:
                raise MalformedLogEntry(
                    f"Log message hasn't got `title` field (commit {commit.sha or 'unknown'})"
                )
            category = self.classifier.classify(commit.title)
            entry = ChangeEntry(
                message=ucfirst(commit.title),
                user=commit.name if retain else None,
                email=commit.email if retain else None,
            )
            groups.setdefault(category, {}).setdefault(entry.sort_key(), entry)

        return {
            category: sorted(entries.values(), key=ChangeEntry.sort_key)
            for category, entries in groups.items()
        }

    def build_release(self, older: Optional[str], newer: str) -> ReleaseRecord:
        commits = self.provider.get_diff(older, newer)
        record = ReleaseRecord(
            tag=newer,
            date=release_date(commits, self.settings.date_format),
            groups=self.build_groups(commits),
        )
        logger.debug(f"✓ Aggregated {older or '(root)'}..{newer}: {len(commits)} commits, "
                     f"{len(record.groups)} categories")
        return record

    def build_releases(self, tags: List[str]) -> List[ReleaseRecord]:
        """Build release records for consecutive tag pairs, newest interval first."""
        releases: List[ReleaseRecord] = []
        newer: Optional[str] = None
        for tag in tags:
            if newer is None:
                newer = tag
                continue
            if tag != newer:
                releases.append(self.build_release(tag, newer))
            newer = tag

        if self.settings.include_initial and newer is not None and newer != UNRELEASED_TAG:
            releases.append(self.build_release(None, newer))

        logger.info(f"Built {len(releases)} releases from {len(tags)} tags")
        return releases
