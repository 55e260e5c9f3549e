#!/usr/bin/env python3
"""Pydantic models for changelog data structures.

This module defines the commit records handed over by the git backend, the
change entries and release records produced by aggregation, and the per-run
settings that drive the engine.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from configs.config import Config


UNRELEASED_TAG = "HEAD"


class Category(str, Enum):
    """Keep a Changelog change categories, in declaration order."""
    CHANGED = "Changed"
    ADDED = "Added"
    DEPRECATED = "Deprecated"
    REMOVED = "Removed"
    FIXED = "Fixed"
    SECURITY = "Security"
    MERGED = "Merged"


DEFAULT_CATEGORY = Category.CHANGED


class MalformedLogEntry(Exception):
    """Raised when a commit record has no title to classify or cannot be read."""
    def __init__(self, message: str, code: str = "MALFORMED") -> None:
        super().__init__(message)
        self.code = code


class CommitRecord(BaseModel):
    """One git log entry between two revisions."""

    title: Optional[str] = Field(None, description="First line of the commit message")
    name: str = Field("", description="Author name")
    email: str = Field("", description="Author email")
    date: Optional[datetime] = Field(None, description="Commit timestamp")
    sha: Optional[str] = Field(None, description="Commit SHA")

    model_config = ConfigDict(extra="ignore", frozen=True)


class ChangeEntry(BaseModel):
    """A single rendered line under a category heading."""

    message: str = Field(..., description="Commit title with its first letter capitalized")
    user: Optional[str] = Field(None, description="Author name, when author metadata is retained")
    email: Optional[str] = Field(None, description="Author email, when author metadata is retained")

    model_config = ConfigDict(frozen=True)

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.message, self.user or "", self.email or "")


class ReleaseRecord(BaseModel):
    """Aggregated changes for one tag-to-tag interval."""

    tag: str = Field(..., description="Newer tag of the interval, or HEAD")
    date: str = Field(..., description="Formatted release date")
    groups: Dict[Category, List[ChangeEntry]] = Field(
        default_factory=dict,
        description="Change entries per category, in first-seen category order"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def is_unreleased(self) -> bool:
        return self.tag == UNRELEASED_TAG

    @property
    def is_empty(self) -> bool:
        return not any(self.groups.values())


class ChangelogSettings(BaseModel):
    """Per-run engine configuration."""

    tag_pattern: str = Field(Config.CHANGELOG_TAG_PATTERN, description="Regex matched at the start of tag names")
    generate_unreleased: bool = Field(Config.CHANGELOG_GENERATE_UNRELEASED, description="Append the HEAD interval")
    date_format: str = Field(Config.CHANGELOG_DATE_FORMAT, description="strftime pattern for release dates")
    production_version: str = Field(Config.CHANGELOG_PRODUCTION_VERSION, description="Tag marked as running on production")
    retain_author_metadata: bool = Field(Config.CHANGELOG_RETAIN_AUTHORS, description="Keep author name/email on entries")
    include_initial: bool = Field(Config.CHANGELOG_INCLUDE_INITIAL, description="Emit a release for the oldest tag's full history")
    log_limit: int = Field(Config.GIT_LOG_LIMIT, ge=1, description="Maximum commits fetched per interval")

    model_config = ConfigDict(validate_assignment=True, validate_default=True)

    @field_validator("production_version")
    @classmethod
    def _strip_version(cls, value: str) -> str:
        return (value or "").strip()

    @field_validator("tag_pattern")
    @classmethod
    def _compile_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid tag pattern {value!r}: {e}")
        return value

    @classmethod
    def from_config(cls) -> "ChangelogSettings":
        """Create settings from the environment-backed Config."""
        return cls(**Config.get_changelog_config())
