#!/usr/bin/env python3
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import git
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from configs.config import Config
from utils.changelog_models import CommitRecord

logger = logging.getLogger(__name__)


class GitBackendError(Exception):
	def __init__(self, message: str, code: str = "GIT") -> None:
		super().__init__(message)
		self.code = code


class ChangelogBackend(Protocol):
	def list_tags(self) -> List[str]:
		...

	def log_between(self, older: Optional[str], newer: str, limit: int) -> List[CommitRecord]:
		...


class GitClient:
	"""Local git repository access through GitPython."""

	def __init__(self, repository_path: str) -> None:
		self.repository_path = repository_path
		try:
			self._repo = git.Repo(repository_path)
		except NoSuchPathError as e:
			raise GitBackendError(f"Repository path does not exist: {repository_path}", code="NOT_FOUND") from e
		except InvalidGitRepositoryError as e:
			raise GitBackendError(f"Not a git repository: {repository_path}", code="NOT_FOUND") from e
		logger.info(f"Git client opened {repository_path}")

	def list_tags(self) -> List[str]:
		return [tag.name for tag in self._repo.tags]

	def log_between(self, older: Optional[str], newer: str, limit: Optional[int] = None) -> List[CommitRecord]:
		rev = f"{older}..{newer}" if older else newer
		limit = int(limit if limit is not None else Config.GIT_LOG_LIMIT)
		try:
			commits = list(self._repo.iter_commits(rev, max_count=limit))
		except GitCommandError as e:
			stderr = (e.stderr or "").lower()
			if "unknown revision" in stderr or "bad revision" in stderr or "ambiguous argument" in stderr:
				raise GitBackendError(f"Unknown revision in range {rev}", code="INVALID_REF") from e
			raise GitBackendError(f"git log {rev} failed: {e}", code="GIT") from e

		return [
			CommitRecord(
				title=commit.summary,
				name=commit.author.name or "",
				email=commit.author.email or "",
				date=commit.committed_datetime,
				sha=commit.hexsha,
			)
			for commit in commits
		]
