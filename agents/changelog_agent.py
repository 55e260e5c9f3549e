#!/usr/bin/env python3
"""Changelog agent for Keep a Changelog release histories.

This agent reads the tags and commit log of a git repository, classifies the
commits of every release interval and renders the result as Markdown.
"""

import json
import logging
import sys
from typing import Dict, List, Optional

from pydantic import ValidationError

from cache.cache_backend import CacheBackend, repository_key
from clients.git_client import ChangelogBackend, GitBackendError, GitClient
from configs.config import Config
from utils.changelog_models import ChangelogSettings, ReleaseRecord
from utils.classifier import MessageClassifier, PrefixSpec
from utils.diff_provider import RevisionDiffProvider
from utils.markdown_renderer import render_markdown
from utils.release_aggregator import MalformedLogEntry, ReleaseAggregator
from utils.tag_selector import SortingError, TagSelector

# Set up logging
logger = logging.getLogger(__name__)


class ChangelogAgent:
	"""Agent wiring tag selection, diff retrieval, classification and rendering."""

	def __init__(
		self,
		repository_path: str,
		backend: Optional[ChangelogBackend] = None,
		cache: Optional[CacheBackend] = None,
		settings: Optional[ChangelogSettings] = None,
		use_cache: Optional[bool] = None,
	):
		"""Initialize the changelog agent and load the cache for the repository.

		Args:
			repository_path: Path to the git repository
			backend: Optional backend. If None, opens the repository with GitClient.
			cache: Optional CacheBackend. If None, one is created under Config.CACHE_ROOT.
			settings: Optional ChangelogSettings. If None, read from Config.
			use_cache: Force the cache on or off; defaults to Config.CACHE_ENABLED.

		Raises:
			GitBackendError: If the repository cannot be opened
		"""
		self.repository_path = repository_path
		self.settings = settings or ChangelogSettings.from_config()
		self.backend = backend if backend is not None else GitClient(repository_path)

		if use_cache is None:
			use_cache = cache is not None or Config.get_cache_config()["enabled"]
		if not use_cache:
			cache = None
		elif cache is None:
			cache = CacheBackend()

		self.classifier = MessageClassifier()
		self.tag_selector = TagSelector(self.backend)
		self.diff_provider = RevisionDiffProvider(
			self.backend,
			repository_path,
			cache=cache,
			log_limit=self.settings.log_limit,
		)
		self.aggregator = ReleaseAggregator(self.diff_provider, self.classifier, self.settings)
		self.diff_provider.load()
		logger.info(f"Changelog agent initialized for {repository_path}")

	def set_generate_unreleased(self, generate: bool = True) -> None:
		self.settings.generate_unreleased = bool(generate)

	def set_tag_pattern(self, pattern: str) -> None:
		"""Set the tag pattern, e.g. `2.[0-9]{1,2}.[0-9]{1,3}`."""
		self.settings.tag_pattern = pattern

	def set_date_format_pattern(self, pattern: str) -> None:
		self.settings.date_format = pattern

	def set_version(self, version: str) -> None:
		"""Set the version currently on production."""
		self.settings.production_version = version

	def get_version(self) -> str:
		return self.settings.production_version

	def set_retain_author_metadata(self, retain: bool = True) -> None:
		self.settings.retain_author_metadata = bool(retain)

	def set_prefix_for(self, prefixes: PrefixSpec) -> None:
		"""Add category prefixes (case sensitive category names, e.g. `Fixed`)."""
		self.classifier.set_prefix_for(prefixes)

	def get_raw_data(self) -> List[ReleaseRecord]:
		"""Build release records for every tag interval and write the cache back.

		Raises:
			SortingError: If tags cannot be sorted
			MalformedLogEntry: If a commit has no title
			GitBackendError: If the backend query fails
		"""
		tags = self.tag_selector.list_tags(self.settings.tag_pattern, self.settings.generate_unreleased)
		releases = self.aggregator.build_releases(tags)
		self.diff_provider.save()
		logger.info(f"✓ Changelog data ready: {len(releases)} releases, "
				   f"{self.diff_provider.backend_queries} backend queries")
		return releases

	def render(self) -> str:
		"""Return the full Markdown changelog."""
		return render_markdown(self.get_raw_data(), self.settings.production_version)


def parse_prefix_args(values: List[str]) -> Dict[str, List[str]]:
	"""Parse repeated `Category=Prefix` arguments into a prefix mapping.

	Raises:
		ValueError: If an argument has no `=` or an empty side
	"""
	prefixes: Dict[str, List[str]] = {}
	for raw in values or []:
		category, sep, prefix = raw.partition("=")
		category, prefix = category.strip(), prefix.strip()
		if not sep or not category or not prefix:
			raise ValueError(f"Expected Category=Prefix, got {raw!r}")
		prefixes.setdefault(category, []).append(prefix)
	return prefixes


def main():
	"""CLI entry point for the changelog agent."""
	import argparse

	parser = argparse.ArgumentParser(
		description="Changelog Agent - Generate a Keep a Changelog history from git tags",
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Examples:
  python -m agents.changelog_agent /path/to/repo
  python -m agents.changelog_agent /path/to/repo --unreleased --production-version 1.4.0
  python -m agents.changelog_agent . --prefix Fixed=poprawka --prefix Added=add -o CHANGELOG.md
		"""
	)
	parser.add_argument("repository", help="Path to the git repository")
	parser.add_argument("--unreleased", action="store_true", default=None, help="Generate the Unreleased section")
	parser.add_argument("--tag-pattern", help="Regex matched at the start of tag names")
	parser.add_argument("--date-format", help="strftime pattern for release dates")
	parser.add_argument("--production-version", help="Tag to mark as on production")
	parser.add_argument("--prefix", action="append", default=[], metavar="CATEGORY=PREFIX",
						help="Extra classification prefix (repeatable)")
	parser.add_argument("--no-authors", action="store_true", help="Drop author metadata from entries")
	parser.add_argument("--include-initial", action="store_true", default=None,
						help="Also emit the full history of the oldest tag")
	parser.add_argument("--no-cache", action="store_true", help="Do not read or write the commit cache")
	parser.add_argument("--clear-cache", action="store_true", help="Drop the cached commit log of the repository before running")
	parser.add_argument("--output", "-o", help="Write to this file instead of stdout")
	parser.add_argument("--json", action="store_true", help="Output release records as JSON")
	parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

	args = parser.parse_args()

	# Set up logging
	log_level = logging.DEBUG if args.verbose else logging.INFO
	logging.basicConfig(
		level=log_level,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)
	if not args.verbose:
		logging.getLogger("git").setLevel(logging.WARNING)

	try:
		prefixes = parse_prefix_args(args.prefix)
	except ValueError as e:
		parser.error(str(e))

	try:
		settings = ChangelogSettings.from_config()
		if args.unreleased:
			settings.generate_unreleased = True
		if args.tag_pattern:
			settings.tag_pattern = args.tag_pattern
		if args.date_format:
			settings.date_format = args.date_format
		if args.production_version is not None:
			settings.production_version = args.production_version
		if args.no_authors:
			settings.retain_author_metadata = False
		if args.include_initial:
			settings.include_initial = True

		if args.clear_cache:
			CacheBackend().invalidate(repository_key(args.repository))
			logger.info(f"Cleared commit cache for {args.repository}")
		agent = ChangelogAgent(args.repository, settings=settings, use_cache=False if args.no_cache else None)
		if prefixes:
			agent.set_prefix_for(prefixes)

		if args.json:
			releases = agent.get_raw_data()
			output = json.dumps([r.model_dump(mode="json") for r in releases], indent=2) + "\n"
		else:
			output = agent.render()

		if args.output:
			with open(args.output, "w", encoding="utf-8") as f:
				f.write(output)
			logger.info(f"✓ Changelog written to {args.output}")
		else:
			sys.stdout.write(output)
	except (SortingError, MalformedLogEntry, GitBackendError) as e:
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)
	except ValidationError as e:
		print(f"Error: Invalid configuration: {e}", file=sys.stderr)
		sys.exit(1)
	except OSError as e:
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)


if __name__ == "__main__":
	main()
