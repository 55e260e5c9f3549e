import os
import tempfile
from typing import Dict, Any

from dotenv import load_dotenv

load_dotenv()


class Config:
	"""Configuration for the changelog agent."""

	# Tag selection
	CHANGELOG_TAG_PATTERN = os.getenv("CHANGELOG_TAG_PATTERN", "[v]?[0-9]{1,3}.[0-9]{1,3}.?[0-9]{0,3}")
	CHANGELOG_GENERATE_UNRELEASED = bool(int(os.getenv("CHANGELOG_GENERATE_UNRELEASED", "0")))
	CHANGELOG_INCLUDE_INITIAL = bool(int(os.getenv("CHANGELOG_INCLUDE_INITIAL", "0")))

	# Rendering
	CHANGELOG_DATE_FORMAT = os.getenv("CHANGELOG_DATE_FORMAT", "%Y-%m-%d")
	CHANGELOG_PRODUCTION_VERSION = os.getenv("CHANGELOG_PRODUCTION_VERSION", "")
	CHANGELOG_RETAIN_AUTHORS = bool(int(os.getenv("CHANGELOG_RETAIN_AUTHORS", "1")))

	# Git backend
	GIT_LOG_LIMIT = int(os.getenv("GIT_LOG_LIMIT", "1000"))

	# Cache config
	CACHE_ROOT = os.getenv("CACHE_ROOT", tempfile.gettempdir())
	CACHE_ENABLED = bool(int(os.getenv("CACHE_ENABLED", "1")))
	CACHE_ATOMIC_WRITES = bool(int(os.getenv("CACHE_ATOMIC_WRITES", "1")))

	@classmethod
	def get_changelog_config(cls) -> Dict[str, Any]:
		"""Get changelog generation configuration."""
		return {
			"tag_pattern": cls.CHANGELOG_TAG_PATTERN,
			"generate_unreleased": cls.CHANGELOG_GENERATE_UNRELEASED,
			"include_initial": cls.CHANGELOG_INCLUDE_INITIAL,
			"date_format": cls.CHANGELOG_DATE_FORMAT,
			"production_version": cls.CHANGELOG_PRODUCTION_VERSION,
			"retain_author_metadata": cls.CHANGELOG_RETAIN_AUTHORS,
			"log_limit": cls.GIT_LOG_LIMIT,
		}

	@classmethod
	def get_cache_config(cls) -> Dict[str, Any]:
		"""Get cache store configuration.

		Returns:
			Mapping with cache root directory, enabled flag and atomic write flag.
		"""
		return {
			"root_dir": cls.CACHE_ROOT,
			"enabled": cls.CACHE_ENABLED,
			"atomic": cls.CACHE_ATOMIC_WRITES,
		}
