#!/usr/bin/env python3
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Union

from utils.changelog_models import Category, DEFAULT_CATEGORY

logger = logging.getLogger(__name__)

PrefixSpec = Mapping[Union[Category, str], Union[str, Iterable[str]]]

DEFAULT_PREFIXES: Dict[Category, List[str]] = {
	Category.ADDED: ["Add", "Added"],
	Category.DEPRECATED: ["Deprecated"],
	Category.REMOVED: ["Remove", "Deleted"],
	Category.FIXED: ["Fix", "Hotfix", "Bug", "Quickfix"],
	Category.MERGED: ["Merge"],
}


class MessageClassifier:
	"""Maps commit titles to categories by case-insensitive prefix.

	Categories are tried in the order they first received a prefix, and the
	prefixes of a category in the order they were added. The first prefix the
	trimmed title starts with decides; anything else is Changed.
	"""

	def __init__(self, prefixes: PrefixSpec = None) -> None:
		self._prefixes: Dict[Category, List[str]] = {}
		self.set_prefix_for(DEFAULT_PREFIXES if prefixes is None else prefixes)

	@property
	def prefixes(self) -> Dict[Category, List[str]]:
		return {category: list(values) for category, values in self._prefixes.items()}

	def set_prefix_for(self, prefixes: PrefixSpec) -> None:
		"""Merge prefixes into the current mapping; existing ones are kept."""
		by_category: Dict[Category, List[str]] = {}
		for name, values in prefixes.items():
			try:
				category = Category(name)
			except ValueError:
				logger.warning(f"Ignoring prefixes for unknown category {name!r}")
				continue
			if isinstance(values, str):
				values = [values]
			by_category.setdefault(category, []).extend(values)

		# new categories are registered in declaration order
		for category in Category:
			if category not in by_category:
				continue
			bucket = self._prefixes.setdefault(category, [])
			known = {p.lower() for p in bucket}
			for prefix in by_category[category]:
				if prefix and prefix.lower() not in known:
					bucket.append(prefix)
					known.add(prefix.lower())

	def classify(self, message: str) -> Category:
		text = (message or "").strip().lower()
		for category, patterns in self._prefixes.items():
			for pattern in patterns:
				if text.startswith(pattern.lower()):
					return category
		return DEFAULT_CATEGORY
