#!/usr/bin/env python3
from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional

from configs.config import Config

logger = logging.getLogger(__name__)


def repository_key(repository_path: str) -> str:
	return hashlib.md5(str(repository_path).encode("utf-8")).hexdigest()


class CacheBackend:
	"""One JSON document per repository, mapping interval to raw commit records."""

	def __init__(self, root_dir: str = None, atomic: Optional[bool] = None) -> None:
		cfg = Config.get_cache_config()
		self.root_dir = root_dir or cfg["root_dir"]
		self.atomic = bool(cfg["atomic"] if atomic is None else atomic)

	def key_to_path(self, key: str) -> str:
		return os.path.join(self.root_dir, key.replace("/", "_"))

	def load(self, key: str) -> Optional[Dict[str, List[Dict[str, Any]]]]:
		path = self.key_to_path(key)
		if not os.path.isfile(path):
			return None
		try:
			with open(path, "r", encoding="utf-8") as f:
				data = json.load(f)
		except (OSError, ValueError) as e:
			# treat as miss
			logger.warning(f"Ignoring unreadable cache {path}: {e}")
			return None
		if not isinstance(data, dict):
			logger.warning(f"Ignoring cache {path}: expected an object, got {type(data).__name__}")
			return None
		return data

	def save(self, key: str, mapping: Dict[str, List[Dict[str, Any]]]) -> None:
		path = self.key_to_path(key)
		os.makedirs(self.root_dir, exist_ok=True)
		text = json.dumps(mapping, separators=(",", ":"))
		if not self.atomic:
			with open(path, "w", encoding="utf-8") as f:
				f.write(text)
			return
		# Atomic via temp file and rename
		tmp_fd, tmp_path = tempfile.mkstemp(dir=self.root_dir, prefix=".tmp_", suffix=".json")
		try:
			with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
				f.write(text)
				f.flush()
				os.fsync(f.fileno())
			os.replace(tmp_path, path)
		except BaseException:
			if os.path.exists(tmp_path):
				os.unlink(tmp_path)
			raise

	def invalidate(self, key: str) -> None:
		path = self.key_to_path(key)
		if os.path.exists(path):
			os.remove(path)
