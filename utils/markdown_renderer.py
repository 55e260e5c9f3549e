#!/usr/bin/env python3
from __future__ import annotations

from typing import Iterable, List

from utils.changelog_models import ReleaseRecord

PRODUCTION_MARKER = "**ON PRODUCTION**"


def heading(release: ReleaseRecord, production_version: str = "") -> str:
	if release.is_unreleased:
		return "## [Unreleased]"
	if production_version and release.tag == production_version:
		return f"## [{release.tag}] - {release.date} {PRODUCTION_MARKER}"
	return f"## [{release.tag}] - {release.date}"


def render_release(release: ReleaseRecord, production_version: str = "") -> str:
	# an unreleased interval without changes gets no section at all
	if release.is_unreleased and release.is_empty:
		return ""
	out_lines: List[str] = [heading(release, production_version)]
	for category, entries in release.groups.items():
		out_lines.append(f"### {category.value}")
		out_lines.extend(f"- {entry.message}" for entry in entries)
		out_lines.append("")
	out_lines.append("")
	return "\n".join(out_lines) + "\n"


def render_markdown(releases: Iterable[ReleaseRecord], production_version: str = "") -> str:
	return "".join(render_release(release, production_version) for release in releases)
