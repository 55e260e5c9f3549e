#!/usr/bin/env python3
"""Release tag selection: pattern filtering and natural ordering."""

import logging
import re
from typing import List, Union

from .changelog_models import UNRELEASED_TAG

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r"(\d+)")


class SortingError(Exception):
    """Raised when tags cannot be put in natural order."""
    def __init__(self, message: str, code: str = "SORT") -> None:
        super().__init__(message)
        self.code = code


def natural_key(value: str) -> List[Union[str, int]]:
    """Split a string into text and number runs so that `2.10` sorts after `2.9`.

    re.split with a capturing group alternates text and digits starting with
    text, so keys of different tags always compare like-typed items.
    """
    return [int(part) if i % 2 else part for i, part in enumerate(_DIGITS_RE.split(value))]


class TagSelector:
    def __init__(self, backend) -> None:
        self.backend = backend

    def list_tags(self, pattern: str, include_unreleased: bool = False) -> List[str]:
        """Return matching tags, newest first.

        Args:
            pattern: Regular expression matched at the start of each tag name
            include_unreleased: Put HEAD in front of the released tags

        Raises:
            SortingError: If the natural sort fails
        """
        matcher = re.compile(pattern)
        tags = [tag for tag in self.backend.list_tags() if matcher.match(tag)]

        try:
            tags.sort(key=natural_key)
        except TypeError as e:
            raise SortingError(f"Tag sorting error - invalid sorting: {e}") from e
        tags.reverse()

        if include_unreleased:
            tags.insert(0, UNRELEASED_TAG)

        logger.info(f"Selected {len(tags)} tags matching {pattern!r}")
        return tags
