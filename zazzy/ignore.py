"""Ignore list handling for Zazzy.

Patterns are read from ``.zazzy/.ignore``, one glob per line. Blank lines
and lines starting with ``#`` are skipped. A pattern matches the full path
relative to the site root and ``*`` also matches ``/``, so ``drafts*``
excludes a whole folder.

The publish directory is always excluded, unless its name already starts
with a dot (hidden paths are never walked anyway).
"""

from __future__ import annotations

import fnmatch
import logging
import re
from collections.abc import Iterable
from pathlib import Path

from .config import CONFIG_DIR, Config

logger = logging.getLogger(__name__)

IGNORE_FILE = ".ignore"


class IgnoreList:
    """Ordered collection of compiled ignore patterns.

    Attributes:
        patterns: Patterns that compiled successfully, in file order.
    """

    def __init__(self, patterns: Iterable[str] = ()):
        self.patterns: list[str] = []
        self._compiled: list[re.Pattern] = []
        for pattern in patterns:
            self.add(pattern)

    def add(self, pattern: str) -> bool:
        """Compile and append a pattern.

        A malformed pattern (unclosed ``[`` or trailing backslash) is logged
        and skipped.

        Returns:
            True if the pattern was added.
        """
        problem = _pattern_problem(pattern)
        if problem:
            logger.warning("ignore: bad pattern %r: %s", pattern, problem)
            return False
        self.patterns.append(pattern)
        self._compiled.append(re.compile(fnmatch.translate(pattern)))
        return True

    def matches(self, path: str) -> bool:
        """Check if a site-relative path matches any pattern."""
        return any(regex.match(path) for regex in self._compiled)

    def __len__(self) -> int:
        return len(self.patterns)


def load_ignore(config: Config) -> IgnoreList:
    """Load the ignore list of a site.

    Args:
        config: Site configuration.

    Returns:
        IgnoreList holding the file patterns plus the publish directory.
    """
    ignore = IgnoreList()
    for entry in _read_entries(config.root / CONFIG_DIR / IGNORE_FILE):
        ignore.add(entry)

    pubdir = config.pubdir
    name = Path(pubdir.rstrip("/")).name
    if not name.startswith(".") and not pubdir.startswith("."):
        ignore.add(pubdir.rstrip("/") + "**")
    return ignore


def _read_entries(path: Path) -> list[str]:
    if not path.exists():
        return []
    entries = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            entry = line.strip()
            if entry and not entry.startswith("#"):
                entries.append(entry)
    return entries


def _pattern_problem(pattern: str) -> str | None:
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            if i + 1 == len(pattern):
                return "trailing backslash"
            i += 2
        elif char == "[":
            end = pattern.find("]", i + 2)
            if end == -1:
                return "unclosed character class"
            i = end + 1
        else:
            i += 1
    return None
