"""Resolve glob patterns into the concrete set of files to watch."""

import fnmatch
import glob
import os
from typing import Dict, Iterable, List, Sequence

from common.file_watcher.errors import PatternResolutionError
from common.utils import logger

GLOB_CHARS = ("*", "?", "[")


def has_magic(part: str) -> bool:
    return any(char in part for char in GLOB_CHARS)


def normalize_path(path: str) -> str:
    return os.path.normpath(path)


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    """Check if a path matches any of the given glob patterns."""
    normalized = normalize_path(path)
    for pattern in patterns:
        pattern = normalize_path(pattern)
        if fnmatch.fnmatch(normalized, pattern):
            return True
        # glob lets "**/" match zero directories, fnmatch does not
        collapsed = pattern.replace("**" + os.sep, "")
        if collapsed != pattern and fnmatch.fnmatch(normalized, collapsed):
            return True
    return False


def watch_roots(patterns: Sequence[str], root: str = ".") -> Dict[str, bool]:
    """Compute the directories to watch for a set of patterns.

    Returns a mapping of directory to whether it must be watched
    recursively. The directory is the non-glob prefix of each pattern.
    """
    roots: Dict[str, bool] = {}
    for pattern in patterns:
        parts = normalize_path(pattern).split(os.sep)
        base: List[str] = []
        for part in parts:
            if has_magic(part):
                break
            base.append(part)
        if len(base) == len(parts):
            # Literal file path: watch its parent directory only
            base = base[:-1]
        remainder = parts[len(base):]
        recursive = len(remainder) > 1 or "**" in remainder

        prefix = os.sep if base == [""] else os.sep.join(base)
        if os.path.isabs(prefix):
            directory = normalize_path(prefix)
        else:
            directory = normalize_path(os.path.join(root, prefix) if prefix else root)
        roots[directory] = roots.get(directory, False) or recursive
    return roots


class PatternResolver:
    """Expands glob patterns relative to a root directory."""

    def __init__(self, root: str = ".") -> None:
        self.root = root

    def _check_root(self) -> None:
        if not os.path.exists(self.root):
            raise PatternResolutionError(f"Watch root does not exist: {self.root}")
        if not os.path.isdir(self.root):
            raise PatternResolutionError(f"Watch root is not a directory: {self.root}")
        if not os.access(self.root, os.R_OK | os.X_OK):
            raise PatternResolutionError(f"Watch root is not readable: {self.root}")

    def resolve(self, patterns: Sequence[str]) -> List[str]:
        """Resolve patterns into an ordered, de-duplicated list of files.

        Args:
            patterns: Glob patterns, e.g. ['src/**/*.py', 'index.html']

        Returns:
            Matched file paths in pattern order, sorted within each pattern.
            An empty list means nothing matched.

        Raises:
            PatternResolutionError: If the root cannot be read or a pattern
                is not a non-empty string
        """
        self._check_root()

        seen: Dict[str, None] = {}
        for pattern in patterns:
            if not isinstance(pattern, str) or not pattern.strip():
                raise PatternResolutionError(f"Invalid watch pattern: {pattern!r}")
            for path in self._expand(pattern):
                seen.setdefault(path, None)

        resolved = list(seen)
        logger.debug(f"Resolved {len(patterns)} pattern(s) to {len(resolved)} file(s)")
        return resolved

    def _expand(self, pattern: str) -> List[str]:
        if os.path.isabs(pattern):
            matches = glob.glob(pattern, recursive=True)
        else:
            matches = glob.glob(pattern, root_dir=self.root, recursive=True)

        files: List[str] = []
        for match in matches:
            full_path = match if os.path.isabs(match) else os.path.join(self.root, match)
            if os.path.isfile(full_path):
                files.append(normalize_path(match))
        return sorted(files)

    def matches(self, path: str, patterns: Sequence[str]) -> bool:
        return matches_any(path, patterns)
