"""Filesystem enumeration with glob matching and default ignore lists.

Paths are handled as POSIX strings relative to the project root so the same
glob patterns behave identically on every platform. Supported syntax: ``*``,
``?``, ``**`` (any number of directories) and ``{a,b}`` alternation.
"""

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

# Directories never descended into
SKIP_DIRS = {
    "node_modules", ".git", ".hg", ".svn", "__pycache__", ".venv",
    "coverage", ".nyc_output", ".turbo", ".cache",
}

# Default ignores applied by the evidence collectors
DEFAULT_IGNORE = (
    "node_modules/**",
    "dist/**",
    "build/**",
    "es/**",
    "lib/**",
    "cjs/**",
    "**/*.test.*",
    "**/*.spec.*",
)

TEST_IGNORE = (
    "**/*.test.*",
    "**/*.spec.*",
    "**/__tests__/**",
    "**/*.d.ts",
)


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> re.Pattern:
    """Translate a glob pattern into an anchored regular expression."""
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        c = pattern[i]
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "{":
            close = pattern.find("}", i)
            if close == -1:
                out.append(re.escape(c))
            else:
                alternatives = pattern[i + 1:close].split(",")
                out.append("(?:" + "|".join(re.escape(a) for a in alternatives) + ")")
                i = close + 1
                continue
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("^" + "".join(out) + "$")


def matches(path: str, pattern: str) -> bool:
    return compile_glob(pattern).match(path) is not None


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    return any(matches(path, p) for p in patterns)


def to_posix(path: str | Path) -> str:
    return str(path).replace("\\", "/")


class SourceIndex:
    """Every file under a project root, enumerated once.

    Collectors query the index with glob patterns instead of walking the
    tree again for each candidate type.
    """

    def __init__(self, root: Path, files: list[str]):
        self.root = root
        self.files = files

    @classmethod
    def build(cls, root: str | Path) -> "SourceIndex":
        root = Path(root)
        if not root.is_dir():
            raise FileNotFoundError(f"Project root does not exist: {root}")
        return cls(root, walk_files(root))

    def find(
        self,
        patterns: Iterable[str],
        ignore: Iterable[str] = (),
    ) -> list[str]:
        patterns = tuple(patterns)
        ignore = tuple(ignore)
        return [
            f for f in self.files
            if matches_any(f, patterns) and not matches_any(f, ignore)
        ]

    def exists(self, relative: str) -> bool:
        return (self.root / relative).exists()

    def absolute(self, relative: str) -> Path:
        return self.root / relative


def walk_files(root: Path) -> list[str]:
    """Return all files under root as sorted POSIX paths relative to root."""
    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in SKIP_DIRS]
        rel_dir = os.path.relpath(dirpath, root)
        for name in filenames:
            rel = name if rel_dir == "." else f"{rel_dir}/{name}"
            files.append(to_posix(rel))
    files.sort()
    logger.debug("Indexed %d files under %s", len(files), root)
    return files
