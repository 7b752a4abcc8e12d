"""Source discovery for the per-file detection pass."""

import logging

from buildplan.core.fs import TEST_IGNORE, SourceIndex

logger = logging.getLogger(__name__)

SOURCE_DIRS = ("src", "lib", "components")
SOURCE_EXTENSIONS = ("vue", "tsx", "jsx", "ts", "js", "svelte")

SOURCE_GLOBS: tuple[str, ...] = tuple(
    f"{d}/**/*.{{{','.join(SOURCE_EXTENSIONS)}}}" for d in SOURCE_DIRS
)


def discover_sources(index: SourceIndex) -> list[str]:
    """Root-relative source files to classify, excluding tests and .d.ts."""
    files = index.find(SOURCE_GLOBS, ignore=TEST_IGNORE)
    logger.debug("Discovered %d source files under %s", len(files), index.root)
    return files
