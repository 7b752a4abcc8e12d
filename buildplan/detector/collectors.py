"""Evidence collectors for project-level classification.

Each collector looks at one kind of signal (file globs, declared
dependencies, config files, manifest fields) and returns the evidence it
found for one candidate type. Collectors are isolated from each other: a
collector that raises contributes nothing for that candidate and the
failure is logged.
"""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable

from buildplan.core.errors import CollectionFailure
from buildplan.core.fs import DEFAULT_IGNORE, TEST_IGNORE, SourceIndex
from buildplan.detector.defaults import (
    CANDIDATE_TYPES,
    CONFIG_FACTOR,
    DEPENDENCY_FACTOR,
    DEV_ONLY_MULTIPLIER,
    ENTRY_FILE_BONUS,
    ENTRY_FILE_PREFIXES,
    FILE_COUNT_FACTOR,
    LIBRARY_TYPE_PATTERNS,
    LIBRARY_TYPE_PRIORITY,
    MANIFEST_FIELD_FACTOR,
    MIN_STYLE_FILES,
    LibraryPattern,
)
from buildplan.detector.package_json import (
    collect_dependencies,
    match_dependency,
    read_manifest,
)
from buildplan.detector.types import EvidenceItem, EvidenceKind, LibraryType, TypeScore

logger = logging.getLogger(__name__)

SCRIPT_EXTENSIONS = {".ts", ".tsx", ".js", ".jsx"}
STYLE_EXTENSIONS = {".css", ".less", ".scss", ".sass"}


@dataclass
class SourceStats:
    """File counts by extension under src/, tests and declarations excluded."""

    typescript: int = 0
    tsx: int = 0
    javascript: int = 0
    jsx: int = 0
    vue: int = 0
    svelte: int = 0
    css: int = 0
    less: int = 0
    scss: int = 0
    sass: int = 0
    total: int = 0

    @property
    def script_files(self) -> int:
        return self.typescript + self.tsx + self.javascript + self.jsx

    @property
    def style_files(self) -> int:
        return self.css + self.less + self.scss + self.sass


_STAT_FIELDS = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "jsx",
    ".vue": "vue",
    ".svelte": "svelte",
    ".css": "css",
    ".less": "less",
    ".scss": "scss",
    ".sass": "sass",
}


def analyze_source_files(index: SourceIndex) -> SourceStats:
    stats = SourceStats()
    for path in index.find(["src/**"], ignore=TEST_IGNORE):
        stats.total += 1
        field_name = _STAT_FIELDS.get(PurePosixPath(path).suffix.lower())
        if field_name:
            setattr(stats, field_name, getattr(stats, field_name) + 1)
    logger.debug("Source file stats: %s", stats)
    return stats


def style_suppressed(stats: SourceStats) -> bool:
    """True when the project is not a pure style library."""
    return stats.script_files >= stats.style_files or stats.style_files < MIN_STYLE_FILES


@dataclass
class ProjectContext:
    """Everything the collectors read, loaded once per classification."""

    root: Path
    index: SourceIndex
    manifest: dict
    dependencies: dict[str, str]
    stats: SourceStats

    @classmethod
    def load(cls, root: str | Path) -> "ProjectContext":
        index = SourceIndex.build(root)
        manifest = read_manifest(index.root)
        return cls(
            root=index.root,
            index=index,
            manifest=manifest,
            dependencies=collect_dependencies(manifest),
            stats=analyze_source_files(index),
        )

    def has_dependency(self, *names: str) -> bool:
        return any(name in self.dependencies for name in names)


def _preview(paths: list[str], limit: int = 3) -> str:
    shown = ", ".join(paths[:limit])
    if len(paths) > limit:
        shown += f" ... ({len(paths)} total)"
    return shown


def _declares_any(ctx: ProjectContext, pattern: LibraryPattern) -> bool:
    return any(
        match_dependency(spec, ctx.dependencies)
        for spec in pattern.dependencies + pattern.dev_dependencies
    )


def collect_file_patterns(
    ctx: ProjectContext, library_type: LibraryType, pattern: LibraryPattern
) -> list[EvidenceItem]:
    if pattern.requires_dependency and not _declares_any(ctx, pattern):
        return []

    files = ctx.index.find(pattern.files, ignore=DEFAULT_IGNORE)
    if not files:
        return []

    score = min(len(files) * FILE_COUNT_FACTOR, 1.0) * pattern.weight
    items = [
        EvidenceItem(
            kind=EvidenceKind.FILE,
            description=f"Found {len(files)} {library_type} related files",
            weight=score,
            source_ref=_preview(files),
        )
    ]

    entries = [f for f in files if PurePosixPath(f).name.startswith(ENTRY_FILE_PREFIXES)]
    if entries:
        items.append(
            EvidenceItem(
                kind=EvidenceKind.FILE,
                description="Entry file present",
                weight=ENTRY_FILE_BONUS,
                source_ref=entries[0],
            )
        )
    return items


def collect_dependencies_evidence(
    ctx: ProjectContext, library_type: LibraryType, pattern: LibraryPattern
) -> list[EvidenceItem]:
    considered = pattern.dependencies + pattern.dev_dependencies
    if not considered or not ctx.dependencies:
        return []

    matched = [spec for spec in considered if match_dependency(spec, ctx.dependencies)]
    if not matched:
        return []

    core_matched = any(spec in pattern.dependencies for spec in matched)
    multiplier = 1.0 if core_matched else DEV_ONLY_MULTIPLIER
    base = min(len(matched) / len(considered), 1.0)
    score = base * pattern.weight * DEPENDENCY_FACTOR * multiplier

    shown = ", ".join(matched[:5]) + ("..." if len(matched) > 5 else "")
    return [
        EvidenceItem(
            kind=EvidenceKind.DEPENDENCY,
            description=f"Found related dependencies: {shown}",
            weight=score,
            source_ref="package.json",
        )
    ]


def collect_config_files(
    ctx: ProjectContext, library_type: LibraryType, pattern: LibraryPattern
) -> list[EvidenceItem]:
    if not pattern.configs:
        return []

    found = [name for name in pattern.configs if ctx.index.exists(name)]
    if not found:
        return []

    score = len(found) / len(pattern.configs) * pattern.weight * CONFIG_FACTOR
    return [
        EvidenceItem(
            kind=EvidenceKind.CONFIG,
            description=f"Found config files: {', '.join(found)}",
            weight=score,
            source_ref=", ".join(found),
        )
    ]


def collect_manifest_fields(
    ctx: ProjectContext, library_type: LibraryType, pattern: LibraryPattern
) -> list[EvidenceItem]:
    if not pattern.manifest_fields:
        return []

    found = [name for name in pattern.manifest_fields if ctx.manifest.get(name)]
    if not found:
        return []

    score = len(found) / len(pattern.manifest_fields) * pattern.weight * MANIFEST_FIELD_FACTOR
    return [
        EvidenceItem(
            kind=EvidenceKind.CONFIG,
            description=f"Found package.json fields: {', '.join(found)}",
            weight=score,
            source_ref="package.json",
        )
    ]


Collector = Callable[[ProjectContext, LibraryType, LibraryPattern], list[EvidenceItem]]

COLLECTORS: list[tuple[str, Collector]] = [
    ("files", collect_file_patterns),
    ("dependencies", collect_dependencies_evidence),
    ("configs", collect_config_files),
    ("manifest_fields", collect_manifest_fields),
]


def empty_scores() -> dict[LibraryType, TypeScore]:
    return {
        t: TypeScore(type=t, priority=LIBRARY_TYPE_PRIORITY[t])
        for t in CANDIDATE_TYPES
    }


def run_collectors(ctx: ProjectContext) -> dict[LibraryType, TypeScore]:
    """Run every collector for every candidate and accumulate the evidence."""
    scores = empty_scores()
    candidates = list(CANDIDATE_TYPES)

    if style_suppressed(ctx.stats):
        logger.debug(
            "Skipping style candidate: %d script files, %d style files",
            ctx.stats.script_files, ctx.stats.style_files,
        )
        candidates.remove(LibraryType.STYLE)

    for name, collector in COLLECTORS:
        for library_type in candidates:
            pattern = LIBRARY_TYPE_PATTERNS[library_type]
            try:
                items = collector(ctx, library_type, pattern)
            except Exception as exc:
                failure = CollectionFailure(name, f"{library_type}: {exc}")
                logger.warning("Evidence collection failed: %s", failure)
                continue
            for item in items:
                scores[library_type].add(item)

    return scores
