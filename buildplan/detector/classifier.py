"""Project-level library classification.

Pipeline:
1. Load the project context (file index, package.json, source stats).
2. Run the evidence collectors for every candidate type.
3. Fast paths, each returning confidence 1.0:
     Vue dependency + .tsx sources + no .vue files -> Vue JSX variant
     .tsx/.jsx sources + a JSX framework marker    -> that framework
     .svelte files                                 -> svelte
4. Mixed pre-check: two or more frameworks with meaningful evidence
   -> enhanced-mixed at 0.95.
5. Vue single-file-component fast path: .vue -> vue2/vue3.
6. Priority-weighted scores, normalized by the max; the best candidate
   wins unless it is below the confidence floor (generic mixed fallback).

`classify()` never raises: anything escaping the pipeline becomes a
mixed result at confidence 0.1 carrying one error evidence item.
"""

import logging
from pathlib import Path
from typing import Mapping, Optional

from buildplan.core.config import get_settings
from buildplan.core.events import EventKind, EventSink, PlanEvent
from buildplan.detector import collectors
from buildplan.detector.collectors import ProjectContext
from buildplan.detector.defaults import (
    CANDIDATE_TYPES,
    DEFAULT_VUE_MAJOR,
    FAILURE_CONFIDENCE,
    JSX_MARKER_DEPENDENCIES,
    LIBRARY_TYPE_PRIORITY,
    MIXED_CONFIDENCE,
    MIXED_FRAMEWORK_RULES,
    MIXED_IGNORE,
    SFC_GLOBS,
    SFC_IGNORE,
    SUPPORTED_VUE_MAJORS,
)
from buildplan.detector.types import (
    ClassificationResult,
    EvidenceItem,
    EvidenceKind,
    LibraryType,
    TypeScore,
)
from buildplan.detector.versions import parse_major, resolve_major

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def classify(
    project_root: str | Path,
    *,
    file_frameworks: Optional[Mapping[str, int]] = None,
    confidence_floor: Optional[float] = None,
    mixed_threshold: Optional[float] = None,
    events: Optional[EventSink] = None,
) -> ClassificationResult:
    """Classify a project by library type.

    file_frameworks optionally carries per-framework counts of files the
    per-file classifier labelled confidently; they count as meaningful
    evidence in the mixed-framework pre-check.
    """
    settings = get_settings()
    floor = settings.confidence_floor if confidence_floor is None else confidence_floor
    threshold = settings.mixed_score_threshold if mixed_threshold is None else mixed_threshold

    try:
        result = _classify(Path(project_root), file_frameworks or {}, floor, threshold, events)
    except Exception as exc:
        logger.exception("Project classification failed for %s", project_root)
        return ClassificationResult(
            type=LibraryType.MIXED,
            confidence=FAILURE_CONFIDENCE,
            evidence=(
                EvidenceItem(
                    kind=EvidenceKind.ERROR,
                    description=f"Detection failed: {exc}; using the mixed strategy as a safe fallback",
                    weight=FAILURE_CONFIDENCE,
                ),
            ),
        )

    logger.info(
        "Classified %s as %s (confidence=%.2f)",
        project_root, result.type, result.confidence,
    )
    return result


def _classify(
    root: Path,
    file_frameworks: Mapping[str, int],
    floor: float,
    threshold: float,
    events: Optional[EventSink],
) -> ClassificationResult:
    ctx = ProjectContext.load(root)
    scores = collectors.run_collectors(ctx)

    fast = (
        _vue_jsx_fast_path(ctx, scores, events)
        or _jsx_marker_fast_path(ctx, scores)
        or _svelte_fast_path(ctx, scores)
    )
    if fast:
        return fast

    frameworks = detect_mixed_frameworks(ctx, scores, file_frameworks, threshold)
    if len(frameworks) > 1:
        return ClassificationResult(
            type=LibraryType.ENHANCED_MIXED,
            confidence=MIXED_CONFIDENCE,
            evidence=(
                EvidenceItem(
                    kind=EvidenceKind.CONTENT,
                    description=f"Detected multiple frameworks: {', '.join(frameworks)}",
                    weight=1.0,
                    source_ref=", ".join(frameworks),
                ),
            ),
            frameworks=tuple(frameworks),
        )

    # After the pre-check: .vue files next to React sources are a mix
    fast = _vue_sfc_fast_path(ctx, scores, events)
    if fast:
        return fast

    return pick_result(scores, floor)


# ---------------------------------------------------------------------------
# Fast paths
# ---------------------------------------------------------------------------

def _vue_type(ctx: ProjectContext, events: Optional[EventSink]) -> LibraryType:
    spec = ctx.dependencies.get("vue")
    if parse_major(spec) not in SUPPORTED_VUE_MAJORS and events is not None:
        events.emit(
            PlanEvent(
                kind=EventKind.VERSION_FALLBACK,
                subject="vue",
                reason=f"Could not determine a supported Vue major version from {spec!r}",
                suggestion=f"Declare vue with an explicit range such as ^{DEFAULT_VUE_MAJOR}.0.0",
                data={"declared": spec, "assumed": DEFAULT_VUE_MAJOR},
            )
        )
    major = resolve_major(spec, SUPPORTED_VUE_MAJORS, DEFAULT_VUE_MAJOR, package="vue")
    return LibraryType.VUE2 if major == 2 else LibraryType.VUE3


def _forced(
    library_type: LibraryType,
    scores: dict[LibraryType, TypeScore],
    item: EvidenceItem,
    variant: Optional[str] = None,
) -> ClassificationResult:
    return ClassificationResult(
        type=library_type,
        confidence=1.0,
        evidence=tuple(scores[library_type].evidence) + (item,),
        variant=variant,
    )


def _vue_jsx_fast_path(ctx, scores, events) -> Optional[ClassificationResult]:
    if not ctx.has_dependency("vue") or ctx.stats.tsx == 0 or ctx.stats.vue > 0:
        return None
    library_type = _vue_type(ctx, events)
    logger.info("Vue dependency with TSX sources and no .vue files: %s JSX project", library_type)
    return _forced(
        library_type,
        scores,
        EvidenceItem(
            kind=EvidenceKind.CONTENT,
            description="Vue dependency and TSX sources without .vue files: Vue JSX project",
            weight=1.0,
            source_ref="vue-tsx-inference",
        ),
        variant="jsx",
    )


def _jsx_marker_fast_path(ctx, scores) -> Optional[ClassificationResult]:
    if ctx.stats.tsx + ctx.stats.jsx == 0:
        return None
    for package, library_type in JSX_MARKER_DEPENDENCIES:
        if ctx.has_dependency(package):
            jsx_files = ctx.index.find(["src/**/*.tsx", "src/**/*.jsx"], ignore=SFC_IGNORE)
            return _forced(
                library_type,
                scores,
                EvidenceItem(
                    kind=EvidenceKind.FILE,
                    description=f"{len(jsx_files)} .tsx/.jsx files with a {package} dependency",
                    weight=1.0,
                    source_ref=", ".join(jsx_files[:3]),
                ),
            )
    return None


def _svelte_fast_path(ctx, scores) -> Optional[ClassificationResult]:
    svelte_files = ctx.index.find(SFC_GLOBS["svelte"], ignore=SFC_IGNORE)
    if not svelte_files:
        return None
    return _forced(
        LibraryType.SVELTE,
        scores,
        EvidenceItem(
            kind=EvidenceKind.FILE,
            description=f"Found {len(svelte_files)} .svelte files",
            weight=1.0,
            source_ref=", ".join(svelte_files[:3]),
        ),
    )


def _vue_sfc_fast_path(ctx, scores, events) -> Optional[ClassificationResult]:
    vue_files = ctx.index.find(SFC_GLOBS["vue"], ignore=SFC_IGNORE)
    if not vue_files:
        return None
    library_type = _vue_type(ctx, events)
    return _forced(
        library_type,
        scores,
        EvidenceItem(
            kind=EvidenceKind.FILE,
            description=f"Found {len(vue_files)} .vue files",
            weight=1.0,
            source_ref=", ".join(vue_files[:3]),
        ),
    )


# ---------------------------------------------------------------------------
# Mixed-framework pre-check
# ---------------------------------------------------------------------------

def detect_mixed_frameworks(
    ctx: ProjectContext,
    scores: dict[LibraryType, TypeScore],
    file_frameworks: Mapping[str, int],
    threshold: float,
) -> list[str]:
    """Return the frameworks with meaningful evidence, in rule order."""
    frameworks: list[str] = []
    for rule in MIXED_FRAMEWORK_RULES:
        has_dep = ctx.has_dependency(*rule.dependencies)
        per_file = file_frameworks.get(rule.framework, 0) > 0

        if per_file:
            frameworks.append(rule.framework)
            continue
        if rule.requires_dependency and not has_dep:
            continue
        if rule.distinctive_files and ctx.index.find(rule.distinctive_files, ignore=MIXED_IGNORE):
            frameworks.append(rule.framework)
            continue
        if not has_dep:
            continue
        if rule.backed_files and ctx.index.find(rule.backed_files, ignore=MIXED_IGNORE):
            frameworks.append(rule.framework)
            continue
        if max(scores[t].raw for t in rule.scored_types) > threshold:
            frameworks.append(rule.framework)

    logger.debug("Mixed-framework pre-check found: %s", frameworks or "none")
    return frameworks


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def final_scores(scores: dict[LibraryType, TypeScore]) -> dict[LibraryType, float]:
    """Apply priorities and normalize so the best candidate scores 1.0."""
    weighted = {t: s.weighted for t, s in scores.items()}
    max_score = max(weighted.values(), default=0.0)
    if max_score <= 0:
        return {t: 0.0 for t in weighted}
    return {t: min(w / max_score, 1.0) for t, w in weighted.items()}


def best_match(normalized: dict[LibraryType, float]) -> tuple[LibraryType, float]:
    """Highest score; ties go to the higher priority, then enumeration order."""
    best_type = CANDIDATE_TYPES[0]
    best_score = -1.0
    for library_type in CANDIDATE_TYPES:
        score = normalized.get(library_type, 0.0)
        if score > best_score or (
            score == best_score
            and LIBRARY_TYPE_PRIORITY[library_type] > LIBRARY_TYPE_PRIORITY[best_type]
        ):
            best_type, best_score = library_type, score
    return best_type, max(best_score, 0.0)


def pick_result(scores: dict[LibraryType, TypeScore], floor: float) -> ClassificationResult:
    normalized = final_scores(scores)
    best_type, best_score = best_match(normalized)

    ranked = sorted(
        ((t, s) for t, s in normalized.items() if s > 0),
        key=lambda pair: -pair[1],
    )

    if best_score < floor:
        logger.info(
            "Best candidate %s scored %.2f, below the %.2f floor; falling back to mixed",
            best_type, best_score, floor,
        )
        return ClassificationResult(
            type=LibraryType.MIXED,
            confidence=best_score,
            evidence=tuple(scores[LibraryType.MIXED].evidence),
            alternates=tuple(ranked),
        )

    return ClassificationResult(
        type=best_type,
        confidence=best_score,
        evidence=tuple(scores[best_type].evidence),
        alternates=tuple((t, s) for t, s in ranked if t != best_type),
    )
