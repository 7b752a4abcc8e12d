"""Per-file framework classifier.

Detection cascade, each stage replacing the running best only when it is
strictly more confident:
1. Extension / naming  (.vue, .svelte -> 1.0; foo.react.tsx -> 0.9)
2. Path associations   (user globs -> 0.95)
3. Import scan         (min(score / 20, 0.95))
4. Pragma scan         (@jsx -> 0.9, @jsxImportSource -> 0.95)
5. Syntax-tree scan    (min(features / 15, 0.9))
6. Default framework   (0.1), otherwise unknown at 0.0

A failed read skips stages 3-5; a failed or overrunning syntax scan keeps
the result of stages 1-4. Neither aborts classification.
"""

import asyncio
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional

from buildplan.core.config import get_settings
from buildplan.core.errors import ParseFailure
from buildplan.core.fs import matches, to_posix
from buildplan.scanner import ast_scanner
from buildplan.scanner.cache import FrameworkCache
from buildplan.scanner.imports import detect_from_imports
from buildplan.scanner.pragma import detect_from_pragma
from buildplan.scanner.types import (
    DetectionConfig,
    DetectionStage,
    Framework,
    FrameworkInfo,
)

logger = logging.getLogger(__name__)

EXTENSION_FRAMEWORKS: dict[str, Framework] = {
    ".vue": Framework.VUE,
    ".svelte": Framework.SVELTE,
}

# "button.react.tsx" style naming markers
NAME_MARKERS: tuple[tuple[str, Framework], ...] = (
    (".vue.", Framework.VUE),
    (".react.", Framework.REACT),
    (".svelte.", Framework.SVELTE),
    (".solid.", Framework.SOLID),
    (".preact.", Framework.PREACT),
    (".lit.", Framework.LIT),
)

NAME_MARKER_CONFIDENCE = 0.9
ASSOCIATION_CONFIDENCE = 0.95
DEFAULT_CONFIDENCE = 0.1

# Upper bound on worker threads for synchronous parallel batches
MAX_WORKERS = 8


def detect_from_extension(file_path: Path) -> FrameworkInfo:
    framework = EXTENSION_FRAMEWORKS.get(file_path.suffix.lower())
    if framework:
        return FrameworkInfo(type=framework, confidence=1.0, source=DetectionStage.EXTENSION)

    for marker, framework in NAME_MARKERS:
        if marker in file_path.name:
            return FrameworkInfo.of(framework, NAME_MARKER_CONFIDENCE, DetectionStage.EXTENSION)

    return FrameworkInfo.unknown()


def _better(current: FrameworkInfo, candidate: FrameworkInfo) -> FrameworkInfo:
    return candidate if candidate.confidence > current.confidence else current


class FrameworkClassifier:
    """Classify source files by owning framework, with an explicit cache."""

    def __init__(
        self,
        config: Optional[DetectionConfig] = None,
        cache: Optional[FrameworkCache] = None,
    ):
        self.config = config or DetectionConfig()
        self.cache = cache if cache is not None else FrameworkCache()

        settings = get_settings()
        self._max_scan_size = self.config.max_scan_file_size or settings.max_scan_file_size
        self._scan_timeout = self.config.syntax_scan_timeout or settings.syntax_scan_timeout_seconds

    # -----------------------------------------------------------------------
    # Single file
    # -----------------------------------------------------------------------

    def classify(self, file_path: str | Path) -> FrameworkInfo:
        key = str(file_path)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        info = self._detect(Path(file_path))
        logger.debug(
            "Classified %s as %s (confidence=%.2f, stage=%s)",
            key, info.type, info.confidence, info.source,
        )
        return self.cache.put(key, info)

    def clear_cache(self) -> None:
        self.cache.clear()

    def _detect(self, file_path: Path) -> FrameworkInfo:
        result = detect_from_extension(file_path)

        if self.config.file_associations:
            result = _better(result, self._detect_from_associations(file_path))

        if self.config.enable_content_detection and result.confidence < 1.0:
            content = self._read(file_path)
            if content is not None:
                result = self._detect_from_content(file_path, content, result)

        if result.type == Framework.UNKNOWN and self.config.default_framework:
            framework = Framework(self.config.default_framework)
            result = FrameworkInfo.of(framework, DEFAULT_CONFIDENCE, DetectionStage.DEFAULT)

        return result

    def _detect_from_associations(self, file_path: Path) -> FrameworkInfo:
        root = self.config.root or Path.cwd()
        try:
            relative = to_posix(os.path.relpath(file_path, root))
        except ValueError:
            # Different drive on Windows
            relative = to_posix(file_path)

        for pattern, name in self.config.file_associations.items():
            if matches(relative, pattern):
                return FrameworkInfo.of(Framework(name), ASSOCIATION_CONFIDENCE, DetectionStage.ASSOCIATION)
        return FrameworkInfo.unknown()

    def _read(self, file_path: Path) -> Optional[str]:
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s, using path signals only: %s", file_path, exc)
            return None

    def _detect_from_content(
        self, file_path: Path, content: str, result: FrameworkInfo
    ) -> FrameworkInfo:
        if self.config.enable_import_detection:
            result = _better(result, detect_from_imports(content))

        if self.config.enable_pragma_detection:
            result = _better(result, detect_from_pragma(content))

        if self.config.enable_syntax_scan and ast_scanner.supports(file_path):
            result = _better(result, self._scan_syntax(file_path, content))

        return result

    def _scan_syntax(self, file_path: Path, content: str) -> FrameworkInfo:
        if len(content) > self._max_scan_size:
            logger.info(
                "Skipping syntax scan of %s: %d chars exceeds the %d limit",
                file_path, len(content), self._max_scan_size,
            )
            return FrameworkInfo.unknown()

        deadline = time.monotonic() + self._scan_timeout
        try:
            return ast_scanner.scan_syntax(file_path, content, deadline)
        except ParseFailure as exc:
            logger.warning("Syntax scan failed, keeping earlier signals: %s", exc)
        except Exception as exc:
            logger.warning("Syntax scan of %s raised, keeping earlier signals: %s", file_path, exc)
        return FrameworkInfo.unknown()

    # -----------------------------------------------------------------------
    # Batches
    # -----------------------------------------------------------------------

    async def classify_many(
        self,
        paths: Iterable[str | Path],
        parallel: bool = True,
    ) -> dict[str, FrameworkInfo]:
        """Classify many files; every input path gets an entry.

        With parallel=True each file is classified on a worker thread and
        the results are joined with asyncio.gather. A file whose
        classification raises gets an uncached unknown result.
        """
        paths = list(paths)
        if parallel:
            results = await asyncio.gather(
                *(asyncio.to_thread(self.classify, p) for p in paths),
                return_exceptions=True,
            )
        else:
            results = [self._classify_or_error(p) for p in paths]
        return self._collect(paths, results)

    def classify_batch(
        self,
        paths: Iterable[str | Path],
        parallel: bool = False,
    ) -> dict[str, FrameworkInfo]:
        """Synchronous batch classification.

        parallel=True classifies on a worker thread pool, so it is safe to
        call from inside a running event loop.
        """
        paths = list(paths)
        if parallel and paths:
            with ThreadPoolExecutor(max_workers=min(len(paths), MAX_WORKERS)) as executor:
                results = list(executor.map(self._classify_or_error, paths))
        else:
            results = [self._classify_or_error(p) for p in paths]
        return self._collect(paths, results)

    def _classify_or_error(self, path: str | Path) -> FrameworkInfo | BaseException:
        try:
            return self.classify(path)
        except Exception as exc:
            return exc

    def _collect(
        self,
        paths: list[str | Path],
        results: list,
    ) -> dict[str, FrameworkInfo]:
        classified: dict[str, FrameworkInfo] = {}
        for path, result in zip(paths, results):
            if isinstance(result, BaseException):
                logger.error("Classification of %s failed: %s", path, result)
                result = FrameworkInfo.unknown()
            classified[str(path)] = result
        return classified
