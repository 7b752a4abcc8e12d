"""Mixed-framework build coordinator.

Pipeline:
1. Discover sources under src/, lib/ and components/.
2. Classify every file (worker threads when parallel_detection is on) and
   aggregate per-framework counts.
3. Classify the project, feeding the confidently labelled framework counts
   into the mixed-framework pre-check.
4. Orchestrate the capabilities for the detected frameworks.
5. Dispatch on the build mode (unified / separated / component / custom)
   and compute the externals.

Plans are memoized per (files, frameworks, capabilities, config) and never
mutated. The per-file cache and the memo live on the coordinator instance;
`clear()` drops both.
"""

import logging
from collections import Counter
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from buildplan.coordinator.chunking import SeparatedChunkPolicy, UnifiedChunkPolicy
from buildplan.coordinator.config import AUTO, BuildMode, MixedFrameworkConfig
from buildplan.coordinator.discovery import discover_sources
from buildplan.coordinator.externals import smart_externals
from buildplan.coordinator.types import (
    BuildModeDecision,
    BuildPlan,
    FileFrameworkMap,
    GroupPlan,
    OutputPolicy,
    SyntheticEntry,
)
from buildplan.core.config import Settings, get_settings
from buildplan.core.events import (
    CollectingEventSink,
    EventKind,
    EventSink,
    FanoutEventSink,
    LoggingEventSink,
    PlanEvent,
)
from buildplan.core.fs import SourceIndex
from buildplan.detector.classifier import classify
from buildplan.detector.package_json import collect_dependencies, read_manifest
from buildplan.orchestration.orchestrator import CapabilityOrchestrator
from buildplan.orchestration.types import Capability
from buildplan.orchestration.wrapping import FileFrameworkResolver
from buildplan.scanner.cache import FrameworkCache
from buildplan.scanner.classifier import DEFAULT_CONFIDENCE, FrameworkClassifier
from buildplan.scanner.types import DetectionConfig, DetectionStage, Framework, FrameworkInfo

logger = logging.getLogger(__name__)

JSX_SUFFIXES = (".jsx", ".tsx")


def dominant_framework(
    files: Iterable[str],
    file_map: Mapping[str, FrameworkInfo],
    default: str,
) -> str:
    """Majority framework of a file set.

    Ties go to the default framework when it is among the leaders, then to
    enumeration order. A set with no known framework gets the default.
    """
    counts: Counter[str] = Counter()
    for path in files:
        info = file_map.get(path)
        if info is not None and info.type != Framework.UNKNOWN:
            counts[info.type.value] += 1
    if not counts:
        return default

    top = max(counts.values())
    leaders = [f.value for f in Framework if counts.get(f.value) == top]
    return default if default in leaders else leaders[0]


class MixedFrameworkCoordinator:
    """Plan builds for projects that may mix UI frameworks."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        events: Optional[EventSink] = None,
        cache: Optional[FrameworkCache] = None,
    ):
        self.settings = settings or get_settings()
        self.events = events or LoggingEventSink()
        self.cache = cache if cache is not None else FrameworkCache()
        self._plans: dict[tuple, BuildPlan] = {}

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def plan(
        self,
        source_tree: str | Path,
        config: MixedFrameworkConfig | Mapping[str, Any] | None = None,
        capabilities: Iterable[Capability] = (),
    ) -> BuildPlan:
        """Plan a build of source_tree.

        With parallel_detection the detection pass runs on worker threads;
        `plan_async` does the same from inside an event loop.
        """
        config = self._validate(config)
        root = Path(source_tree)
        sources = self._discover(root)
        classifier = self._classifier(root, config)
        results = classifier.classify_batch(
            [str(root / f) for f in sources],
            parallel=config.advanced.parallel_detection,
        )
        return self._build(root, config, tuple(capabilities), sources, results)

    async def plan_async(
        self,
        source_tree: str | Path,
        config: MixedFrameworkConfig | Mapping[str, Any] | None = None,
        capabilities: Iterable[Capability] = (),
    ) -> BuildPlan:
        config = self._validate(config)
        root = Path(source_tree)
        sources = self._discover(root)
        classifier = self._classifier(root, config)
        results = await classifier.classify_many(
            [str(root / f) for f in sources],
            parallel=config.advanced.parallel_detection,
        )
        return self._build(root, config, tuple(capabilities), sources, results)

    def clear(self) -> None:
        """Drop the per-file classification cache and the plan memo."""
        self.cache.clear()
        self._plans.clear()

    # -----------------------------------------------------------------------
    # Detection pass
    # -----------------------------------------------------------------------

    @staticmethod
    def _validate(config) -> MixedFrameworkConfig:
        if config is None:
            return MixedFrameworkConfig()
        if isinstance(config, MixedFrameworkConfig):
            return config
        return MixedFrameworkConfig.model_validate(config)

    @staticmethod
    def _discover(root: Path) -> list[str]:
        try:
            index = SourceIndex.build(root)
        except FileNotFoundError as exc:
            logger.warning("No sources to classify: %s", exc)
            return []
        return discover_sources(index)

    def _classifier(self, root: Path, config: MixedFrameworkConfig) -> FrameworkClassifier:
        detection = DetectionConfig(
            root=root,
            file_associations=dict(config.jsx.file_associations),
            enable_content_detection=config.jsx.auto_detect,
            max_scan_file_size=self.settings.max_scan_file_size,
            syntax_scan_timeout=self.settings.syntax_scan_timeout_seconds,
        )
        cache = self.cache if config.advanced.cache_detection else FrameworkCache()
        return FrameworkClassifier(detection, cache=cache)

    @staticmethod
    def _file_map(
        root: Path,
        sources: list[str],
        results: Mapping[str, FrameworkInfo],
        default_framework: str,
    ) -> FileFrameworkMap:
        files: dict[str, FrameworkInfo] = {}
        for relative in sources:
            info = results.get(str(root / relative), FrameworkInfo.unknown())
            if info.type == Framework.UNKNOWN and relative.endswith(JSX_SUFFIXES):
                info = FrameworkInfo.of(
                    Framework(default_framework), DEFAULT_CONFIDENCE, DetectionStage.DEFAULT
                )
            files[relative] = info
        return MappingProxyType(files)

    # -----------------------------------------------------------------------
    # Planning
    # -----------------------------------------------------------------------

    def _build(
        self,
        root: Path,
        config: MixedFrameworkConfig,
        capabilities: tuple[Capability, ...],
        sources: list[str],
        results: Mapping[str, FrameworkInfo],
    ) -> BuildPlan:
        files = self._file_map(root, sources, results, config.jsx.default_framework)

        key = (
            str(root.resolve()),
            config.model_dump_json(),
            tuple((p, i.type.value, i.confidence) for p, i in files.items()),
            tuple((c.name, id(c)) for c in capabilities),
        )
        cached = self._plans.get(key)
        if cached is not None:
            logger.debug("Reusing memoized plan for %s", root)
            return cached

        stats = self._stats(files)
        confident = Counter(
            info.type.value
            for info in files.values()
            if info.type != Framework.UNKNOWN
            and info.confidence >= self.settings.mixed_min_file_confidence
        )
        detected = tuple(f.value for f in Framework if f != Framework.UNKNOWN and stats.get(f.value))

        collector = CollectingEventSink()
        events = FanoutEventSink(collector, self.events)

        classification = classify(
            root,
            file_frameworks=dict(confident),
            confidence_floor=self.settings.confidence_floor,
            mixed_threshold=self.settings.mixed_score_threshold,
            events=events,
        )
        orchestrator = CapabilityOrchestrator(config.orchestration.to_config(), events)
        resolver = FileFrameworkResolver(files, root)
        primary = orchestrator.plan(capabilities, detected, resolver)

        if config.mode == BuildMode.SEPARATED:
            decision = self._separated(config, files, detected)
        elif config.mode == BuildMode.COMPONENT:
            decision = self._component(config, files)
        elif config.mode == BuildMode.CUSTOM:
            decision = self._custom(config, files, capabilities, orchestrator, resolver, events)
        else:
            decision = self._unified(config)

        if config.advanced.smart_externals:
            dependencies = collect_dependencies(read_manifest(root))
            externals = smart_externals(stats, dependencies, config.external)
        else:
            externals = list(dict.fromkeys(config.external))

        plan = BuildPlan(
            root=str(root),
            classification=classification,
            files=files,
            stats=MappingProxyType(stats),
            orchestration=primary,
            decision=decision,
            externals=tuple(externals),
            warnings=tuple(collector.warnings),
        )
        self._plans[key] = plan

        logger.info(
            "Planned %s build of %s: %d files, frameworks=%s, %d capabilities",
            config.mode, root, len(files), ", ".join(detected) or "none", len(primary.capabilities),
        )
        return plan

    @staticmethod
    def _stats(files: FileFrameworkMap) -> dict[str, int]:
        counts = Counter(info.type.value for info in files.values())
        return {f.value: counts[f.value] for f in Framework if counts.get(f.value)}

    # -----------------------------------------------------------------------
    # Build modes
    # -----------------------------------------------------------------------

    @staticmethod
    def _unified(config: MixedFrameworkConfig) -> BuildModeDecision:
        return BuildModeDecision(
            mode=BuildMode.UNIFIED,
            output=OutputPolicy(dir=config.output.dir, format=config.output.format),
            chunk_policy=UnifiedChunkPolicy(),
        )

    @staticmethod
    def _separated(
        config: MixedFrameworkConfig,
        files: FileFrameworkMap,
        detected: tuple[str, ...],
    ) -> BuildModeDecision:
        output_dirs = {fw: config.output.framework_dir(fw) for fw in detected}
        entries = tuple(
            SyntheticEntry(
                name=f"{output_dirs[fw]}/index",
                framework=fw,
                files=tuple(p for p, info in files.items() if info.type.value == fw),
            )
            for fw in detected
        )
        return BuildModeDecision(
            mode=BuildMode.SEPARATED,
            output=OutputPolicy(
                dir=config.output.dir,
                format=config.output.format,
                chunk_file_names="[framework]/[name]-[hash].js",
            ),
            chunk_policy=SeparatedChunkPolicy(
                config.output.framework_dirs,
                files,
                shared_runtime=config.advanced.shared_runtime,
            ),
            entries=entries,
            output_dirs=MappingProxyType(output_dirs),
        )

    @staticmethod
    def _component(config: MixedFrameworkConfig, files: FileFrameworkMap) -> BuildModeDecision:
        return BuildModeDecision(
            mode=BuildMode.COMPONENT,
            output=OutputPolicy(
                dir=config.output.dir,
                format=config.output.format,
                entry_file_names="[name].js",
                chunk_file_names="chunks/[name]-[hash].js",
                preserve_modules=True,
                preserve_modules_root=config.output.preserve_modules_root,
                cross_file_bundling=False,
            ),
            inputs=tuple(files),
            output_tags=MappingProxyType({p: info.type.value for p, info in files.items()}),
        )

    def _custom(
        self,
        config: MixedFrameworkConfig,
        files: FileFrameworkMap,
        capabilities: tuple[Capability, ...],
        orchestrator: CapabilityOrchestrator,
        resolver: FileFrameworkResolver,
        events: EventSink,
    ) -> BuildModeDecision:
        groups: list[GroupPlan] = []
        for name, rule in config.groups.items():
            members = tuple(p for p in files if rule.matches(p))
            if not members:
                events.emit(PlanEvent(
                    kind=EventKind.GROUP_EMPTY,
                    subject=name,
                    reason=f"pattern {rule.pattern!r} ({rule.match}) matched no source files",
                    suggestion="Check the group pattern against root-relative paths such as src/components/Button.vue",
                ))
                continue

            framework = (
                dominant_framework(members, files, config.jsx.default_framework)
                if rule.framework == AUTO
                else rule.framework
            )
            groups.append(GroupPlan(
                name=name,
                framework=framework,
                files=members,
                output_dir=rule.output_dir or f"{config.output.dir}/{name}",
                orchestration=orchestrator.plan(capabilities, [framework], resolver, target=name),
            ))

        return BuildModeDecision(
            mode=BuildMode.CUSTOM,
            output=OutputPolicy(dir=config.output.dir, format=config.output.format),
            groups=tuple(groups),
        )
