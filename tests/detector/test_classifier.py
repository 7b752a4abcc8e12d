"""Tests for project-level library classification."""

import math

import pytest

from buildplan.core.events import CollectingEventSink, EventKind
from buildplan.detector import collectors
from buildplan.detector.classifier import best_match, classify, final_scores
from buildplan.detector.collectors import ProjectContext, run_collectors
from buildplan.detector.types import EvidenceItem, EvidenceKind, LibraryType

TS_PACKAGE = {"name": "utils", "devDependencies": {"typescript": "^5.4.0"}}


def _item(weight: float) -> EvidenceItem:
    return EvidenceItem(kind=EvidenceKind.FILE, description="test evidence", weight=weight)


class TestScoreNormalization:
    def test_scores_within_unit_interval_with_unique_max(self, make_project, ts_files):
        root = make_project({**ts_files(12), "tsconfig.json": "{}"}, package=TS_PACKAGE)
        normalized = final_scores(run_collectors(ProjectContext.load(root)))

        assert all(0.0 <= s <= 1.0 for s in normalized.values())
        assert [t for t, s in normalized.items() if s == 1.0] == [LibraryType.TYPESCRIPT]

    def test_no_evidence_normalizes_to_zero(self):
        normalized = final_scores(collectors.empty_scores())
        assert set(normalized.values()) == {0.0}

    def test_true_tie_broken_by_priority_then_order(self):
        normalized = {
            LibraryType.TYPESCRIPT: 1.0,
            LibraryType.VUE2: 1.0,
            LibraryType.VUE3: 1.0,
        }
        assert best_match(normalized) == (LibraryType.VUE2, 1.0)

    @pytest.mark.parametrize("weight", [float("nan"), float("inf"), -0.5])
    def test_invalid_weights_are_ignored(self, weight):
        scores = collectors.empty_scores()
        scores[LibraryType.REACT].add(_item(weight))
        assert scores[LibraryType.REACT].raw == 0.0
        assert scores[LibraryType.REACT].evidence == []

    def test_weighted_applies_priority(self):
        scores = collectors.empty_scores()
        scores[LibraryType.TYPESCRIPT].add(_item(1.0))
        assert math.isclose(scores[LibraryType.TYPESCRIPT].weighted, 0.5)


class TestMonotonicity:
    @pytest.mark.parametrize("target", [LibraryType.TYPESCRIPT, LibraryType.REACT, LibraryType.MIXED])
    def test_more_evidence_never_lowers_a_score(self, target):
        scores = collectors.empty_scores()
        scores[LibraryType.REACT].add(_item(0.6))
        scores[LibraryType.MIXED].add(_item(0.9))
        scores[LibraryType.TYPESCRIPT].add(_item(0.4))

        before = final_scores(scores)[target]
        for _ in range(3):
            scores[target].add(_item(0.3))
            after = final_scores(scores)[target]
            assert after >= before
            before = after


class TestStyleSuppression:
    def test_five_style_files_and_twenty_ts_files_never_style(self, make_project, ts_files):
        files = {**ts_files(20), **{f"src/styles/s{i}.css": "a {}" for i in range(5)}}
        root = make_project(files, package={"name": "x", "dependencies": {"postcss": "^8.0.0"}})

        scores = run_collectors(ProjectContext.load(root))
        assert scores[LibraryType.STYLE].raw == 0.0
        assert classify(root).type != LibraryType.STYLE

    def test_style_heavy_project_keeps_style_candidate(self, make_project):
        files = {f"src/s{i}.scss": "a {}" for i in range(12)}
        files["src/index.ts"] = "export {};"
        root = make_project(files, package={"name": "theme"})

        scores = run_collectors(ProjectContext.load(root))
        assert scores[LibraryType.STYLE].raw > 0.0


class TestFastPaths:
    def test_vue_dependency_with_tsx_is_vue_jsx(self, make_project):
        root = make_project(
            {"src/App.tsx": "export default {}", "src/main.ts": "import App from './App'"},
            package={"dependencies": {"vue": "^3.3.4"}},
        )
        result = classify(root)
        assert result.type == LibraryType.VUE3
        assert result.confidence == 1.0
        assert result.variant == "jsx"

    def test_vue_jsx_fast_path_ignores_react_dependency(self, make_project):
        root = make_project(
            {"src/App.tsx": ""},
            package={"dependencies": {"vue": "^2.7.0", "react": "^18.2.0"}},
        )
        result = classify(root)
        assert result.type == LibraryType.VUE2
        assert result.variant == "jsx"

    def test_unparseable_vue_version_emits_fallback_event(self, make_project):
        root = make_project({"src/App.tsx": ""}, package={"dependencies": {"vue": "latest"}})
        events = CollectingEventSink()
        result = classify(root, events=events)

        assert result.type == LibraryType.VUE3
        fallback = events.of_kind(EventKind.VERSION_FALLBACK)
        assert len(fallback) == 1
        assert fallback[0].data["declared"] == "latest"

    def test_solid_marker_dependency(self, make_project):
        root = make_project(
            {"src/Counter.tsx": "import { createSignal } from 'solid-js'"},
            package={"dependencies": {"solid-js": "^1.8.0"}},
        )
        result = classify(root)
        assert result.type == LibraryType.SOLID
        assert result.confidence == 1.0

    def test_vue_single_file_components(self, make_project):
        root = make_project(
            {"src/Button.vue": "<template><button/></template>", "src/index.ts": ""},
            package={"peerDependencies": {"vue": "^2.6.14"}},
        )
        result = classify(root)
        assert result.type == LibraryType.VUE2
        assert result.confidence == 1.0
        assert result.variant is None

    def test_svelte_components(self, make_project):
        root = make_project(
            {"src/Button.svelte": "<button/>"},
            package={"devDependencies": {"svelte": "^4.0.0"}},
        )
        assert classify(root).type == LibraryType.SVELTE

    def test_svelte_components_win_over_react_sources(self, make_project):
        root = make_project(
            {"src/Button.svelte": "<button/>", "src/App.tsx": "export const App = () => null"},
            package={"dependencies": {"svelte": "^4.0.0", "react": "^18.2.0"}},
        )
        result = classify(root)
        assert result.type == LibraryType.SVELTE
        assert result.confidence == 1.0
        assert result.frameworks == ()


class TestMixedDetection:
    def test_vue_and_tsx_with_both_dependencies_is_enhanced_mixed(self, make_project):
        root = make_project(
            {"src/Button.vue": "<template/>", "src/Card.tsx": "export const Card = () => null"},
            package={"dependencies": {"vue": "^3.4.0", "react": "^18.2.0", "react-dom": "^18.2.0"}},
        )
        result = classify(root)
        assert result.type == LibraryType.ENHANCED_MIXED
        assert result.confidence == 0.95
        assert result.frameworks == ("vue", "react")

    def test_tsx_without_react_dependency_is_not_react(self, make_project):
        root = make_project(
            {"src/Button.vue": "<template/>", "src/Card.tsx": ""},
            package={"dependencies": {"vue": "^3.4.0"}},
        )
        result = classify(root)
        assert result.type == LibraryType.VUE3

    def test_per_file_counts_count_as_evidence(self, make_project, ts_files):
        root = make_project(ts_files(3), package={"name": "x"})
        result = classify(root, file_frameworks={"vue": 2, "react": 3})
        assert result.type == LibraryType.ENHANCED_MIXED
        assert result.frameworks == ("vue", "react")


class TestFallbacks:
    def test_empty_project_falls_back_to_mixed(self, make_project):
        root = make_project(package={"name": "empty"})
        result = classify(root)
        assert result.type == LibraryType.MIXED
        assert result.confidence == 0.0

    def test_missing_root_returns_error_result(self, tmp_path):
        result = classify(tmp_path / "missing")
        assert result.type == LibraryType.MIXED
        assert result.confidence == 0.1
        assert result.evidence[0].kind == EvidenceKind.ERROR

    def test_pipeline_exception_returns_error_result(self, make_project, monkeypatch):
        root = make_project({"src/a.ts": ""})

        def explode(cls, root):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(ProjectContext, "load", classmethod(explode))
        result = classify(root)
        assert result.type == LibraryType.MIXED
        assert "disk on fire" in result.evidence[0].description

    def test_failing_collector_is_isolated(self, make_project, ts_files, monkeypatch):
        root = make_project({**ts_files(12), "tsconfig.json": "{}"}, package=TS_PACKAGE)

        def broken(ctx, library_type, pattern):
            raise ValueError("broken collector")

        monkeypatch.setattr(collectors, "COLLECTORS", [("broken", broken)] + collectors.COLLECTORS)
        assert classify(root).type == LibraryType.TYPESCRIPT


class TestEndToEnd:
    def test_typescript_project_with_a_few_stylesheets(self, make_project, ts_files):
        files = {**ts_files(12), **{f"src/theme{i}.css": "a {}" for i in range(3)}}
        files["tsconfig.json"] = "{}"
        root = make_project(files, package=TS_PACKAGE)

        scores = run_collectors(ProjectContext.load(root))
        assert scores[LibraryType.STYLE].raw == 0.0
        assert scores[LibraryType.STYLE].evidence == []

        result = classify(root)
        assert result.type == LibraryType.TYPESCRIPT
        assert result.confidence == 1.0
        assert LibraryType.STYLE not in dict(result.alternates)
        assert [t for t, _ in result.alternates] == [LibraryType.MIXED]

    def test_result_serializes(self, make_project, ts_files):
        root = make_project({**ts_files(12), "tsconfig.json": "{}"}, package=TS_PACKAGE)
        data = classify(root).to_dict()
        assert data["type"] == "typescript"
        assert data["evidence"]
