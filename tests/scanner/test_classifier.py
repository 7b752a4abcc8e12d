"""Tests for the per-file framework classifier and its cache."""

import pytest

from buildplan.core.errors import SyntaxScanTimeout
from buildplan.scanner import ast_scanner
from buildplan.scanner.cache import FrameworkCache
from buildplan.scanner.classifier import FrameworkClassifier, detect_from_extension
from buildplan.scanner.types import DetectionConfig, DetectionStage, Framework, FrameworkInfo

# Imports alone score 0.6 for Vue; the four composition calls push the
# syntax scan to 0.8.
VUE_MODULE = """import { ref, computed, watch, reactive } from 'vue'
const a = ref(0)
const b = computed(() => a.value)
watch(a, () => {})
const s = reactive({})
"""

HOOKS_ONLY = """export function Panel() {
  const [open, setOpen] = useState(false);
  useEffect(() => {}, [open]);
  return null;
}
"""


class TestFrameworkInfo:
    def test_rejects_out_of_range_confidence(self):
        with pytest.raises(ValueError):
            FrameworkInfo(type=Framework.VUE, confidence=1.5)

    def test_of_sets_jsx_hint(self):
        info = FrameworkInfo.of(Framework.REACT, 0.5, DetectionStage.IMPORTS)
        assert info.jsx == "react-jsx"
        assert FrameworkInfo.of(Framework.LIT, 0.5, DetectionStage.IMPORTS).jsx is None

    def test_detection_config_rejects_unknown_framework(self):
        with pytest.raises(ValueError):
            DetectionConfig(file_associations={"src/**": "backbone"})


class TestFrameworkCache:
    def test_first_writer_wins(self):
        cache = FrameworkCache()
        first = FrameworkInfo.of(Framework.VUE, 0.6, DetectionStage.IMPORTS)
        second = FrameworkInfo.of(Framework.REACT, 0.9, DetectionStage.SYNTAX)
        assert cache.put("a.ts", first) is first
        assert cache.put("a.ts", second) is first
        assert cache.get("a.ts") is first

    def test_clear_and_snapshot(self):
        cache = FrameworkCache()
        cache.put("a.ts", FrameworkInfo.unknown())
        snapshot = cache.snapshot()
        assert "a.ts" in cache
        assert len(cache) == 1

        cache.clear()
        assert len(cache) == 0
        assert "a.ts" in snapshot
        with pytest.raises(TypeError):
            snapshot["b.ts"] = FrameworkInfo.unknown()


class TestDetectionCascade:
    def test_vue_extension_is_certain(self, tmp_path):
        info = FrameworkClassifier().classify(tmp_path / "Button.vue")
        assert info.type == Framework.VUE
        assert info.confidence == 1.0
        assert info.source == DetectionStage.EXTENSION

    def test_name_marker(self, tmp_path):
        info = detect_from_extension(tmp_path / "button.react.tsx")
        assert info.type == Framework.REACT
        assert info.confidence == 0.9

    def test_unreadable_file_keeps_path_signals(self, tmp_path):
        info = FrameworkClassifier().classify(tmp_path / "missing.solid.tsx")
        assert info.type == Framework.SOLID
        assert info.confidence == 0.9

    def test_association_beats_imports(self, tmp_path):
        path = tmp_path / "src" / "legacy" / "Widget.tsx"
        path.parent.mkdir(parents=True)
        path.write_text("import { useState } from 'react'\n")

        config = DetectionConfig(root=tmp_path, file_associations={"src/legacy/**": "vue"})
        info = FrameworkClassifier(config).classify(path)
        assert info.type == Framework.VUE
        assert info.confidence == 0.95
        assert info.source == DetectionStage.ASSOCIATION

    def test_syntax_scan_beats_weaker_import_signal(self, tmp_path):
        path = tmp_path / "state.ts"
        path.write_text(VUE_MODULE)
        info = FrameworkClassifier().classify(path)
        assert info.type == Framework.VUE
        assert info.source == DetectionStage.SYNTAX
        assert info.confidence == pytest.approx(0.8)

    def test_pragma(self, tmp_path):
        path = tmp_path / "View.tsx"
        path.write_text("/** @jsx h */\nexport const View = () => <div/>;\n")
        info = FrameworkClassifier().classify(path)
        assert info.type == Framework.VUE
        assert info.pragma == "h"

    def test_default_framework(self, tmp_path):
        path = tmp_path / "util.ts"
        path.write_text("export const x = 1;\n")

        assert FrameworkClassifier().classify(path).type == Framework.UNKNOWN

        info = FrameworkClassifier(DetectionConfig(default_framework="react")).classify(path)
        assert info.type == Framework.REACT
        assert info.confidence == 0.1
        assert info.source == DetectionStage.DEFAULT

    def test_content_detection_can_be_disabled(self, tmp_path):
        path = tmp_path / "state.ts"
        path.write_text(VUE_MODULE)
        config = DetectionConfig(enable_content_detection=False)
        assert FrameworkClassifier(config).classify(path).type == Framework.UNKNOWN

    def test_size_guard_skips_syntax_scan(self, tmp_path):
        path = tmp_path / "Panel.tsx"
        path.write_text(HOOKS_ONLY)

        assert FrameworkClassifier().classify(path).type == Framework.REACT
        guarded = FrameworkClassifier(DetectionConfig(max_scan_file_size=10))
        assert guarded.classify(path).type == Framework.UNKNOWN

    def test_scan_timeout_keeps_earlier_stages(self, tmp_path, monkeypatch):
        path = tmp_path / "state.ts"
        path.write_text(VUE_MODULE)

        def too_slow(file_path, content, deadline=None):
            raise SyntaxScanTimeout(str(file_path), "deadline exceeded")

        monkeypatch.setattr(ast_scanner, "scan_syntax", too_slow)
        info = FrameworkClassifier().classify(path)
        assert info.type == Framework.VUE
        assert info.source == DetectionStage.IMPORTS
        assert info.confidence == 0.6


class TestIdempotence:
    def test_same_result_after_cache_clear(self, tmp_path):
        path = tmp_path / "Panel.tsx"
        path.write_text(HOOKS_ONLY)
        classifier = FrameworkClassifier()

        first = classifier.classify(path)
        assert classifier.classify(path) is first

        classifier.clear_cache()
        assert len(classifier.cache) == 0
        assert classifier.classify(path) == first

    def test_shared_cache_between_classifiers(self, tmp_path):
        path = tmp_path / "state.ts"
        path.write_text(VUE_MODULE)
        cache = FrameworkCache()

        first = FrameworkClassifier(cache=cache).classify(path)
        second = FrameworkClassifier(DetectionConfig(enable_syntax_scan=False), cache=cache).classify(path)
        assert second is first


class TestBatchClassification:
    @pytest.fixture
    def ten_files(self, tmp_path):
        paths = []
        for i in range(10):
            path = tmp_path / f"f{i}.ts"
            path.write_text(VUE_MODULE)
            paths.append(path)
        return paths

    @pytest.fixture
    def failing_parse(self, monkeypatch):
        real = ast_scanner.count_features

        def count_features(file_path, content, deadline=None):
            if file_path.name == "f3.ts":
                raise RuntimeError("parser crashed")
            return real(file_path, content, deadline)

        monkeypatch.setattr(ast_scanner, "count_features", count_features)

    def test_one_failing_parse_among_ten(self, ten_files, failing_parse):
        results = FrameworkClassifier().classify_batch(ten_files)
        assert len(results) == 10
        assert set(results) == {str(p) for p in ten_files}

        without_syntax = FrameworkClassifier(DetectionConfig(enable_syntax_scan=False))
        failed = str(ten_files[3])
        assert results[failed] == without_syntax.classify(ten_files[3])
        assert results[failed].source == DetectionStage.IMPORTS

        others = [r for path, r in results.items() if path != failed]
        assert all(r.source == DetectionStage.SYNTAX for r in others)

    def test_parallel_batch_matches_sequential(self, ten_files, failing_parse):
        sequential = FrameworkClassifier().classify_batch(ten_files)
        parallel = FrameworkClassifier().classify_batch(ten_files, parallel=True)
        assert parallel == sequential

    @pytest.mark.asyncio
    async def test_parallel_batch_inside_running_loop(self, ten_files):
        results = FrameworkClassifier().classify_batch(ten_files, parallel=True)
        assert len(results) == 10
        assert all(r.source == DetectionStage.SYNTAX for r in results.values())

    def test_parallel_empty_batch(self):
        assert FrameworkClassifier().classify_batch([], parallel=True) == {}

    @pytest.mark.asyncio
    async def test_classify_many_isolates_exceptions(self, ten_files, monkeypatch):
        classifier = FrameworkClassifier()
        real = classifier._detect

        def detect(path):
            if path.name == "f7.ts":
                raise OSError("device gone")
            return real(path)

        monkeypatch.setattr(classifier, "_detect", detect)
        results = await classifier.classify_many(ten_files)

        assert len(results) == 10
        assert results[str(ten_files[7])] == FrameworkInfo.unknown()
        assert str(ten_files[7]) not in classifier.cache
        assert len(classifier.cache) == 9
