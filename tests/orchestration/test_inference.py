"""Unit tests for capability metadata inference."""

import pytest

from buildplan.orchestration.inference import (
    infer_descriptor,
    infer_frameworks,
    infer_phase,
    infer_priority,
)
from buildplan.orchestration.types import UNIVERSAL, Capability, CapabilityDescriptor, Phase


class TestInferFrameworks:
    @pytest.mark.parametrize("name, expected", [
        ("@vitejs/plugin-vue", "vue"),
        ("@vitejs/plugin-react-swc", "react"),
        ("rollup-plugin-visualizer", UNIVERSAL),
        ("my-vue-icons", "vue"),
        ("preact-refresh", "preact"),
        ("react-svg", "react"),
        ("svelte-preprocess", "svelte"),
        ("replace", UNIVERSAL),
    ])
    def test_by_name(self, name, expected):
        assert infer_frameworks(name) == frozenset({expected})


class TestInferPriority:
    @pytest.mark.parametrize("name, expected", [
        ("rollup-plugin-typescript", 100),
        ("esbuild-transform", 90),
        ("@vitejs/plugin-vue", 80),
        ("custom-transform", 70),
        ("image-optimize", 50),
        ("gzip-compress", 40),
        ("bundle-analyze", 20),
        ("banner", 50),
    ])
    def test_first_matching_keyword_group(self, name, expected):
        assert infer_priority(name) == expected

    def test_case_insensitive(self):
        assert infer_priority("TypeScriptPaths") == 100


class TestInferPhase:
    def test_enforce_wins(self):
        assert infer_phase("pre", ["transform"]) == Phase.PRE
        assert infer_phase("post", ["transform"]) == Phase.POST

    def test_transform_hook(self):
        assert infer_phase(None, ["resolve_id", "transform"]) == Phase.TRANSFORM

    def test_bundle_hooks_run_late(self):
        assert infer_phase(None, ["generate_bundle"]) == Phase.POST

    def test_default(self):
        assert infer_phase(None, []) == Phase.TRANSFORM


class TestInferDescriptor:
    def test_full_record(self):
        desc = infer_descriptor("@vitejs/plugin-vue", "pre", ["transform"])
        assert desc == CapabilityDescriptor(
            name="@vitejs/plugin-vue",
            frameworks=frozenset({"vue"}),
            priority=80,
            phase=Phase.PRE,
        )
        assert not desc.universal

    def test_pure_function(self):
        assert infer_descriptor("x") == infer_descriptor("x")


class TestCapabilityModel:
    def test_rejects_unknown_hooks(self):
        with pytest.raises(ValueError):
            Capability("bad", hooks={"render_chunk": lambda: None})

    def test_rejects_bad_enforce(self):
        with pytest.raises(ValueError):
            Capability("bad", enforce="early")

    def test_call_missing_hook_returns_none(self):
        assert Capability("noop").call("transform", "code", "id") is None

    def test_conflicts_are_symmetric(self):
        a = CapabilityDescriptor(name="a", conflicts=frozenset({"b"}))
        b = CapabilityDescriptor(name="b")
        assert a.conflicts_with(b)
        assert b.conflicts_with(a)
