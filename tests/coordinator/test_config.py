"""Tests for mixed-framework configuration validation."""

import pytest
from pydantic import ValidationError

from buildplan.coordinator.config import (
    BuildMode,
    GroupRule,
    JsxConfig,
    MatchKind,
    MixedFrameworkConfig,
    OrchestrationPolicy,
    OutputConfig,
)


class TestMixedFrameworkConfig:
    def test_defaults(self):
        config = MixedFrameworkConfig()
        assert config.mode == BuildMode.UNIFIED
        assert config.jsx.default_framework == "react"
        assert config.output.dir == "dist"
        assert config.output.framework_dirs == {"vue": "vue", "react": "react", "shared": "shared"}
        assert config.advanced.smart_externals is True

    def test_from_dict(self):
        config = MixedFrameworkConfig.model_validate({
            "mode": "custom",
            "groups": {"legacy": {"pattern": "src/legacy/**", "match": "glob", "framework": "vue"}},
            "external": ["lodash"],
        })
        assert config.mode == BuildMode.CUSTOM
        assert config.groups["legacy"].match == MatchKind.GLOB

    def test_custom_mode_requires_groups(self):
        with pytest.raises(ValidationError, match="at least one group"):
            MixedFrameworkConfig(mode="custom")

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            MixedFrameworkConfig(mode="monolith")

    def test_unknown_default_framework(self):
        with pytest.raises(ValidationError):
            MixedFrameworkConfig.model_validate({"jsx": {"default_framework": "backbone"}})

    def test_unknown_association_framework(self):
        with pytest.raises(ValidationError):
            MixedFrameworkConfig.model_validate({"jsx": {"file_associations": {"src/**": "ember"}}})

    def test_output_format(self):
        assert OutputConfig(format="cjs").format == "cjs"
        with pytest.raises(ValidationError):
            OutputConfig(format="amd")


class TestGroupRule:
    def test_substring(self):
        rule = GroupRule(pattern="components/")
        assert rule.matches("src/components/Button.vue")
        assert not rule.matches("src/pages/Home.vue")

    def test_glob(self):
        rule = GroupRule(pattern="src/**/*.vue", match="glob")
        assert rule.matches("src/a/b/Button.vue")
        assert not rule.matches("src/a/Card.tsx")

    def test_regex(self):
        rule = GroupRule(pattern=r"\.(tsx|jsx)$", match="regex")
        assert rule.matches("src/Card.tsx")
        assert not rule.matches("src/Button.vue")

    def test_invalid_regex(self):
        with pytest.raises(ValidationError, match="invalid regex"):
            GroupRule(pattern="([", match="regex")

    def test_empty_pattern(self):
        with pytest.raises(ValidationError):
            GroupRule(pattern="")

    def test_framework_must_be_known_or_auto(self):
        assert GroupRule(pattern="x").framework == "auto"
        assert GroupRule(pattern="x", framework="svelte").framework == "svelte"
        with pytest.raises(ValidationError):
            GroupRule(pattern="x", framework="unknown")


class TestOrchestrationPolicy:
    def test_to_config(self):
        config = OrchestrationPolicy(strict=True, deny=["a"], allow=["b"]).to_config()
        assert config.strict is True
        assert config.deny == frozenset({"a"})
        assert config.allow == frozenset({"b"})

    def test_allow_defaults_to_everything(self):
        assert OrchestrationPolicy().to_config().allow is None


class TestJsxConfig:
    def test_default_framework_comes_from_settings(self, monkeypatch):
        monkeypatch.setenv("BUILDPLAN_DEFAULT_FRAMEWORK", "vue")
        assert JsxConfig().default_framework == "vue"
        assert MixedFrameworkConfig().jsx.default_framework == "vue"

    def test_explicit_value_wins(self, monkeypatch):
        monkeypatch.setenv("BUILDPLAN_DEFAULT_FRAMEWORK", "vue")
        assert JsxConfig(default_framework="solid").default_framework == "solid"

    def test_unknown_framework_from_settings(self, monkeypatch):
        monkeypatch.setenv("BUILDPLAN_DEFAULT_FRAMEWORK", "backbone")
        with pytest.raises(ValidationError):
            JsxConfig()
