"""Pydantic models for mixed-framework build configuration.

MixedFrameworkConfig is validated once when the coordinator receives it;
a malformed config raises pydantic.ValidationError before any file is read.
"""

import re
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from buildplan.core.config import get_settings
from buildplan.core.fs import matches
from buildplan.orchestration.types import OrchestrationConfig
from buildplan.scanner.types import Framework

AUTO = "auto"

_KNOWN_FRAMEWORKS = {f.value for f in Framework if f != Framework.UNKNOWN}


def _check_framework(value: str) -> str:
    if value not in _KNOWN_FRAMEWORKS:
        raise ValueError(f"unknown framework {value!r}; expected one of {sorted(_KNOWN_FRAMEWORKS)}")
    return value


class BuildMode(StrEnum):
    UNIFIED = "unified"
    SEPARATED = "separated"
    COMPONENT = "component"
    CUSTOM = "custom"


class MatchKind(StrEnum):
    SUBSTRING = "substring"
    GLOB = "glob"
    REGEX = "regex"


class GroupRule(BaseModel):
    """Selects the files of one custom-mode group."""

    pattern: str = Field(..., min_length=1, description="Substring, glob or regex over root-relative paths")
    match: MatchKind = MatchKind.SUBSTRING
    framework: str = Field(default=AUTO, description='Framework name, or "auto" for a majority vote')
    output_dir: Optional[str] = None

    @field_validator("framework")
    @classmethod
    def _framework(cls, v: str) -> str:
        return v if v == AUTO else _check_framework(v)

    @model_validator(mode="after")
    def _compiles(self) -> "GroupRule":
        if self.match == MatchKind.REGEX:
            try:
                re.compile(self.pattern)
            except re.error as exc:
                raise ValueError(f"invalid regex {self.pattern!r}: {exc}") from exc
        return self

    def matches(self, relative_path: str) -> bool:
        if self.match == MatchKind.GLOB:
            return matches(relative_path, self.pattern)
        if self.match == MatchKind.REGEX:
            return re.search(self.pattern, relative_path) is not None
        return self.pattern in relative_path


class JsxConfig(BaseModel):
    auto_detect: bool = True
    default_framework: str = Field(
        default_factory=lambda: get_settings().default_framework,
        validate_default=True,
    )
    file_associations: dict[str, str] = Field(default_factory=dict)

    @field_validator("default_framework")
    @classmethod
    def _default_framework(cls, v: str) -> str:
        return _check_framework(v)

    @field_validator("file_associations")
    @classmethod
    def _associations(cls, v: dict[str, str]) -> dict[str, str]:
        for framework in v.values():
            _check_framework(framework)
        return v


class OutputConfig(BaseModel):
    dir: str = "dist"
    format: str = Field(default="es", pattern="^(es|esm|cjs|umd|iife)$")
    preserve_modules_root: str = "src"
    framework_dirs: dict[str, str] = Field(
        default_factory=lambda: {"vue": "vue", "react": "react", "shared": "shared"}
    )

    def framework_dir(self, framework: str) -> str:
        return self.framework_dirs.get(framework) or self.framework_dirs.get("shared") or "shared"


class AdvancedConfig(BaseModel):
    parallel_detection: bool = True
    cache_detection: bool = True
    smart_externals: bool = True
    shared_runtime: bool = False


class OrchestrationPolicy(BaseModel):
    strict: bool = False
    auto_resolve_conflicts: bool = True
    deny: list[str] = Field(default_factory=list)
    allow: Optional[list[str]] = None

    def to_config(self) -> OrchestrationConfig:
        return OrchestrationConfig(
            strict=self.strict,
            auto_resolve_conflicts=self.auto_resolve_conflicts,
            deny=frozenset(self.deny),
            allow=frozenset(self.allow) if self.allow is not None else None,
        )


class MixedFrameworkConfig(BaseModel):
    """Build configuration for a project that may mix UI frameworks."""

    mode: BuildMode = BuildMode.UNIFIED
    groups: dict[str, GroupRule] = Field(default_factory=dict)
    jsx: JsxConfig = Field(default_factory=JsxConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)
    orchestration: OrchestrationPolicy = Field(default_factory=OrchestrationPolicy)
    external: list[str] = Field(default_factory=list, description="Modules never bundled")

    @model_validator(mode="after")
    def _custom_needs_groups(self) -> "MixedFrameworkConfig":
        if self.mode == BuildMode.CUSTOM and not self.groups:
            raise ValueError("custom mode requires at least one group")
        return self
