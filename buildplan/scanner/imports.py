"""Import-statement scan for per-file framework detection.

Extracts every module specifier a file references (static and side-effect
imports, re-exports, dynamic import() and require()) and scores them per
framework: a core package counts 10, an ecosystem package 5 and any
specifier merely containing the framework keyword 2. The scores add up, so
``import { ref } from "vue"`` is worth 12 for Vue.
"""

import re
from dataclasses import dataclass
from typing import Optional

from buildplan.scanner.types import DetectionStage, Framework, FrameworkInfo

CORE_WEIGHT = 10
ECOSYSTEM_WEIGHT = 5
KEYWORD_WEIGHT = 2

_SPECIFIER = r"""['"]([^'"\n]+)['"]"""

_IMPORT_PATTERNS = [
    # import x from "m", import { a, b } from "m", import "m"
    re.compile(r"\bimport\s+(?:type\s+)?(?:[\w*{}\s,$]+?\s+from\s+)?" + _SPECIFIER),
    # export { a } from "m", export * from "m"
    re.compile(r"\bexport\s+(?:type\s+)?(?:\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s*from\s+" + _SPECIFIER),
    re.compile(r"\bimport\s*\(\s*" + _SPECIFIER + r"\s*\)"),
    re.compile(r"\brequire\s*\(\s*" + _SPECIFIER + r"\s*\)"),
]


@dataclass(frozen=True)
class ImportRule:
    framework: Framework
    core: tuple[str, ...] = ()
    core_prefixes: tuple[str, ...] = ()
    ecosystem: tuple[str, ...] = ()
    ecosystem_prefixes: tuple[str, ...] = ()
    keyword: Optional[str] = None

    def is_core(self, module: str) -> bool:
        return module in self.core or module.startswith(self.core_prefixes)

    def score(self, module: str) -> int:
        total = 0
        if self.is_core(module):
            total += CORE_WEIGHT
        if module in self.ecosystem or module.startswith(self.ecosystem_prefixes):
            total += ECOSYSTEM_WEIGHT
        if self.keyword and self.keyword in module:
            total += KEYWORD_WEIGHT
        return total


IMPORT_RULES: tuple[ImportRule, ...] = (
    ImportRule(
        framework=Framework.VUE,
        core=("vue",),
        core_prefixes=("@vue/",),
        ecosystem=("vue-router", "vuex", "pinia"),
        keyword="vue",
    ),
    ImportRule(
        framework=Framework.REACT,
        core=("react", "react-dom"),
        core_prefixes=("react/", "react-dom/"),
        ecosystem=("react-router", "react-router-dom", "redux", "react-redux"),
        ecosystem_prefixes=("@react/",),
        keyword="react",
    ),
    ImportRule(
        framework=Framework.PREACT,
        core=("preact",),
        core_prefixes=("preact/",),
        ecosystem=("preact-router",),
        ecosystem_prefixes=("@preact/",),
        keyword="preact",
    ),
    ImportRule(
        framework=Framework.SOLID,
        core=("solid-js",),
        core_prefixes=("solid-js/",),
        ecosystem_prefixes=("@solidjs/",),
        keyword="solid",
    ),
    ImportRule(
        framework=Framework.SVELTE,
        core=("svelte",),
        core_prefixes=("svelte/",),
        ecosystem_prefixes=("@sveltejs/",),
        keyword="svelte",
    ),
    # No keyword: "lit" is a substring of too many unrelated names
    ImportRule(
        framework=Framework.LIT,
        core=("lit", "lit-element", "lit-html"),
        core_prefixes=("lit/", "@lit/"),
    ),
    ImportRule(
        framework=Framework.ANGULAR,
        core=("@angular/core",),
        ecosystem_prefixes=("@angular/",),
        keyword="angular",
    ),
)


def extract_imports(content: str) -> list[str]:
    """Return every module specifier referenced by the source, in order found."""
    found: list[tuple[int, str]] = []
    for pattern in _IMPORT_PATTERNS:
        found.extend((m.start(), m.group(1)) for m in pattern.finditer(content))
    found.sort()
    return [module for _, module in found]


def score_imports(modules: list[str]) -> dict[Framework, int]:
    scores: dict[Framework, int] = {}
    for module in modules:
        for rule in IMPORT_RULES:
            points = rule.score(module)
            if points:
                scores[rule.framework] = scores.get(rule.framework, 0) + points
    return scores


def framework_for_module(module: str) -> Optional[Framework]:
    """The framework whose core package is `module`, if any."""
    for rule in IMPORT_RULES:
        if rule.is_core(module):
            return rule.framework
    return None


def unique_leader(scores: dict[Framework, int]) -> Optional[tuple[Framework, int]]:
    """The top-scoring framework, or None when nothing scored or the top is tied."""
    ranked = sorted(scores.items(), key=lambda item: -item[1])
    if not ranked or ranked[0][1] <= 0:
        return None
    if len(ranked) > 1 and ranked[1][1] >= ranked[0][1]:
        return None
    return ranked[0]


def detect_from_imports(content: str) -> FrameworkInfo:
    leader = unique_leader(score_imports(extract_imports(content)))
    if leader is None:
        return FrameworkInfo.unknown()
    framework, score = leader
    return FrameworkInfo.of(framework, min(score / 20, 0.95), DetectionStage.IMPORTS)
