"""Infer capability metadata from a capability's name and hook shape.

Pure functions over plain values so the heuristics can be tested without
building an orchestrator.
"""

from typing import Iterable, Optional

from buildplan.orchestration.types import UNIVERSAL, CapabilityDescriptor, Phase

# Well-known plugin packages per framework
FRAMEWORK_PLUGINS: dict[str, frozenset[str]] = {
    "vue": frozenset({
        "@vitejs/plugin-vue",
        "@vitejs/plugin-vue-jsx",
        "vite-plugin-vue2",
        "unplugin-vue-components",
        "unplugin-auto-import",
    }),
    "react": frozenset({
        "@vitejs/plugin-react",
        "@vitejs/plugin-react-swc",
        "vite-plugin-react-pages",
        "@react/refresh",
    }),
    UNIVERSAL: frozenset({
        "vite-plugin-compression",
        "rollup-plugin-visualizer",
        "vite-plugin-pwa",
        "unplugin-icons",
    }),
}

# Name keyword -> framework. Order matters: "preact" contains "react".
FRAMEWORK_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("preact", "preact"),
    ("vue", "vue"),
    ("react", "react"),
    ("svelte", "svelte"),
    ("solid", "solid"),
    ("angular", "angular"),
)

# First matching keyword group decides the priority
PRIORITY_KEYWORDS: tuple[tuple[tuple[str, ...], int], ...] = (
    (("typescript",), 100),
    (("babel", "esbuild", "swc"), 90),
    (("vue", "react", "preact", "svelte", "solid", "angular"), 80),
    (("transform",), 70),
    (("optimize",), 50),
    (("compress",), 40),
    (("analyze", "visualize"), 20),
)
DEFAULT_PRIORITY = 50


def infer_frameworks(name: str) -> frozenset[str]:
    for framework, plugins in FRAMEWORK_PLUGINS.items():
        if name in plugins:
            return frozenset({framework})

    lowered = name.lower()
    for keyword, framework in FRAMEWORK_KEYWORDS:
        if keyword in lowered:
            return frozenset({framework})
    return frozenset({UNIVERSAL})


def infer_priority(name: str) -> int:
    lowered = name.lower()
    for keywords, priority in PRIORITY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return priority
    return DEFAULT_PRIORITY


def infer_phase(enforce: Optional[str], hooks: Iterable[str]) -> Phase:
    if enforce == "pre":
        return Phase.PRE
    if enforce == "post":
        return Phase.POST

    hooks = set(hooks)
    if "transform" in hooks:
        return Phase.TRANSFORM
    if hooks & {"generate_bundle", "write_bundle"}:
        return Phase.POST
    return Phase.TRANSFORM


def infer_descriptor(
    name: str,
    enforce: Optional[str] = None,
    hooks: Iterable[str] = (),
) -> CapabilityDescriptor:
    return CapabilityDescriptor(
        name=name,
        frameworks=infer_frameworks(name),
        priority=infer_priority(name),
        phase=infer_phase(enforce, hooks),
    )
