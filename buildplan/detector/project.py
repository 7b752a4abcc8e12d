"""Project shape helpers: monorepo layout and library category."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Optional

import yaml

from buildplan.core.fs import SourceIndex
from buildplan.detector.package_json import read_manifest

logger = logging.getLogger(__name__)


class ProjectCategory(StrEnum):
    COMPONENT_LIBRARY = "component-library"
    UTILITY_LIBRARY = "utility-library"
    CLI_TOOL = "cli-tool"
    NODE_LIBRARY = "node-library"
    STYLE_LIBRARY = "style-library"
    MIXED = "mixed"


@dataclass
class MonorepoInfo:
    is_monorepo: bool = False
    tool: Optional[str] = None
    workspaces: list[str] = field(default_factory=list)


# Marker file -> workspace tool, checked in order
_MONOREPO_MARKERS: list[tuple[str, str]] = [
    ("pnpm-workspace.yaml", "pnpm"),
    ("lerna.json", "lerna"),
    ("nx.json", "nx"),
    ("rush.json", "rush"),
]

_COMPONENT_PEERS = ("vue", "react", "solid-js", "svelte")


def detect_monorepo(project_root: str | Path) -> MonorepoInfo:
    """Identify the workspace tool managing project_root, if any."""
    root = Path(project_root)

    for marker, tool in _MONOREPO_MARKERS:
        path = root / marker
        if path.exists():
            workspaces = _pnpm_packages(path) if tool == "pnpm" else []
            return MonorepoInfo(is_monorepo=True, tool=tool, workspaces=workspaces)

    manifest = read_manifest(root)
    workspaces = manifest.get("workspaces")
    if isinstance(workspaces, list):
        return MonorepoInfo(is_monorepo=True, tool="yarn", workspaces=[str(w) for w in workspaces])
    if isinstance(workspaces, dict):
        packages = workspaces.get("packages") or []
        return MonorepoInfo(is_monorepo=True, tool="yarn", workspaces=[str(p) for p in packages])

    return MonorepoInfo()


def _pnpm_packages(path: Path) -> list[str]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return []
    packages = data.get("packages") if isinstance(data, dict) else None
    return [str(p) for p in packages] if isinstance(packages, list) else []


def infer_project_category(project_root: str | Path) -> ProjectCategory:
    """Guess what kind of package the project publishes.

    Checks run from most to least specific: a bin entry means a CLI, an
    engines.node declaration a Node library, a framework peer dependency a
    component library. Style libraries are only reported when style files
    clearly outnumber TypeScript sources.
    """
    root = Path(project_root)
    try:
        return _infer_category(root)
    except Exception:
        logger.exception("Project category inference failed for %s", root)
        return ProjectCategory.MIXED


def _infer_category(root: Path) -> ProjectCategory:
    manifest = read_manifest(root)
    index = SourceIndex.build(root)

    if manifest:
        if manifest.get("bin"):
            return ProjectCategory.CLI_TOOL

        engines = manifest.get("engines")
        if isinstance(engines, dict) and engines.get("node"):
            return ProjectCategory.NODE_LIBRARY

        peers = manifest.get("peerDependencies")
        if isinstance(peers, dict) and any(p in peers for p in _COMPONENT_PEERS):
            return ProjectCategory.COMPONENT_LIBRARY

        main = manifest.get("main")
        ts_files = index.find(
            ["src/**/*.ts", "src/**/*.tsx"],
            ignore=("**/*.test.*", "**/*.spec.*", "**/*.d.ts"),
        )
        declares_types = manifest.get("types") or manifest.get("typings")
        if (declares_types or (isinstance(main, str) and main.endswith(".ts"))) and ts_files:
            return ProjectCategory.UTILITY_LIBRARY

        if manifest.get("style") or manifest.get("sass"):
            style_files = index.find(["src/**/*.css", "src/**/*.less", "src/**/*.scss"])
            if len(style_files) > len(ts_files) * 2:
                return ProjectCategory.STYLE_LIBRARY

    if (root / "src" / "components").is_dir():
        return ProjectCategory.COMPONENT_LIBRARY

    return ProjectCategory.UTILITY_LIBRARY
