"""package.json reader for dependency and manifest-field evidence.

The manifest is read once per classification and handed to the collectors
as a plain dict. A missing or malformed manifest is not an error: the
project simply has no dependency or field evidence.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from buildplan.detector.versions import parse_major

logger = logging.getLogger(__name__)

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")


def read_manifest(project_root: Path) -> dict:
    """Load package.json from the project root, or return {} when unusable."""
    pkg_path = Path(project_root) / "package.json"
    if not pkg_path.exists():
        logger.info("No package.json found at %s", pkg_path)
        return {}

    try:
        data = json.loads(pkg_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        logger.error("Failed to parse package.json: %s", exc)
        return {}

    if not isinstance(data, dict):
        logger.error("package.json at %s is not a JSON object", pkg_path)
        return {}
    return data


def collect_dependencies(manifest: dict) -> dict[str, str]:
    """Merge dependencies, devDependencies and peerDependencies.

    Earlier sections win when a package is declared twice, so the runtime
    version range takes precedence over a dev or peer range.
    """
    merged: dict[str, str] = {}
    for section in DEPENDENCY_SECTIONS:
        deps = manifest.get(section)
        if not isinstance(deps, dict):
            continue
        for name, version in deps.items():
            merged.setdefault(name, version if isinstance(version, str) else "")
    return merged


def split_dependency_spec(spec: str) -> tuple[str, Optional[int]]:
    """Split "vue@3" into ("vue", 3); scoped names keep their leading "@"."""
    name, sep, major = spec.rpartition("@")
    if not sep or not name or not major.isdigit():
        return spec, None
    return name, int(major)


def match_dependency(spec: str, dependencies: dict[str, str]) -> bool:
    """True when the declared dependencies satisfy a pattern spec.

    A bare name matches on presence; ``name@N`` additionally requires the
    declared version range to resolve to major version N.
    """
    name, major = split_dependency_spec(spec)
    if name not in dependencies:
        return False
    if major is None:
        return True
    return parse_major(dependencies[name]) == major


def has_dependency(dependencies: dict[str, str], *names: str) -> bool:
    return any(name in dependencies for name in names)
