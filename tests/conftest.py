"""Shared fixtures: small on-disk project trees built under tmp_path."""

import json
from pathlib import Path

import pytest


def _write(root: Path, files: dict[str, str], package: dict | None) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    if package is not None:
        (root / "package.json").write_text(json.dumps(package))
    return root


@pytest.fixture
def make_project(tmp_path):
    """Return a factory writing {relative path: content} plus an optional package.json."""

    def factory(files: dict[str, str] | None = None, package: dict | None = None, name: str = "project"):
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        return _write(root, files or {}, package)

    return factory


@pytest.fixture
def ts_files():
    """Factory for n plain TypeScript modules under src/."""

    def factory(n: int, prefix: str = "src/util") -> dict[str, str]:
        return {f"{prefix}{i}.ts": f"export const value{i} = {i};\n" for i in range(n)}

    return factory
