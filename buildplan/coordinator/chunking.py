"""Chunk policies: which output chunk a module is bucketed into.

Both policies only bucket dependency-root modules (anything under
node_modules). Project sources return None and are left to the bundler's
default chunking.
"""

from collections import Counter
from typing import Iterable, Mapping, Optional

from buildplan.coordinator.externals import FRAMEWORK_RUNTIMES
from buildplan.core.fs import to_posix
from buildplan.scanner.types import Framework, FrameworkInfo

DEPENDENCY_ROOT = "node_modules/"


def dependency_package(module_id: str) -> Optional[str]:
    """Package name of a module under node_modules, or None for sources.

    Nested installs resolve to the innermost package:
    node_modules/a/node_modules/@scope/b/x.js -> "@scope/b".
    """
    module_id = to_posix(module_id).lstrip("\0").split("?", 1)[0]
    marker = module_id.rfind(DEPENDENCY_ROOT)
    if marker == -1:
        return None

    parts = module_id[marker + len(DEPENDENCY_ROOT):].split("/")
    if not parts or not parts[0]:
        return None
    if parts[0].startswith("@"):
        return "/".join(parts[:2]) if len(parts) > 1 else None
    return parts[0]


def package_framework(package: str) -> Optional[str]:
    for framework, runtimes in FRAMEWORK_RUNTIMES.items():
        for runtime in runtimes:
            if runtime.endswith("/"):
                if package.startswith(runtime) or package == runtime[:-1]:
                    return framework
            elif package == runtime:
                return framework
    return None


class UnifiedChunkPolicy:
    """vendor-<framework> for framework runtimes, vendor for other dependencies."""

    def chunk_for(self, module_id: str) -> Optional[str]:
        package = dependency_package(module_id)
        if package is None:
            return None
        framework = package_framework(package)
        return f"vendor-{framework}" if framework else "vendor"

    __call__ = chunk_for


class SeparatedChunkPolicy:
    """Per-framework vendor buckets and majority-framework chunk naming.

    framework_dirs maps framework names to output directories; frameworks
    without a directory, and dependencies of no known framework, land in
    the "shared" directory. With shared_runtime every dependency goes to the
    shared vendor chunk.
    """

    def __init__(
        self,
        framework_dirs: Mapping[str, str],
        files: Mapping[str, FrameworkInfo],
        shared_runtime: bool = False,
    ):
        self.framework_dirs = dict(framework_dirs)
        self.files = files
        self.shared_runtime = shared_runtime

    def directory(self, framework: Optional[str]) -> str:
        if framework and framework in self.framework_dirs:
            return self.framework_dirs[framework]
        return self.framework_dirs.get("shared") or "shared"

    def chunk_for(self, module_id: str) -> Optional[str]:
        package = dependency_package(module_id)
        if package is None:
            return None
        if self.shared_runtime:
            return f"{self.directory(None)}/vendor"
        return f"{self.directory(package_framework(package))}/vendor"

    __call__ = chunk_for

    def chunk_framework(self, module_ids: Iterable[str]) -> Optional[str]:
        """Majority framework among a chunk's modules; ties go to enumeration order."""
        counts: Counter[str] = Counter()
        for module_id in module_ids:
            info = self.files.get(module_id)
            if info is not None and info.type != Framework.UNKNOWN:
                counts[info.type.value] += 1
        if not counts:
            return None
        top = max(counts.values())
        for framework in Framework:
            if counts.get(framework.value) == top:
                return framework.value
        return None

    def chunk_file_name(self, module_ids: Iterable[str]) -> str:
        return f"{self.directory(self.chunk_framework(module_ids))}/[name]-[hash].js"
