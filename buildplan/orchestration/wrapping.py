"""Conditional wrapping of framework-specific capabilities.

A wrapped capability delegates each hook that carries a module id only when
the id belongs to one of its frameworks. Ids the resolver does not know
about (virtual modules, dependencies) are delegated as well; hooks without
an id always delegate.
"""

import functools
import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from buildplan.core.fs import to_posix
from buildplan.orchestration.types import Capability, CapabilityDescriptor, Hook
from buildplan.scanner.types import Framework, FrameworkInfo

# Position of the module id in each hook's arguments
HOOK_ID_ARG: dict[str, int] = {
    "resolve_id": 0,
    "load": 0,
    "transform": 1,
}

FrameworkResolver = Callable[[str], Optional[str]]


def _normalize(module_id: str, root: Optional[Path]) -> str:
    module_id = module_id.lstrip("\0").split("?", 1)[0]
    path = Path(module_id)
    if root is not None and not path.is_absolute():
        path = root / path
    return to_posix(os.path.normpath(path))


class FileFrameworkResolver:
    """Map module ids to the framework owning the file, or None if unknown."""

    def __init__(self, files: Mapping[str, FrameworkInfo], root: Optional[str | Path] = None):
        self._root = Path(root) if root is not None else None
        self._frameworks = {
            _normalize(str(path), self._root): info.type.value
            for path, info in files.items()
            if info.type != Framework.UNKNOWN
        }

    def __call__(self, module_id: str) -> Optional[str]:
        return self._frameworks.get(_normalize(module_id, self._root))


class ConditionalCapability(Capability):
    """A capability whose id-carrying hooks only fire for its frameworks."""

    def __init__(
        self,
        inner: Capability,
        descriptor: CapabilityDescriptor,
        resolver: FrameworkResolver,
    ):
        self.inner = inner
        self.resolver = resolver
        super().__init__(
            name=inner.name,
            hooks={hook: self._guard(hook, fn) for hook, fn in inner.hooks.items()},
            enforce=inner.enforce,
            descriptor=descriptor,
        )

    def applies_to(self, module_id: str) -> bool:
        framework = self.resolver(module_id)
        return framework is None or framework in self.descriptor.frameworks

    def _guard(self, hook: str, fn: Hook) -> Hook:
        position = HOOK_ID_ARG.get(hook)
        if position is None:
            return fn

        @functools.wraps(fn)
        def guarded(*args: Any, **kwargs: Any) -> Any:
            module_id = args[position] if len(args) > position else kwargs.get("id")
            if isinstance(module_id, str) and not self.applies_to(module_id):
                return None
            return fn(*args, **kwargs)

        return guarded
