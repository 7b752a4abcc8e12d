"""Smart externals.

A framework whose runtime is declared (or which the coordinator always
knows about) but owns no detected source file should not be bundled: its
runtime packages go to the do-not-bundle list.
"""

import logging
from typing import Iterable, Mapping

logger = logging.getLogger(__name__)

# Runtime packages per framework. Entries ending in "/" match subpaths.
FRAMEWORK_RUNTIMES: dict[str, tuple[str, ...]] = {
    "vue": ("vue", "@vue/"),
    "react": ("react", "react-dom", "react/"),
    "preact": ("preact", "preact/"),
    "svelte": ("svelte", "svelte/"),
    "solid": ("solid-js", "solid-js/"),
    "lit": ("lit", "lit/", "@lit/"),
    "angular": ("@angular/",),
}

# Always considered, even when the manifest does not declare them
ALWAYS_CHECKED = ("vue", "react")


def declared_frameworks(dependencies: Mapping[str, str]) -> list[str]:
    declared = []
    for framework, runtimes in FRAMEWORK_RUNTIMES.items():
        for runtime in runtimes:
            if runtime.endswith("/"):
                if any(name.startswith(runtime) for name in dependencies):
                    declared.append(framework)
                    break
            elif runtime in dependencies:
                declared.append(framework)
                break
    return declared


def smart_externals(
    counts: Mapping[str, int],
    dependencies: Mapping[str, str],
    user_externals: Iterable[str] = (),
) -> list[str]:
    """User externals plus the runtimes of frameworks with no detected files.

    Subpath entries are reported as "<prefix>*", e.g. "@vue/*".
    """
    candidates = list(ALWAYS_CHECKED)
    candidates += [f for f in declared_frameworks(dependencies) if f not in candidates]

    externals = list(dict.fromkeys(user_externals))
    for framework in candidates:
        if counts.get(framework, 0) > 0:
            continue
        for runtime in FRAMEWORK_RUNTIMES[framework]:
            entry = f"{runtime}*" if runtime.endswith("/") else runtime
            if entry not in externals:
                externals.append(entry)
        logger.debug("No %s files detected; externalizing its runtime", framework)
    return externals


def is_external(module_id: str, externals: Iterable[str]) -> bool:
    for entry in externals:
        if entry.endswith("*"):
            if module_id.startswith(entry[:-1]):
                return True
        elif module_id == entry:
            return True
    return False
