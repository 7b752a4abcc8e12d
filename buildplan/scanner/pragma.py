"""JSX pragma scan.

Recognizes ``@jsx <factory>`` and ``@jsxImportSource <package>`` in block
or line comments, e.g. ``/** @jsx h */`` or ``// @jsxImportSource preact``.
"""

import re

from buildplan.scanner.imports import framework_for_module
from buildplan.scanner.types import DetectionStage, Framework, FrameworkInfo

PRAGMA_CONFIDENCE = 0.9
IMPORT_SOURCE_CONFIDENCE = 0.95

_COMMENT_PREFIX = r"(?:/\*(?:[^*]|\*(?!/))*?|//[^\n]*?)"
_JSX_PRAGMA = re.compile(_COMMENT_PREFIX + r"@jsx\s+([\w$.]+)")
_JSX_IMPORT_SOURCE = re.compile(_COMMENT_PREFIX + r"@jsxImportSource\s+([\w@$./-]+)")

PRAGMA_FRAMEWORKS: dict[str, Framework] = {
    "h": Framework.VUE,
    "createElement": Framework.VUE,
    "React.createElement": Framework.REACT,
    "jsx": Framework.REACT,
}


def detect_from_pragma(content: str) -> FrameworkInfo:
    match = _JSX_PRAGMA.search(content)
    if match:
        pragma = match.group(1)
        framework = PRAGMA_FRAMEWORKS.get(pragma)
        if framework:
            return FrameworkInfo.of(framework, PRAGMA_CONFIDENCE, DetectionStage.PRAGMA, pragma=pragma)

    match = _JSX_IMPORT_SOURCE.search(content)
    if match:
        framework = framework_for_module(match.group(1))
        if framework:
            return FrameworkInfo.of(framework, IMPORT_SOURCE_CONFIDENCE, DetectionStage.PRAGMA)

    return FrameworkInfo.unknown()
