"""Syntax-tree feature scan using tree-sitter.

Parses JS/JSX/TS/TSX files and counts framework signatures: Vue
composition and render calls, React hooks and React.createElement, Solid
primitives, Vue and Lit decorators, and React.Component / Vue.extend() /
LitElement superclasses.

tree-sitter recovers from syntax errors, so a partially broken file still
yields the features of its well-formed parts. The walk is iterative and
checks a deadline so one pathological file cannot stall a batch.
"""

import logging
import time
from pathlib import Path
from typing import Optional

import tree_sitter
import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts

from buildplan.core.errors import ParseFailure, SyntaxScanTimeout
from buildplan.scanner.types import DetectionStage, Framework, FrameworkInfo

logger = logging.getLogger(__name__)

# Initialize languages once at module level
_JS_LANG = tree_sitter.Language(tsjs.language())
_TS_LANG = tree_sitter.Language(tsts.language_typescript())
_TSX_LANG = tree_sitter.Language(tsts.language_tsx())

# File extension to language mapping
_LANG_MAP: dict[str, tree_sitter.Language] = {
    ".js": _JS_LANG,
    ".jsx": _JS_LANG,
    ".mjs": _JS_LANG,
    ".cjs": _JS_LANG,
    ".ts": _TS_LANG,
    ".mts": _TS_LANG,
    ".cts": _TS_LANG,
    ".tsx": _TSX_LANG,
}

# Calls by bare identifier -> (framework, points)
CALL_FEATURES: dict[str, tuple[Framework, int]] = {
    "defineComponent": (Framework.VUE, 3),
    "ref": (Framework.VUE, 3),
    "reactive": (Framework.VUE, 3),
    "computed": (Framework.VUE, 3),
    "watch": (Framework.VUE, 3),
    "onMounted": (Framework.VUE, 3),
    "createApp": (Framework.VUE, 2),
    "h": (Framework.VUE, 2),
    "createVNode": (Framework.VUE, 2),
    "createSignal": (Framework.SOLID, 3),
    "createEffect": (Framework.SOLID, 3),
    "createMemo": (Framework.SOLID, 3),
    "createStore": (Framework.SOLID, 3),
    "createResource": (Framework.SOLID, 3),
}

HOOK_POINTS = 2
CORE_HOOKS = {"useState", "useEffect", "useCallback", "useMemo", "useRef"}
CORE_HOOK_POINTS = 3

DECORATOR_FEATURES: dict[str, tuple[Framework, int]] = {
    "Component": (Framework.VUE, 2),
    "Prop": (Framework.VUE, 2),
    "Watch": (Framework.VUE, 2),
    "Emit": (Framework.VUE, 2),
    "customElement": (Framework.LIT, 3),
    "property": (Framework.LIT, 2),
    "state": (Framework.LIT, 2),
    "query": (Framework.LIT, 2),
}

SUPERCLASS_POINTS = 5
FEATURE_DIVISOR = 15
MAX_SYNTAX_CONFIDENCE = 0.9

_CLASS_NODES = {"class_declaration", "class", "abstract_class_declaration"}
_DEADLINE_CHECK_INTERVAL = 256


def supports(file_path: Path) -> bool:
    return file_path.suffix.lower() in _LANG_MAP


def count_features(
    file_path: Path,
    content: str,
    deadline: Optional[float] = None,
) -> dict[Framework, int]:
    """Parse one file and return feature points per framework.

    deadline is a time.monotonic() value. Raises ParseFailure when the
    file cannot be parsed and SyntaxScanTimeout when the walk overruns.
    """
    language = _LANG_MAP.get(file_path.suffix.lower())
    if not language:
        return {}

    try:
        parser = tree_sitter.Parser(language)
        tree = parser.parse(content.encode("utf-8"))
    except Exception as exc:
        raise ParseFailure(str(file_path), str(exc)) from exc

    if tree.root_node.has_error:
        logger.debug("Syntax errors in %s; scanning the recovered tree", file_path)

    counts: dict[Framework, int] = {}
    stack = [tree.root_node]
    visited = 0
    while stack:
        node = stack.pop()
        visited += 1
        if deadline is not None and visited % _DEADLINE_CHECK_INTERVAL == 0:
            if time.monotonic() > deadline:
                raise SyntaxScanTimeout(
                    str(file_path), f"syntax scan exceeded its deadline after {visited} nodes"
                )

        for framework, points in _node_features(node):
            counts[framework] = counts.get(framework, 0) + points

        stack.extend(reversed(node.children))

    return counts


def scan_syntax(
    file_path: Path,
    content: str,
    deadline: Optional[float] = None,
) -> FrameworkInfo:
    """Classify a file by its feature counts; the unique maximum wins."""
    counts = count_features(file_path, content, deadline)
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    if not ranked or ranked[0][1] <= 0:
        return FrameworkInfo.unknown()
    if len(ranked) > 1 and ranked[1][1] >= ranked[0][1]:
        return FrameworkInfo.unknown()

    framework, count = ranked[0]
    confidence = min(count / FEATURE_DIVISOR, MAX_SYNTAX_CONFIDENCE)
    return FrameworkInfo.of(framework, confidence, DetectionStage.SYNTAX)


# ---------------------------------------------------------------------------
# Feature detectors
# ---------------------------------------------------------------------------

def _text(node: Optional[tree_sitter.Node]) -> str:
    if node is None or not node.text:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _member_parts(node: tree_sitter.Node) -> tuple[str, str]:
    """("React", "createElement") for a React.createElement member expression."""
    return (
        _text(node.child_by_field_name("object")),
        _text(node.child_by_field_name("property")),
    )


def _node_features(node: tree_sitter.Node) -> list[tuple[Framework, int]]:
    if node.type == "call_expression":
        return _call_features(node)
    if node.type == "decorator":
        return _decorator_features(node)
    if node.type in _CLASS_NODES:
        return _superclass_features(node)
    return []


def _call_features(node: tree_sitter.Node) -> list[tuple[Framework, int]]:
    func = node.child_by_field_name("function")
    if func is None:
        return []

    if func.type == "identifier":
        name = _text(func)
        features: list[tuple[Framework, int]] = []
        if name in CALL_FEATURES:
            features.append(CALL_FEATURES[name])
        if name.startswith("use") and len(name) > 3:
            features.append((Framework.REACT, HOOK_POINTS))
        if name in CORE_HOOKS:
            features.append((Framework.REACT, CORE_HOOK_POINTS))
        return features

    if func.type == "member_expression" and _member_parts(func) == ("React", "createElement"):
        return [(Framework.REACT, 3)]

    return []


def _decorator_features(node: tree_sitter.Node) -> list[tuple[Framework, int]]:
    # @Prop and @Prop() both count
    for child in node.named_children:
        target = child
        if child.type == "call_expression":
            target = child.child_by_field_name("function")
        if target is not None and target.type == "identifier":
            feature = DECORATOR_FEATURES.get(_text(target))
            return [feature] if feature else []
    return []


def _superclass(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """The expression after `extends`, across the JS and TS grammars."""
    for child in node.children:
        if child.type != "class_heritage":
            continue
        queue = list(child.named_children)
        while queue:
            candidate = queue.pop(0)
            if candidate.type in ("member_expression", "call_expression", "identifier"):
                return candidate
            queue.extend(candidate.named_children)
    return None


def _superclass_features(node: tree_sitter.Node) -> list[tuple[Framework, int]]:
    superclass = _superclass(node)
    if superclass is None:
        return []

    if superclass.type == "member_expression":
        if _member_parts(superclass) in (("React", "Component"), ("React", "PureComponent")):
            return [(Framework.REACT, SUPERCLASS_POINTS)]
    elif superclass.type == "call_expression":
        callee = superclass.child_by_field_name("function")
        if callee is not None and callee.type == "member_expression":
            if _member_parts(callee) == ("Vue", "extend"):
                return [(Framework.VUE, SUPERCLASS_POINTS)]
    elif _text(superclass) == "LitElement":
        return [(Framework.LIT, SUPERCLASS_POINTS)]

    return []
