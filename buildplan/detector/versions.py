"""Major-version parsing for dependency version strings.

Handles the range syntax found in package manifests: ``^3.2.0``, ``~2.6``,
``>=3 <4``, ``3.x``, ``v2``, ``npm:vue@^3.4`` aliases and ``a || b``
alternatives (the first alternative decides). Anything that does not name a
concrete major (``latest``, ``*``, ``workspace:*``, git or file URLs) is
unparseable; callers then fall back to a default and the fallback is logged.
"""

import logging
import re
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

_RANGE_PREFIX = re.compile(r"^(?:[\^~=<>]|>=|<=|v)+")
_OPERATOR_SPACE = re.compile(r"([\^~<>=]+)\s+")
_MAJOR = re.compile(r"^(\d+)(?:$|[.\-+x*X])")
_NON_VERSION_PREFIXES = ("workspace:", "file:", "link:", "git+", "git:", "http:", "https:", "github:")


def parse_major(spec: Optional[str]) -> Optional[int]:
    """Return the major version named by a version spec, or None."""
    if not spec or not isinstance(spec, str):
        return None

    text = spec.strip()
    if text.startswith("npm:"):
        # npm:vue@^3.4 -> ^3.4
        _, _, text = text[4:].rpartition("@")
    if text.startswith(_NON_VERSION_PREFIXES):
        return None

    first = text.split("||", 1)[0].strip()
    # ">= 3 < 4" -> ">=3" (lower bound only)
    first = _OPERATOR_SPACE.sub(r"\1", first).split(" ", 1)[0]
    token = _RANGE_PREFIX.sub("", first)
    match = _MAJOR.match(token)
    if not match:
        return None
    return int(match.group(1))


def resolve_major(
    spec: Optional[str],
    supported: Iterable[int],
    default: int,
    package: str = "dependency",
) -> int:
    """Resolve a supported major version, falling back loudly to default."""
    supported = tuple(supported)
    major = parse_major(spec)
    if major in supported:
        return major

    if major is None:
        logger.warning(
            "Could not determine the major version of %s from %r; assuming %d. "
            "Pin an explicit version range to silence this warning.",
            package, spec, default,
        )
    else:
        logger.warning(
            "%s major version %d is not one of %s; assuming %d.",
            package, major, supported, default,
        )
    return default
