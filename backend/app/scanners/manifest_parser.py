# backend/app/scanners/manifest_parser.py
"""
package.json parsing
Extracts the declared dependency ranges of a Node.js manifest
"""

import json
import re
from typing import Any, Dict

from app.core.constants import RANGE_MARKERS
from app.core.exceptions import InvalidManifest

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")

_RANGE_MARKER_RE = re.compile(f"[{re.escape(RANGE_MARKERS)}]")


def load_manifest(content: str) -> Dict[str, Any]:
    """Parse manifest text into a JSON object, raising InvalidManifest on failure"""
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidManifest(f"Invalid package.json: {e}") from e

    if not isinstance(data, dict):
        raise InvalidManifest("Invalid package.json: top-level value is not an object")

    return data


def parse_dependencies(content: str) -> Dict[str, str]:
    """Map package name to declared range, merging dependencies then devDependencies.

    A name declared in both sections keeps the devDependencies value.
    """
    data = load_manifest(content)
    dependencies: Dict[str, str] = {}

    for section in DEPENDENCY_SECTIONS:
        declared = data.get(section)
        if isinstance(declared, dict):
            dependencies.update(declared)

    return dependencies


def clean_version(version_range: str) -> str:
    """Strip range markers: "^1.2.3" -> "1.2.3", "~>=2.0.0" -> "2.0.0" """
    return _RANGE_MARKER_RE.sub("", version_range)


def serialize_manifest(data: Dict[str, Any]) -> str:
    """Two-space indented JSON with a trailing newline, key order preserved"""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
