"""package.json extractor."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Tuple

from ..errors import ExtractionError
from ..models import NodeRecord
from .base import Extractor


class NodeExtractor(Extractor):
    """Reads name, version, scripts and dependencies from package.json."""

    ecosystem = "node"
    filenames = ("package.json",)

    def extract(self, base_path: Path) -> Optional[NodeRecord]:
        path = self.locate(base_path)
        if path is None:
            return None

        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ExtractionError(f"{path.name} must contain a JSON object")

        return NodeRecord(
            name=_as_text(data.get("name")),
            description=_as_text(data.get("description")),
            version=_as_text(data.get("version")),
            scripts=_keys(data.get("scripts")),
            dependencies=_keys(data.get("dependencies")),
            dev_dependencies=_keys(data.get("devDependencies")),
            license=_license(data.get("license")),
            author=_named(data.get("author"), "name"),
            repository=_named(data.get("repository"), "url"),
            keywords=tuple(str(item) for item in data.get("keywords") or () if isinstance(item, str)),
        )


def _as_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


def _keys(value: Any) -> Tuple[str, ...]:
    if isinstance(value, dict):
        return tuple(str(key) for key in value)
    return ()


def _named(value: Any, key: str) -> Optional[str]:
    """Return a string field that npm allows as either a string or an object."""
    if isinstance(value, dict):
        return _as_text(value.get(key))
    return _as_text(value)


def _license(value: Any) -> Optional[str]:
    return _named(value, "type")
