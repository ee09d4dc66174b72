"""Cargo.toml extractor."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional, Set

from ..models import RustRecord
from .base import Extractor

_TABLE_HEADER = re.compile(r"^\s*\[\[?([^\[\]]+)\]\]?\s*(?:#.*)?$")
_STRING_KEY = re.compile(r"^\s*(name|version|description|edition)\s*=\s*(['\"])(.*?)\2")


def declares_table(tables: Set[str], name: str) -> bool:
    """True for ``[name]``, ``[name.<crate>]`` or ``[target.<cfg>.name]`` style headers."""
    return any(
        table == name or table.startswith(f"{name}.") or table.endswith(f".{name}")
        for table in tables
    )


class RustExtractor(Extractor):
    """Reads crate name, version, description and edition from Cargo.toml."""

    ecosystem = "rust"
    filenames = ("Cargo.toml",)

    def extract(self, base_path: Path) -> Optional[RustRecord]:
        path = self.locate(base_path)
        if path is None:
            return None

        package: Dict[str, str] = {}
        tables: Set[str] = set()
        current_table = ""
        for line in path.read_text(encoding="utf-8").splitlines():
            header = _TABLE_HEADER.match(line)
            if header:
                current_table = header.group(1).strip()
                tables.add(current_table)
                continue
            if current_table != "package":
                continue
            match = _STRING_KEY.match(line)
            if match and match.group(1) not in package:
                package[match.group(1)] = match.group(3)

        return RustRecord(
            name=package.get("name"),
            version=package.get("version"),
            description=package.get("description"),
            edition=package.get("edition"),
            has_dependencies=declares_table(tables, "dependencies"),
            has_dev_dependencies=declares_table(tables, "dev-dependencies"),
        )
