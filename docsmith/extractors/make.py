"""Makefile target extractor."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional

from ..models import MakeRecord
from .base import Extractor

_TARGET = re.compile(r"^([A-Za-z0-9_][A-Za-z0-9_.-]*)\s*:(?!:?=)")

# feature name -> targets that satisfy it
_FEATURE_TARGETS: Dict[str, tuple[str, ...]] = {
    "install": ("install",),
    "build": ("build",),
    "run": ("run",),
    "test": ("test",),
    "clean": ("clean",),
    "docs": ("docs", "doc"),
}


def parse_make_targets(text: str) -> List[str]:
    """Return unique target names in first-seen order, ignoring comments and dot targets."""
    targets: List[str] = []
    seen = set()
    for line in text.splitlines():
        if line.lstrip().startswith("#"):
            continue
        match = _TARGET.match(line)
        if not match:
            continue
        name = match.group(1)
        if name not in seen:
            seen.add(name)
            targets.append(name)
    return targets


def make_features(targets: List[str]) -> Dict[str, bool]:
    present = set(targets)
    return {
        feature: any(name in present for name in names)
        for feature, names in _FEATURE_TARGETS.items()
    }


class MakeExtractor(Extractor):
    """Lists Makefile targets and flags conventional ones."""

    ecosystem = "make"
    filenames = ("Makefile", "makefile", "GNUmakefile")

    def extract(self, base_path: Path) -> Optional[MakeRecord]:
        path = self.locate(base_path)
        if path is None:
            return None
        targets = parse_make_targets(path.read_text(encoding="utf-8"))
        return MakeRecord(
            filename=path.name,
            targets=tuple(targets),
            features=make_features(targets),
        )
