"""requirements.txt and setup.py extractor."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

from ..logging import get_logger
from ..models import PythonRecord, SetupInfo
from .base import Extractor

_logger = get_logger("extractors.python")

_REQUIREMENT_NAME_END = re.compile(r"==|>=|<=|~=|!=|[<>;\[\s]")
_SETUP_FIELDS = ("name", "version", "description", "author")


def parse_requirements(text: str) -> List[str]:
    """Return package names from a pip requirements file in file order."""
    packages: List[str] = []
    for line in text.splitlines():
        stripped = line.split("#", 1)[0].strip()
        if not stripped or stripped.startswith("-"):
            continue
        name = _REQUIREMENT_NAME_END.split(stripped, 1)[0].strip()
        if name:
            packages.append(name)
    return packages


def parse_setup_py(text: str) -> SetupInfo:
    """Pick literal ``name=``/``version=``/... keyword arguments out of setup.py."""
    values = {}
    for field_name in _SETUP_FIELDS:
        match = re.search(rf"\b{field_name}\s*=\s*(['\"])(.*?)\1", text)
        values[field_name] = match.group(2).strip() if match else None
    return SetupInfo(**values)


class PythonExtractor(Extractor):
    """Collects requirements.txt packages and setup.py metadata."""

    ecosystem = "python"
    filenames = ("requirements.txt", "setup.py")

    def extract(self, base_path: Path) -> Optional[PythonRecord]:
        requirements_path = base_path / "requirements.txt"
        setup_path = base_path / "setup.py"
        if not requirements_path.is_file() and not setup_path.is_file():
            return None

        requirements_text = _read_source(requirements_path)
        setup_text = _read_source(setup_path)
        if requirements_text is None and setup_text is None:
            return None

        return PythonRecord(
            requirements=(
                tuple(parse_requirements(requirements_text))
                if requirements_text is not None
                else None
            ),
            setup=parse_setup_py(setup_text) if setup_text is not None else None,
        )


def _read_source(path: Path) -> Optional[str]:
    """Return the text of ``path``, or None (with a warning) when it is absent or unreadable."""
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _logger.warning("Ignoring unreadable %s: %s", path.name, exc)
        return None
