"""Base classes for ecosystem metadata extractors."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from ..errors import ExtractionError
from ..logging import get_logger
from ..models import ProjectRecord

_logger = get_logger("extractors")


class Extractor(ABC):
    """Contract for parsers that turn one ecosystem's descriptor files into a record."""

    ecosystem: str = ""
    filenames: Sequence[str] = ()

    def locate(self, base_path: Path) -> Optional[Path]:
        """Return the first descriptor candidate that exists under ``base_path``."""
        for name in self.filenames:
            candidate = base_path / name
            if candidate.is_file():
                return candidate
        return None

    @abstractmethod
    def extract(self, base_path: Path) -> Optional[ProjectRecord]:
        """Return a record, or None when no descriptor file is present.

        Implementations may raise on unreadable or malformed input; callers go
        through :func:`safe_extract`.
        """


def safe_extract(extractor: Extractor, base_path: Path) -> Optional[ProjectRecord]:
    """Run ``extractor`` and degrade any read or parse failure to None with a warning."""
    try:
        return extractor.extract(base_path)
    except (OSError, UnicodeDecodeError, ValueError, ExtractionError) as exc:
        if isinstance(exc, json.JSONDecodeError):
            reason = f"invalid JSON at line {exc.lineno}: {exc.msg}"
        else:
            reason = str(exc)
        _logger.warning("Skipping %s metadata: %s", extractor.ecosystem, reason)
        return None
