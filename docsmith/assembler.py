"""Final README assembly and safe writing."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TextIO

from .badges import format_badges
from .logging import get_logger
from .models import BadgeSet

DEFAULT_OUTPUT_NAME = "README.md"
_PREVIEW_RULE = "=" * 80

ConfirmOverwrite = Callable[[Path], bool]


def decline_overwrite(path: Path) -> bool:
    """Confirmation policy used when no interactive prompt is available."""
    return False


@dataclass(frozen=True)
class WriteOutcome:
    """What happened to the generated document."""

    path: Path
    written: bool
    dry_run: bool
    content_length: int


class DocumentAssembler:
    """Merges badges into the generated narrative and persists the result."""

    def __init__(
        self,
        output_name: str = DEFAULT_OUTPUT_NAME,
        confirm: Optional[ConfirmOverwrite] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.output_name = output_name
        self.confirm = confirm or decline_overwrite
        self._stream = stream
        self.logger = get_logger("assembler")

    def assemble(self, narrative: str, badges: BadgeSet) -> str:
        """Insert the badge lines after the first line (the title) of ``narrative``."""
        block = format_badges(badges)
        if not block:
            return narrative if narrative.endswith("\n") else f"{narrative}\n"

        title, _, body = narrative.partition("\n")
        parts = [title, block]
        body = body.strip("\n")
        if body:
            parts.append(body)
        return "\n\n".join(parts) + "\n"

    def write(self, document: str, directory: str | Path, *, dry_run: bool = False) -> WriteOutcome:
        """Print the document (dry run) or write it, asking before replacing a file."""
        path = Path(directory) / self.output_name

        if dry_run:
            stream = self._stream or sys.stdout
            stream.write(f"{_PREVIEW_RULE}\n{document}")
            if not document.endswith("\n"):
                stream.write("\n")
            stream.write(f"{_PREVIEW_RULE}\n")
            return WriteOutcome(path=path, written=False, dry_run=True, content_length=len(document))

        if path.exists() and not self.confirm(path):
            self.logger.info("Keeping existing %s; overwrite declined", path)
            return WriteOutcome(path=path, written=False, dry_run=False, content_length=len(document))

        path.write_text(document, encoding="utf-8")
        self.logger.info("Wrote %s (%d characters)", path, len(document))
        return WriteOutcome(path=path, written=True, dry_run=False, content_length=len(document))


__all__ = ["DocumentAssembler", "WriteOutcome", "decline_overwrite"]
