"""Project scanning: directory tree and file content index."""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from typing import List, Pattern, Tuple

from .config import ScannerConfig
from .errors import ScanError
from .logging import get_logger
from .models import ContentIndex, FileTree, ScanResult

_BRANCH = "├── "
_CORNER = "└── "
_PIPE = "│   "
_SPACE = "    "

_logger = get_logger("scanner")


def _list_directory(directory: Path) -> List[Tuple[str, bool]]:
    """Return ``(name, is_dir)`` pairs in directory listing order.

    Symlinked directories are skipped so the tree cannot contain cycles.
    """
    entries: List[Tuple[str, bool]] = []
    with os.scandir(directory) as iterator:
        for entry in iterator:
            if entry.is_dir(follow_symlinks=False):
                entries.append((entry.name, True))
            elif entry.is_file():
                entries.append((entry.name, False))
            else:
                _logger.debug("Skipping non-regular entry %s", entry.path)
    return entries


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


class ProjectScanner:
    """Walks a project root and reads every file not matched by an exclusion pattern."""

    def __init__(self, config: ScannerConfig | None = None) -> None:
        self.config = config or ScannerConfig()
        self._patterns: Tuple[Pattern[str], ...] = tuple(
            re.compile(pattern) for pattern in self.config.exclude_patterns
        )

    def is_excluded(self, name: str) -> bool:
        """Return True when an entry's base name matches any exclusion pattern."""
        return any(pattern.search(name) for pattern in self._patterns)

    async def scan(self, root: str | Path) -> ScanResult:
        """Return the file tree and content index for ``root``."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        tree, contents = await self._scan_directory(root_path, "")
        _logger.debug("Scanned %d files under %s", len(contents), root_path)
        return ScanResult(root=str(root_path), tree=tree, contents=contents)

    def scan_sync(self, root: str | Path) -> ScanResult:
        return asyncio.run(self.scan(root))

    async def _scan_directory(self, directory: Path, prefix: str) -> Tuple[FileTree, ContentIndex]:
        try:
            entries = await asyncio.to_thread(_list_directory, directory)
        except OSError as exc:
            raise ScanError(f"Failed to list {directory}: {exc}") from exc

        kept = [(name, is_dir) for name, is_dir in entries if not self.is_excluded(name)]
        # gather() returns results in argument order, so the merge below follows
        # listing order no matter which child finishes first.
        results = await asyncio.gather(
            *(self._visit(directory / name, f"{prefix}{name}", is_dir) for name, is_dir in kept)
        )

        tree: FileTree = {}
        contents: ContentIndex = {}
        for (name, is_dir), (subtree, subcontents) in zip(kept, results):
            if is_dir and not subtree:
                continue
            tree[name] = subtree
            contents.update(subcontents)
        return tree, contents

    async def _visit(
        self, path: Path, rel_path: str, is_dir: bool
    ) -> Tuple[FileTree | None, ContentIndex]:
        if is_dir:
            return await self._scan_directory(path, f"{rel_path}/")
        try:
            text = await asyncio.to_thread(_read_text, path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ScanError(
                f"Failed to read {rel_path}: {exc}",
                hint="Add an exclusion pattern for binary or unreadable files.",
            ) from exc
        return None, {rel_path: text}


def render_tree(tree: FileTree, prefix: str = "") -> str:
    """Render a file tree as an ASCII listing with box-drawing connectors."""
    lines: List[str] = []
    names = list(tree)
    for index, name in enumerate(names):
        is_last = index == len(names) - 1
        lines.append(f"{prefix}{_CORNER if is_last else _BRANCH}{name}\n")
        child = tree[name]
        if child is not None:
            lines.append(render_tree(child, f"{prefix}{_SPACE if is_last else _PIPE}"))
    return "".join(lines)


def render_project_tree(root_name: str, tree: FileTree) -> str:
    return f"{root_name}/\n{render_tree(tree)}"


__all__ = ["ProjectScanner", "render_project_tree", "render_tree"]
