"""Builds the README generation prompt from project data."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import BadgeSet, LocalProject, RemoteMetadata


@dataclass(frozen=True)
class PromptFile:
    """One file as shown to the model: path label, fence language, text."""

    path: str
    language: str
    content: str


class PromptBuilder:
    """Renders remote metadata, the file tree and file contents into one prompt."""

    TEMPLATE_NAME = "prompt.md.j2"
    SYSTEM_PROMPT = (
        "You are a senior developer documentation writer. Stay grounded in repository facts "
        "and never invent commands or tools."
    )

    def __init__(self, templates_dir: Path | None = None) -> None:
        default_dir = Path(__file__).with_name("templates")
        directories = [str(default_dir)]
        if templates_dir is not None and Path(templates_dir) != default_dir:
            directories.insert(0, str(templates_dir))
        self.templates_dir = Path(directories[0])
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )

    def build(
        self,
        remote: RemoteMetadata | None = None,
        local: LocalProject | None = None,
        badges: BadgeSet | None = None,
        extra_instructions: str | None = None,
        *,
        include_contents: bool = True,
    ) -> str:
        tree: Optional[str] = None
        summary_lines: List[str] = []
        files: List[PromptFile] = []
        if local is not None:
            tree = local.scan.render_tree().rstrip("\n")
            summary_lines = list(local.metadata.summary_lines)
            if include_contents:
                files = [
                    PromptFile(path=path, language=_fence_language(path), content=content.rstrip("\n"))
                    for path, content in local.scan.contents.items()
                ]

        template = self._env.get_template(self.TEMPLATE_NAME)
        rendered = template.render(
            remote=remote,
            tree=tree,
            summary_lines=summary_lines,
            files=files,
            badge_labels=[badge.label for badge in badges.all()] if badges else [],
            extra_instructions=(extra_instructions or "").strip(),
        )
        return rendered.strip()


def _fence_language(path: str) -> str:
    return PurePosixPath(path).suffix.lstrip(".")


__all__ = ["PromptBuilder", "PromptFile"]
