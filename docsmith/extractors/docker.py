"""Dockerfile extractor."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from ..models import DockerRecord
from .base import Extractor

_FROM = re.compile(r"^\s*FROM\s+(?:--platform=\S+\s+)?(\S+)", re.IGNORECASE | re.MULTILINE)
_EXPOSE = re.compile(r"^\s*EXPOSE\s+(\d+)", re.IGNORECASE | re.MULTILINE)


def _has_directive(text: str, directive: str) -> bool:
    return re.search(rf"^\s*{directive}\b", text, re.IGNORECASE | re.MULTILINE) is not None


class DockerExtractor(Extractor):
    """Reads the base image, exposed port and runtime directives of a container descriptor."""

    ecosystem = "docker"
    filenames = ("Dockerfile", "dockerfile", "Containerfile", "docker/Dockerfile")

    def extract(self, base_path: Path) -> Optional[DockerRecord]:
        path = self.locate(base_path)
        if path is None:
            return None

        text = path.read_text(encoding="utf-8")
        base_image = _FROM.search(text)
        port = _EXPOSE.search(text)
        return DockerRecord(
            filename=path.relative_to(base_path).as_posix(),
            base_image=base_image.group(1) if base_image else None,
            exposed_port=int(port.group(1)) if port else None,
            has_workdir=_has_directive(text, "WORKDIR"),
            has_entrypoint=_has_directive(text, "ENTRYPOINT"),
            has_cmd=_has_directive(text, "CMD"),
        )
