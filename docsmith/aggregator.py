"""Runs every extractor over a project root and merges the results."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .extractors import Extractor, default_extractors, safe_extract
from .logging import get_logger
from .models import (
    AggregatedMetadata,
    DockerRecord,
    LocalProject,
    MakeRecord,
    NodeRecord,
    ProjectRecord,
    ProjectType,
    PythonRecord,
    RustRecord,
)
from .scanner import ProjectScanner

MAKE_TARGET_PREVIEW = 5


class MetadataAggregator:
    """Collects ecosystem records for a project root in fixed priority order."""

    def __init__(self, extractors: Optional[Iterable[Extractor]] = None) -> None:
        self.extractors: Tuple[Extractor, ...] = tuple(
            extractors if extractors is not None else default_extractors()
        )
        self.logger = get_logger("aggregator")

    def aggregate(self, base_path: str | Path) -> AggregatedMetadata:
        root = Path(base_path).expanduser().resolve()
        records: Dict[str, ProjectRecord] = {}
        project_type = ProjectType.UNKNOWN

        for extractor in self.extractors:
            record = safe_extract(extractor, root)
            if record is None:
                continue
            records[record.ecosystem] = record
            if project_type is ProjectType.UNKNOWN:
                project_type = ProjectType(record.ecosystem)
            self.logger.debug("Found %s metadata in %s", record.ecosystem, root)

        return AggregatedMetadata(
            base_path=str(root),
            project_type=project_type,
            records=records,
            summary_lines=summarize(records),
        )


def summarize(records: Mapping[str, ProjectRecord]) -> Tuple[str, ...]:
    """Describe the collected records as short human-readable sentences."""
    lines: List[str] = []
    for record in records.values():
        if isinstance(record, NodeRecord):
            lines.extend(_node_lines(record))
        elif isinstance(record, PythonRecord):
            lines.extend(_python_lines(record))
        elif isinstance(record, RustRecord):
            lines.extend(_rust_lines(record))
        elif isinstance(record, MakeRecord):
            lines.extend(_make_lines(record))
        elif isinstance(record, DockerRecord):
            lines.extend(_docker_lines(record))
    return tuple(lines)


def _node_lines(record: NodeRecord) -> List[str]:
    lines: List[str] = []
    if record.name:
        label = f"{record.name}@{record.version}" if record.version else record.name
        lines.append(f"Node.js package {label}")
    else:
        lines.append("Detected node project")
    if record.dependencies or record.dev_dependencies:
        lines.append(
            f"{len(record.dependencies)} npm dependencies ({len(record.dev_dependencies)} dev)"
        )
    if record.scripts:
        lines.append(f"npm scripts: {', '.join(record.scripts)}")
    return lines


def _python_lines(record: PythonRecord) -> List[str]:
    lines: List[str] = []
    if record.requirements is not None:
        lines.append(f"{len(record.requirements)} Python dependencies listed in requirements.txt")
    if record.setup is not None:
        if record.setup.name:
            version = f" {record.setup.version}" if record.setup.version else ""
            lines.append(f"Python package {record.setup.name}{version} (setup.py)")
        else:
            lines.append("setup.py found")
    return lines


def _rust_lines(record: RustRecord) -> List[str]:
    if not record.name:
        return ["Detected rust project"]
    parts = [f"Rust crate {record.name}"]
    if record.version:
        parts.append(record.version)
    if record.edition:
        parts.append(f"(edition {record.edition})")
    return [" ".join(parts)]


def _make_lines(record: MakeRecord) -> List[str]:
    if not record.targets:
        return [f"{record.filename} found with no targets"]
    preview = list(record.targets[:MAKE_TARGET_PREVIEW])
    if len(record.targets) > MAKE_TARGET_PREVIEW:
        preview.append("...")
    return [f"Makefile targets: {', '.join(preview)}"]


def _docker_lines(record: DockerRecord) -> List[str]:
    lines = [
        f"Docker image based on {record.base_image}"
        if record.base_image
        else "Dockerized application"
    ]
    if record.exposed_port is not None:
        lines.append(f"Container exposes port {record.exposed_port}")
    return lines


async def analyze_local_project(
    base_path: str | Path,
    *,
    scanner: ProjectScanner | None = None,
    aggregator: MetadataAggregator | None = None,
) -> LocalProject:
    """Scan ``base_path`` and aggregate its ecosystem metadata."""
    scanner = scanner or ProjectScanner()
    aggregator = aggregator or MetadataAggregator()
    scan = await scanner.scan(base_path)
    metadata = aggregator.aggregate(scan.root)
    return LocalProject(scan=scan, metadata=metadata)


__all__ = ["MetadataAggregator", "analyze_local_project", "summarize"]
