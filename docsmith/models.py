"""Core data models shared across docsmith components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

FileTree = Dict[str, Optional["FileTree"]]
ContentIndex = Dict[str, str]


@dataclass(frozen=True)
class ScanResult:
    """Directory tree and file contents collected from a project root."""

    root: str
    tree: FileTree
    contents: ContentIndex

    @property
    def root_name(self) -> str:
        return self.root.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]

    def leaf_paths(self) -> List[str]:
        """Return the forward-slash path of every file leaf in tree order."""
        paths: List[str] = []

        def _walk(node: FileTree, prefix: str) -> None:
            for name, child in node.items():
                path = f"{prefix}{name}"
                if child is None:
                    paths.append(path)
                else:
                    _walk(child, f"{path}/")

        _walk(self.tree, "")
        return paths

    def render_tree(self) -> str:
        """Return the tree listing headed by the root directory name."""
        from .scanner import render_project_tree

        return render_project_tree(self.root_name, self.tree)


class ProjectType(str, Enum):
    """Coarse project classification derived from the first detected ecosystem."""

    UNKNOWN = "unknown"
    NODE = "node"
    PYTHON = "python"
    RUST = "rust"
    DOCKER = "docker"
    MAKE = "make"


@dataclass(frozen=True)
class NodeRecord:
    """Fields read from package.json."""

    ecosystem: ClassVar[str] = "node"

    name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    scripts: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    dev_dependencies: Tuple[str, ...] = ()
    license: Optional[str] = None
    author: Optional[str] = None
    repository: Optional[str] = None
    keywords: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SetupInfo:
    """Best-effort assignments found in setup.py."""

    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None


@dataclass(frozen=True)
class PythonRecord:
    """Python requirements and setup.py details.

    ``requirements`` is ``None`` when requirements.txt does not exist and an
    empty tuple when it exists but lists nothing.
    """

    ecosystem: ClassVar[str] = "python"

    requirements: Optional[Tuple[str, ...]] = None
    setup: Optional[SetupInfo] = None


@dataclass(frozen=True)
class RustRecord:
    """Fields read from Cargo.toml."""

    ecosystem: ClassVar[str] = "rust"

    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    edition: Optional[str] = None
    has_dependencies: bool = False
    has_dev_dependencies: bool = False


@dataclass(frozen=True)
class MakeRecord:
    """Targets declared in a Makefile."""

    ecosystem: ClassVar[str] = "make"

    filename: str = "Makefile"
    targets: Tuple[str, ...] = ()
    # Derived from targets, so it is left out of the hash.
    features: Mapping[str, bool] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))


@dataclass(frozen=True)
class DockerRecord:
    """Directives found in a container descriptor."""

    ecosystem: ClassVar[str] = "docker"

    filename: str = "Dockerfile"
    base_image: Optional[str] = None
    exposed_port: Optional[int] = None
    has_workdir: bool = False
    has_entrypoint: bool = False
    has_cmd: bool = False


ProjectRecord = Union[NodeRecord, PythonRecord, RustRecord, MakeRecord, DockerRecord]


@dataclass(frozen=True)
class AggregatedMetadata:
    """Merged extractor output for one project root."""

    base_path: str
    project_type: ProjectType = ProjectType.UNKNOWN
    records: Mapping[str, ProjectRecord] = field(default_factory=dict, hash=False)
    summary_lines: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", MappingProxyType(dict(self.records)))

    def record(self, ecosystem: str) -> Optional[ProjectRecord]:
        return self.records.get(ecosystem)


@dataclass(frozen=True)
class LocalProject:
    """Everything known about the local checkout: scan output plus metadata."""

    scan: ScanResult
    metadata: AggregatedMetadata


@dataclass(frozen=True)
class RepositoryOwner:
    login: str
    type: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class RemoteMetadata:
    """Read-only snapshot of a hosting-provider repository record."""

    name: str
    full_name: str
    description: str = ""
    stars: int = 0
    forks: int = 0
    open_issues: int = 0
    language: Optional[str] = None
    license: Optional[str] = None
    topics: Tuple[str, ...] = ()
    homepage_url: Optional[str] = None
    clone_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    pushed_at: Optional[str] = None
    is_private: bool = False
    is_archived: bool = False
    owner: Optional[RepositoryOwner] = None

    @classmethod
    def from_api_payload(cls, data: Mapping[str, Any]) -> "RemoteMetadata":
        """Build a snapshot from a GitHub ``GET /repos/{owner}/{repo}`` payload."""
        license_data = data.get("license")
        license_name = license_data.get("name") if isinstance(license_data, Mapping) else None
        owner_data = data.get("owner")
        owner = None
        if isinstance(owner_data, Mapping) and owner_data.get("login"):
            owner = RepositoryOwner(
                login=str(owner_data["login"]),
                type=owner_data.get("type"),
                avatar_url=owner_data.get("avatar_url"),
            )
        topics = data.get("topics") or []
        return cls(
            name=str(data.get("name") or ""),
            full_name=str(data.get("full_name") or ""),
            description=data.get("description") or "",
            stars=int(data.get("stargazers_count") or 0),
            forks=int(data.get("forks_count") or 0),
            open_issues=int(data.get("open_issues_count") or 0),
            language=data.get("language") or None,
            license=license_name or None,
            topics=tuple(str(topic) for topic in topics),
            homepage_url=data.get("homepage") or None,
            clone_url=data.get("clone_url"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            pushed_at=data.get("pushed_at"),
            is_private=bool(data.get("private", False)),
            is_archived=bool(data.get("archived", False)),
            owner=owner,
        )


class BadgeGroup(str, Enum):
    IMPORTANT = "important"
    OTHER = "other"


@dataclass(frozen=True)
class Badge:
    """A rendered status badge."""

    label: str
    markup: str
    group: BadgeGroup


@dataclass(frozen=True)
class BadgeSet:
    """Badges split into the header line and the secondary line."""

    important: Tuple[Badge, ...] = ()
    other: Tuple[Badge, ...] = ()

    def all(self) -> Tuple[Badge, ...]:
        return self.important + self.other

    def __len__(self) -> int:
        return len(self.important) + len(self.other)
