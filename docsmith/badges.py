"""Shields.io badge synthesis from remote and local project metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import quote

from .config import BadgeConfig
from .models import (
    AggregatedMetadata,
    Badge,
    BadgeGroup,
    BadgeSet,
    DockerRecord,
    MakeRecord,
    NodeRecord,
    PythonRecord,
    RemoteMetadata,
)

SHIELDS_URL = "https://img.shields.io"
GITHUB_URL = "https://github.com"
NPM_URL = "https://www.npmjs.com/package"

LEGACY_TOPICS = frozenset({"legacy", "deprecated"})

# Used for the language badge when no remote metadata is available.
ECOSYSTEM_LANGUAGES = (
    ("node", "JavaScript"),
    ("python", "Python"),
    ("rust", "Rust"),
)


@dataclass(frozen=True)
class BadgeOptions:
    """Per-call overrides for badge synthesis."""

    style: Optional[str] = None


def escape_badge_text(text: str) -> str:
    """Escape shields.io path separators and percent-encode free text."""
    return quote(text.replace("-", "--").replace("_", "__"), safe="")


def _image(label: str, url: str, link: str | None = None) -> str:
    image = f"![{label}]({url})"
    return f"[{image}]({link})" if link else image


def _repo_path(full_name: str) -> str:
    return quote(full_name, safe="/")


def stars_badge(full_name: str | None, stars: int | None, style: str) -> str:
    if not full_name or stars is None:
        return ""
    repo = _repo_path(full_name)
    return _image(
        "GitHub Stars",
        f"{SHIELDS_URL}/github/stars/{repo}?style={quote(style)}&logo=github",
        f"{GITHUB_URL}/{repo}/stargazers",
    )


def license_badge(license_name: str | None, style: str) -> str:
    if not license_name:
        return ""
    return _image(
        "License",
        f"{SHIELDS_URL}/badge/license-{escape_badge_text(license_name)}-blue?style={quote(style)}",
    )


def version_badge(package_name: str | None, version: str | None, style: str) -> str:
    if not package_name or not version:
        return ""
    package = quote(package_name, safe="@/")
    return _image(
        "Version",
        f"{SHIELDS_URL}/npm/v/{package}?style={quote(style)}&logo=npm",
        f"{NPM_URL}/{package}",
    )


def forks_badge(full_name: str | None, forks: int | None, style: str) -> str:
    if not full_name or forks is None:
        return ""
    repo = _repo_path(full_name)
    return _image(
        "GitHub Forks",
        f"{SHIELDS_URL}/github/forks/{repo}?style={quote(style)}&logo=github",
        f"{GITHUB_URL}/{repo}/network/members",
    )


def issues_badge(full_name: str | None, style: str) -> str:
    if not full_name:
        return ""
    repo = _repo_path(full_name)
    return _image(
        "GitHub Issues",
        f"{SHIELDS_URL}/github/issues/{repo}?style={quote(style)}&logo=github",
        f"{GITHUB_URL}/{repo}/issues",
    )


def last_commit_badge(full_name: str | None, style: str) -> str:
    if not full_name:
        return ""
    repo = _repo_path(full_name)
    return _image(
        "Last Commit",
        f"{SHIELDS_URL}/github/last-commit/{repo}?style={quote(style)}&logo=github",
    )


def language_badge(language: str | None, style: str) -> str:
    if not language or language == "Unknown":
        return ""
    return _image(
        "Language",
        f"{SHIELDS_URL}/badge/language-{escape_badge_text(language)}-brightgreen?style={quote(style)}",
    )


def docker_badge(has_dockerfile: bool, style: str) -> str:
    if not has_dockerfile:
        return ""
    return _image(
        "Docker",
        f"{SHIELDS_URL}/badge/docker-supported-blue?style={quote(style)}&logo=docker",
    )


def resolve_style(
    remote: RemoteMetadata | None,
    local: AggregatedMetadata | None,
    options: BadgeOptions | None = None,
    config: BadgeConfig | None = None,
) -> str:
    """Pick one shields.io style for every badge in a call."""
    config = config or BadgeConfig()
    if options is not None and options.style:
        return options.style
    if config.style:
        return config.style

    if remote is not None:
        if remote.is_archived or LEGACY_TOPICS.intersection(t.lower() for t in remote.topics):
            return "flat"
        if remote.stars >= config.popular_star_threshold:
            return "for-the-badge"

    if local is not None:
        node = local.record("node")
        docker = local.record("docker")
        make = local.record("make")
        python = local.record("python")
        is_application = (
            (isinstance(node, NodeRecord) and "start" in node.scripts)
            or isinstance(docker, DockerRecord)
            or (isinstance(make, MakeRecord) and make.features.get("run", False))
        )
        if is_application:
            return "plastic"
        is_library = isinstance(node, NodeRecord) or (
            isinstance(python, PythonRecord) and python.setup is not None
        )
        if is_library:
            return "flat"

    return config.default_style


class BadgeSynthesizer:
    """Builds the important and secondary badge lines for a README header."""

    def __init__(self, config: BadgeConfig | None = None) -> None:
        self.config = config or BadgeConfig()

    def synthesize(
        self,
        remote: RemoteMetadata | None = None,
        local: AggregatedMetadata | None = None,
        options: BadgeOptions | None = None,
    ) -> BadgeSet:
        style = resolve_style(remote, local, options, self.config)
        important: List[Badge] = []
        other: List[Badge] = []

        def _add(target: List[Badge], group: BadgeGroup, label: str, markup: str) -> None:
            if markup:
                target.append(Badge(label=label, markup=markup, group=group))

        if remote is not None:
            _add(important, BadgeGroup.IMPORTANT, "stars", stars_badge(remote.full_name, remote.stars, style))
            _add(important, BadgeGroup.IMPORTANT, "license", license_badge(remote.license, style))

        node = local.record("node") if local is not None else None
        if isinstance(node, NodeRecord):
            _add(important, BadgeGroup.IMPORTANT, "version", version_badge(node.name, node.version, style))

        if remote is not None:
            _add(other, BadgeGroup.OTHER, "forks", forks_badge(remote.full_name, remote.forks, style))
            _add(other, BadgeGroup.OTHER, "issues", issues_badge(remote.full_name, style))
            _add(other, BadgeGroup.OTHER, "last-commit", last_commit_badge(remote.full_name, style))
            _add(other, BadgeGroup.OTHER, "language", language_badge(remote.language, style))

        if local is not None:
            has_docker = isinstance(local.record("docker"), DockerRecord)
            _add(other, BadgeGroup.OTHER, "docker", docker_badge(has_docker, style))

            if remote is None:
                detected = next(
                    (name for ecosystem, name in ECOSYSTEM_LANGUAGES if ecosystem in local.records),
                    None,
                )
                _add(other, BadgeGroup.OTHER, "language", language_badge(detected, style))

        return BadgeSet(important=tuple(important), other=tuple(other))


def format_badges(badges: BadgeSet) -> str:
    """Join each group on one line, with a blank line between groups."""
    lines = [
        " ".join(badge.markup for badge in group)
        for group in (badges.important, badges.other)
        if group
    ]
    return "\n\n".join(lines)


__all__ = [
    "BadgeOptions",
    "BadgeSynthesizer",
    "escape_badge_text",
    "format_badges",
    "resolve_style",
]
