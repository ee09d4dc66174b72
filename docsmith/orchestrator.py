"""Pipeline orchestration for the docify flow."""

from __future__ import annotations

import asyncio
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from .aggregator import MetadataAggregator, analyze_local_project
from .assembler import ConfirmOverwrite, DocumentAssembler, WriteOutcome
from .badges import BadgeOptions, BadgeSynthesizer
from .config import DocsmithConfig, load_api_key, load_config
from .errors import NotAGitRepositoryError, RemoteMetadataError
from .github import (
    GitHubClient,
    clone_repo,
    current_repo_url,
    is_git_repository,
    remote_matches,
)
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import BadgeSet, LocalProject, RemoteMetadata
from .prompting.builder import PromptBuilder
from .scanner import ProjectScanner


@dataclass
class DocifyResult:
    """Outcome of one README generation run."""

    document: str
    badges: BadgeSet
    remote: Optional[RemoteMetadata]
    local: LocalProject
    outcome: WriteOutcome


class Orchestrator:
    """Coordinates remote fetch, local analysis, badges, generation and writing."""

    def __init__(
        self,
        github: GitHubClient | None = None,
        llm_runner: LLMRunner | None = None,
        prompt_builder: PromptBuilder | None = None,
        aggregator: MetadataAggregator | None = None,
        confirm: ConfirmOverwrite | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.github = github or GitHubClient()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.aggregator = aggregator or MetadataAggregator()
        self.logger = get_logger("orchestrator")
        self._llm_runner = llm_runner
        self._confirm = confirm
        self._stream = stream

    def docify(
        self,
        url: str | None = None,
        *,
        dry_run: bool = False,
        extra_instructions: str = "",
        badge_style: str | None = None,
        debug: bool = False,
        cwd: str | Path | None = None,
    ) -> DocifyResult:
        """Generate a README for ``url`` or for the git repository at ``cwd``."""
        working_dir = Path(cwd or os.getcwd()).expanduser().resolve()
        config = load_config(working_dir)
        scanner = ProjectScanner(config.scanner)

        if url:
            remote, local = self._analyze_remote(url, scanner)
        else:
            remote, local = self._analyze_working_copy(working_dir, scanner)

        for line in local.metadata.summary_lines:
            self.logger.info("%s", line)

        self.logger.info("Generating badges")
        badges = BadgeSynthesizer(config.badges).synthesize(
            remote, local.metadata, BadgeOptions(style=badge_style)
        )

        extra = extra_instructions or config.readme.extra_instructions or ""
        prompt = self.prompt_builder.build(remote, local, badges, extra)
        if debug:
            self.logger.debug("Prompt sent to model:\n%s", prompt)

        self.logger.info("Generating README content")
        runner = self._resolve_llm_runner(config)
        narrative = runner.run(prompt, system=PromptBuilder.SYSTEM_PROMPT)

        assembler = DocumentAssembler(
            config.readme.output, confirm=self._confirm, stream=self._stream
        )
        document = assembler.assemble(narrative, badges)
        outcome = assembler.write(document, working_dir, dry_run=dry_run)
        if outcome.written and len(badges):
            self.logger.info("Generated %d badges", len(badges))

        return DocifyResult(
            document=document,
            badges=badges,
            remote=remote,
            local=local,
            outcome=outcome,
        )

    def _analyze_remote(
        self, url: str, scanner: ProjectScanner
    ) -> tuple[RemoteMetadata, LocalProject]:
        self.logger.info("Fetching data from %s", url)
        remote = self.github.fetch(url)
        clone_url = remote.clone_url or f"https://github.com/{remote.full_name}.git"
        with tempfile.TemporaryDirectory(prefix="docsmith-") as tmp:
            checkout = Path(tmp) / (remote.name or "repo")
            clone_repo(clone_url, checkout)
            local = self._analyze_local(checkout, scanner)
        return remote, local

    def _analyze_working_copy(
        self, working_dir: Path, scanner: ProjectScanner
    ) -> tuple[Optional[RemoteMetadata], LocalProject]:
        if not is_git_repository(working_dir):
            raise NotAGitRepositoryError(
                "Current directory is not a Git repository and no URL was provided.",
                hint='Initialize a git repository with "git init" or pass a GitHub URL.',
            )

        remote: Optional[RemoteMetadata] = None
        try:
            remote_url = current_repo_url(working_dir)
            self.logger.info("Fetching GitHub data for local repository")
            remote = self.github.fetch(remote_url)
        except RemoteMetadataError as exc:
            self.logger.warning("Could not fetch GitHub data: %s", exc)
            self.logger.info("Proceeding with local analysis only")
        else:
            if not remote_matches(remote_url, remote.full_name):
                self.logger.warning(
                    "Origin %s resolved to %s; the repository may have been renamed or moved",
                    remote_url,
                    remote.full_name,
                )

        return remote, self._analyze_local(working_dir, scanner)

    def _analyze_local(self, path: Path, scanner: ProjectScanner) -> LocalProject:
        self.logger.info("Analyzing project files in %s", path)
        return asyncio.run(
            analyze_local_project(path, scanner=scanner, aggregator=self.aggregator)
        )

    def _resolve_llm_runner(self, config: DocsmithConfig) -> LLMRunner:
        if self._llm_runner is not None:
            return self._llm_runner
        llm = config.llm
        return LLMRunner(
            model=llm.model,
            base_url=llm.base_url,
            api_key=load_api_key(),
            temperature=llm.temperature if llm.temperature is not None else 0.2,
            max_tokens=llm.max_tokens,
            request_timeout=llm.request_timeout if llm.request_timeout is not None else 120.0,
        )


__all__ = ["DocifyResult", "Orchestrator"]
