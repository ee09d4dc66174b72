"""Tests for the prompt builder."""

from __future__ import annotations

import asyncio

from docsmith.aggregator import analyze_local_project
from docsmith.badges import BadgeSynthesizer
from docsmith.models import RemoteMetadata, RepositoryOwner
from docsmith.prompting.builder import PromptBuilder


def _remote() -> RemoteMetadata:
    return RemoteMetadata(
        name="demo",
        full_name="ada/demo",
        description="Turns notes into docs",
        stars=42,
        forks=7,
        language="JavaScript",
        license="MIT License",
        topics=("docs", "cli"),
        owner=RepositoryOwner(login="ada", type="User"),
        created_at="2024-01-01T00:00:00Z",
    )


def _local(repo_builder):
    repo_builder.write(
        {
            "package.json": '{"name": "demo", "version": "1.0.0"}\n',
            "src/index.js": "console.log('hi');\n",
            "Makefile": "build:\n\tnpm run build\n",
        }
    )
    return asyncio.run(analyze_local_project(repo_builder.path()))


def test_prompt_sections_follow_fixed_order(repo_builder) -> None:
    local = _local(repo_builder)
    remote = _remote()
    badges = BadgeSynthesizer().synthesize(remote, local.metadata)

    prompt = PromptBuilder().build(remote, local, badges, "Keep it short.")

    positions = [
        prompt.index("GitHub Metadata:"),
        prompt.index("Project Structure:"),
        prompt.index("File Contents:"),
        prompt.index("Instructions:"),
        prompt.index("User extra instructions: Keep it short."),
    ]
    assert positions == sorted(positions)
    assert prompt.startswith("Please generate a comprehensive README.md for this project.")
    assert prompt.endswith("User extra instructions: Keep it short.")


def test_prompt_renders_remote_fields() -> None:
    prompt = PromptBuilder().build(_remote(), None, None)

    assert "Name: demo\n" in prompt
    assert "Stars: 42\n" in prompt
    assert "License: MIT License\n" in prompt
    assert "Topics: docs, cli\n" in prompt
    assert "Owner: ada (User)\n" in prompt
    assert "Project Structure:" not in prompt
    assert "File Contents:" not in prompt


def test_prompt_fences_files_with_extension_language(repo_builder) -> None:
    local = _local(repo_builder)

    prompt = PromptBuilder().build(None, local, None)

    assert "**src/index.js**\n```js\nconsole.log('hi');\n```" in prompt
    assert "**package.json**\n```json\n" in prompt
    assert "**Makefile**\n```\nbuild:" in prompt
    assert "GitHub Metadata:" not in prompt


def test_prompt_includes_tree_and_summary(repo_builder) -> None:
    local = _local(repo_builder)

    prompt = PromptBuilder().build(None, local, None)

    assert "```\nrepo/\n" in prompt
    assert "└── " in prompt
    assert "- Node.js package demo@1.0.0" in prompt
    assert "- Makefile targets: build" in prompt


def test_prompt_can_skip_file_contents(repo_builder) -> None:
    local = _local(repo_builder)

    prompt = PromptBuilder().build(None, local, None, include_contents=False)

    assert "Project Structure:" in prompt
    assert "File Contents:" not in prompt


def test_instruction_block_forbids_badges_and_requires_title() -> None:
    prompt = PromptBuilder().build(None, None, None)

    assert "DO NOT include the badges in your response" in prompt
    assert "starting with the project title as an H1 header" in prompt
    assert "User extra instructions" not in prompt


def test_blank_extra_instructions_are_ignored() -> None:
    prompt = PromptBuilder().build(None, None, None, "   ")

    assert "User extra instructions" not in prompt


def test_prompt_is_deterministic(repo_builder) -> None:
    local = _local(repo_builder)
    builder = PromptBuilder()

    assert builder.build(_remote(), local, None) == builder.build(_remote(), local, None)
