"""GitHub repository metadata client and git helpers."""

from __future__ import annotations

import json
import os
import re
import subprocess
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, TypeVar
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from .errors import RemoteMetadataError
from .logging import get_logger
from .models import RemoteMetadata

T = TypeVar("T")

_logger = get_logger("github")

_URL_PATTERNS: Tuple[re.Pattern[str], ...] = (
    re.compile(r"^https?://(?:www\.)?github\.com/([^/]+)/([^/]+?)(?:\.git)?(?:/.*)?$"),
    re.compile(r"^(?:ssh://)?git@github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$"),
    re.compile(r"^([\w.-]+)/([\w.-]+?)(?:\.git)?$"),
)


def parse_github_url(url: str) -> Tuple[str, str]:
    """Return ``(owner, repo)`` from an https, ssh or ``owner/repo`` reference."""
    candidate = url.strip()
    for pattern in _URL_PATTERNS:
        match = pattern.match(candidate)
        if match:
            return match.group(1), match.group(2)
    raise RemoteMetadataError(
        f"Invalid GitHub URL format: {url}",
        hint="Use https://github.com/<owner>/<repo>, git@github.com:<owner>/<repo>.git or <owner>/<repo>.",
    )


def remote_matches(remote_url: str, full_name: str) -> bool:
    """Return True when ``remote_url`` points at exactly the repository ``full_name``."""
    try:
        owner, repo = parse_github_url(remote_url)
    except RemoteMetadataError:
        return False
    return f"{owner}/{repo}".lower() == full_name.lower()


def retry_with_backoff(
    func: Callable[[], T],
    *,
    attempts: int = 3,
    base_delay: float = 1.0,
    should_retry: Callable[[Exception], bool] = lambda exc: True,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``func`` until it succeeds, doubling the delay after each retryable failure."""
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except Exception as exc:
            if attempt == attempts or not should_retry(exc):
                raise
            delay = base_delay * 2 ** (attempt - 1)
            _logger.warning("Attempt %d failed (%s), retrying in %.1fs", attempt, exc, delay)
            sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover


def _is_transient(exc: Exception) -> bool:
    if isinstance(exc, HTTPError):
        return exc.code >= 500
    return isinstance(exc, (URLError, TimeoutError))


class GitHubClient:
    """Fetches repository records from the GitHub REST API."""

    API_URL = "https://api.github.com"
    USER_AGENT = "docsmith-cli"
    ENV_TOKEN_KEYS = ("DOCSMITH_GITHUB_TOKEN", "GITHUB_TOKEN")

    def __init__(
        self,
        *,
        token: str | None = None,
        api_url: str | None = None,
        timeout: float = 10.0,
        attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.token = token if token is not None else _first_env_value(self.ENV_TOKEN_KEYS)
        self.api_url = (api_url or self.API_URL).rstrip("/")
        self.timeout = timeout
        self.attempts = attempts
        self.base_delay = base_delay
        self._sleep = sleep

    def fetch(self, url: str) -> RemoteMetadata:
        """Return metadata for the repository referenced by ``url``."""
        owner, repo = parse_github_url(url)
        endpoint = f"{self.api_url}/repos/{quote(owner)}/{quote(repo)}"
        _logger.debug("Fetching metadata for %s/%s", owner, repo)

        try:
            payload = retry_with_backoff(
                lambda: self._get_json(endpoint),
                attempts=self.attempts,
                base_delay=self.base_delay,
                should_retry=_is_transient,
                sleep=self._sleep,
            )
        except HTTPError as exc:
            raise _http_error(exc, url) from exc
        except TimeoutError as exc:
            raise RemoteMetadataError("GitHub API request timed out. Please try again.") from exc
        except URLError as exc:
            if isinstance(exc.reason, TimeoutError):
                raise RemoteMetadataError("GitHub API request timed out. Please try again.") from exc
            raise RemoteMetadataError(
                "Cannot connect to GitHub API. Please check your internet connection."
            ) from exc
        except ValueError as exc:
            raise RemoteMetadataError(f"GitHub API returned invalid JSON for {owner}/{repo}") from exc

        if not isinstance(payload, dict):
            raise RemoteMetadataError(f"Unexpected GitHub API response for {owner}/{repo}")
        return RemoteMetadata.from_api_payload(payload)

    def _get_json(self, endpoint: str) -> Any:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        request = Request(endpoint, headers=headers, method="GET")
        with urlopen(request, timeout=self.timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
        return json.loads(raw.decode("utf-8"))


def _http_error(exc: HTTPError, url: str) -> RemoteMetadataError:
    if exc.code == 404:
        return RemoteMetadataError(
            f"Repository not found or is private: {url}",
            hint="Check that the repository URL is correct and publicly accessible.",
        )
    if exc.code in (403, 429):
        return RemoteMetadataError(
            "GitHub API rate limit exceeded. Please try again later.",
            hint="Set GITHUB_TOKEN to raise the rate limit.",
        )
    if exc.code == 401:
        return RemoteMetadataError(
            "GitHub API authentication failed.",
            hint="Check the token in GITHUB_TOKEN.",
        )
    message = _error_message(exc) or "Unknown error"
    return RemoteMetadataError(f"GitHub API error ({exc.code}): {message}")


def _error_message(exc: HTTPError) -> str:
    try:
        body = exc.read().decode("utf-8", errors="ignore")
    except (OSError, AttributeError):
        return ""
    try:
        data = json.loads(body)
    except ValueError:
        return body.strip()
    return str(data.get("message", "")) if isinstance(data, dict) else ""


def _first_env_value(keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


# git helpers


def _git(args: Sequence[str], cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        ["git", *args],
        cwd=str(cwd) if cwd is not None else None,
        check=True,
        capture_output=True,
        text=True,
    )


def is_git_repository(cwd: Path | None = None) -> bool:
    try:
        _git(["rev-parse", "--git-dir"], cwd)
    except (OSError, subprocess.CalledProcessError):
        return False
    return True


def current_repo_url(cwd: Path | None = None) -> str:
    """Return the ``origin`` remote URL of the repository at ``cwd``."""
    try:
        completed = _git(["config", "--get", "remote.origin.url"], cwd)
    except OSError as exc:
        raise RemoteMetadataError("git is not installed or not on PATH") from exc
    except subprocess.CalledProcessError as exc:
        raise RemoteMetadataError("No remote origin URL found") from exc

    remote_url = completed.stdout.strip()
    if not remote_url:
        raise RemoteMetadataError("No remote origin URL found")
    if "github.com" not in remote_url:
        raise RemoteMetadataError("Remote origin is not a GitHub repository")
    return remote_url


def clone_repo(clone_url: str, destination: Path) -> None:
    """Shallow-clone ``clone_url`` into ``destination``."""
    try:
        _git(["clone", "--depth", "1", "--quiet", clone_url, str(destination)])
    except OSError as exc:
        raise RemoteMetadataError("git is not installed or not on PATH") from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip()
        raise RemoteMetadataError(f"Failed to clone {clone_url}: {detail}") from exc


__all__ = [
    "GitHubClient",
    "clone_repo",
    "current_repo_url",
    "is_git_repository",
    "parse_github_url",
    "remote_matches",
    "retry_with_backoff",
]
