"""Adapter around an OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import GenerationError

_CONFIGURE_HINT = 'Run "docsmith configure" to set up your API key.'


@dataclass
class LLMRequest:
    """Represents one completion request."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    base_url: str
    api_key: Optional[str]
    request_timeout: Optional[float]


def classify_generation_error(exc: Exception) -> GenerationError:
    """Map a backend failure onto a user-facing error with a remediation hint."""
    message = str(exc)
    lowered = message.lower()
    if "api key" in lowered or "api_key" in lowered or "status 401" in lowered:
        return GenerationError(
            "Invalid API key. The generation service rejected the configured key.",
            hint=_CONFIGURE_HINT,
        )
    if "quota" in lowered or "limit" in lowered or "status 429" in lowered:
        return GenerationError(
            "API quota exceeded. Please try again later or check your API usage limits.",
            hint="Wait for the quota window to reset or use a key with a higher limit.",
        )
    return GenerationError(f"Failed to generate README content: {message}")


class LLMRunner:
    """Sends prompts to the configured model and returns the response text."""

    DEFAULT_MODEL = "gemini-1.5-flash"
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"
    ENV_MODEL_KEYS = ("DOCSMITH_LLM_MODEL", "OPENAI_MODEL")
    ENV_BASE_URL_KEYS = ("DOCSMITH_LLM_BASE_URL", "OPENAI_BASE_URL")

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 120.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.model = model or _first_env_value(self.ENV_MODEL_KEYS) or self.DEFAULT_MODEL
        self.base_url = (
            base_url or _first_env_value(self.ENV_BASE_URL_KEYS) or self.DEFAULT_BASE_URL
        ).rstrip("/")
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._runner = runner or self._http_runner

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Send the prompt and return the response text, raising GenerationError on failure."""
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            base_url=self.base_url,
            api_key=self.api_key,
            request_timeout=self.request_timeout,
        )
        try:
            return self._runner(request)
        except GenerationError:
            raise
        except Exception as exc:
            raise classify_generation_error(exc) from exc

    @staticmethod
    def _http_runner(request: LLMRequest) -> str:
        body: dict[str, object] = {
            "model": request.model,
            "messages": _chat_messages(request),
        }
        if request.temperature is not None:
            body["temperature"] = request.temperature
        if request.max_tokens is not None:
            body["max_tokens"] = request.max_tokens

        headers = {"Content-Type": "application/json", "User-Agent": "docsmith-cli"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"
        http_request = Request(
            f"{request.base_url}/chat/completions",
            data=json.dumps(body).encode("utf-8"),
            headers=headers,
            method="POST",
        )

        try:
            with urlopen(http_request, timeout=request.request_timeout or 120.0) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            raise RuntimeError(
                f"Generation endpoint answered with status {exc.code}: {_api_error_message(exc)}"
            ) from exc
        except URLError as exc:
            raise RuntimeError(
                f"Could not reach the generation endpoint at {request.base_url}: {exc.reason}"
            ) from exc

        return _unwrap_markdown_fence(_completion_text(raw))


def _chat_messages(request: LLMRequest) -> list[dict[str, str]]:
    if not request.system:
        return [{"role": "user", "content": request.prompt}]
    return [
        {"role": "system", "content": request.system},
        {"role": "user", "content": request.prompt},
    ]


def _api_error_message(exc: HTTPError) -> str:
    """Pull ``error.message`` out of an OpenAI- or Gemini-style error body."""
    try:
        body = exc.read().decode("utf-8", errors="ignore").strip()
    except (OSError, AttributeError):
        body = ""
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        return body or str(exc.reason)
    # Gemini wraps the error object in a one-element list.
    if isinstance(payload, list) and payload:
        payload = payload[0]
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
    return body or str(exc.reason)


def _completion_text(raw: bytes) -> str:
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise RuntimeError("Generation endpoint returned invalid JSON") from exc

    choices = payload.get("choices") if isinstance(payload, dict) else None
    first = choices[0] if isinstance(choices, list) and choices else None
    if not isinstance(first, dict):
        raise RuntimeError("Generation endpoint returned an empty response")
    if first.get("finish_reason") == "content_filter":
        raise RuntimeError("Generation endpoint withheld the README (content filter)")

    message = first.get("message")
    content = message.get("content") if isinstance(message, dict) else first.get("text")
    if isinstance(content, list):
        content = "".join(
            part.get("text", "") for part in content if isinstance(part, dict)
        )
    if not isinstance(content, str) or not content.strip():
        raise RuntimeError("Generation endpoint returned an empty response")
    return content.strip()


def _unwrap_markdown_fence(text: str) -> str:
    """Drop a ```markdown ... ``` wrapper around the whole answer."""
    lines = text.splitlines()
    if (
        len(lines) >= 2
        and lines[0].strip() in {"```", "```md", "```markdown"}
        and lines[-1].strip() == "```"
    ):
        return "\n".join(lines[1:-1]).strip()
    return text


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None
