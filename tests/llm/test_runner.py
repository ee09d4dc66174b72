"""Tests for the chat completions runner."""

from __future__ import annotations

import io
import json
from urllib.error import HTTPError

import pytest

from docsmith.errors import GenerationError
from docsmith.llm.runner import LLMRunner, classify_generation_error


@pytest.fixture(autouse=True)
def _clear_llm_env(monkeypatch) -> None:
    for key in LLMRunner.ENV_MODEL_KEYS + LLMRunner.ENV_BASE_URL_KEYS:
        monkeypatch.delenv(key, raising=False)


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def read(self):
        return json.dumps(self._payload).encode("utf-8")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_llm_runner_constructs_request() -> None:
    captured = {}

    def fake_runner(request):
        captured["prompt"] = request.prompt
        captured["system"] = request.system
        captured["model"] = request.model
        captured["temperature"] = request.temperature
        captured["max_tokens"] = request.max_tokens
        captured["base_url"] = request.base_url
        captured["api_key"] = request.api_key
        captured["request_timeout"] = request.request_timeout
        return "response"

    runner = LLMRunner(
        model="custom-model",
        temperature=0.15,
        max_tokens=256,
        request_timeout=42.0,
        runner=fake_runner,
    )
    result = runner.run("Hello world", system="system message")

    assert result == "response"
    assert captured == {
        "prompt": "Hello world",
        "system": "system message",
        "model": "custom-model",
        "temperature": 0.15,
        "max_tokens": 256,
        "base_url": LLMRunner.DEFAULT_BASE_URL,
        "api_key": None,
        "request_timeout": 42.0,
    }


def test_llm_runner_defaults_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("DOCSMITH_LLM_MODEL", "env-model")
    monkeypatch.setenv("OPENAI_BASE_URL", "http://localhost:8080/v1/")

    runner = LLMRunner()

    assert runner.model == "env-model"
    assert runner.base_url == "http://localhost:8080/v1"


def test_llm_runner_http_posts_payload(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["headers"] = {k.lower(): v for k, v in request.header_items()}
        captured["payload"] = json.loads(request.data.decode("utf-8"))
        captured["timeout"] = timeout
        return FakeResponse({"choices": [{"message": {"content": "# Demo\n\nA demo.\n"}}]})

    monkeypatch.setattr("docsmith.llm.runner.urlopen", fake_urlopen)

    runner = LLMRunner(
        model="gemini-1.5-flash",
        base_url="http://localhost:12434/engines/v1/",
        api_key="local-key",
        temperature=0.05,
        max_tokens=128,
        request_timeout=25.0,
    )
    result = runner.run("Write a README.", system="Act like a technical writer.")

    assert result == "# Demo\n\nA demo."
    assert captured["url"] == "http://localhost:12434/engines/v1/chat/completions"
    headers = captured["headers"]
    assert headers["content-type"] == "application/json"
    assert headers["authorization"] == "Bearer local-key"
    payload = captured["payload"]
    assert payload["model"] == "gemini-1.5-flash"
    assert payload["messages"][0] == {"role": "system", "content": "Act like a technical writer."}
    assert payload["messages"][1] == {"role": "user", "content": "Write a README."}
    assert payload["temperature"] == 0.05
    assert payload["max_tokens"] == 128
    assert captured["timeout"] == 25.0


def test_llm_runner_reads_legacy_text_field(monkeypatch) -> None:
    monkeypatch.setattr(
        "docsmith.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse({"choices": [{"text": "plain text"}]}),
    )

    assert LLMRunner(api_key="k").run("prompt") == "plain text"


def test_llm_runner_maps_rejected_key(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise HTTPError(request.full_url, 401, "Unauthorized", {}, io.BytesIO(b'{"error": "bad key"}'))

    monkeypatch.setattr("docsmith.llm.runner.urlopen", fake_urlopen)

    with pytest.raises(GenerationError) as excinfo:
        LLMRunner(api_key="wrong").run("prompt")

    assert "Invalid API key" in str(excinfo.value)
    assert "docsmith configure" in (excinfo.value.hint or "")


def test_llm_runner_reports_empty_response(monkeypatch) -> None:
    monkeypatch.setattr(
        "docsmith.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse({"choices": []}),
    )

    with pytest.raises(GenerationError, match="empty response"):
        LLMRunner(api_key="k").run("prompt")


def test_llm_runner_passes_generation_errors_through() -> None:
    original = GenerationError("already classified")

    def fake_runner(request):
        raise original

    with pytest.raises(GenerationError) as excinfo:
        LLMRunner(runner=fake_runner).run("prompt")
    assert excinfo.value is original


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("API key not valid. Please pass a valid API key.", "Invalid API key"),
        ("LLM request failed with status 401: denied", "Invalid API key"),
        ("Resource has been exhausted (e.g. check quota).", "API quota exceeded"),
        ("LLM request failed with status 429: slow down", "API quota exceeded"),
        ("connection reset by peer", "Failed to generate README content: connection reset by peer"),
    ],
)
def test_classify_generation_error(message: str, expected: str) -> None:
    error = classify_generation_error(RuntimeError(message))

    assert isinstance(error, GenerationError)
    assert expected in str(error)


def test_llm_runner_unwraps_fenced_readme(monkeypatch) -> None:
    fenced = "```markdown\n# Demo\n\nA demo.\n```"
    monkeypatch.setattr(
        "docsmith.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse({"choices": [{"message": {"content": fenced}}]}),
    )

    assert LLMRunner(api_key="k").run("prompt") == "# Demo\n\nA demo."


def test_llm_runner_joins_content_parts(monkeypatch) -> None:
    parts = [{"type": "text", "text": "# Demo\n"}, {"type": "text", "text": "Body"}]
    monkeypatch.setattr(
        "docsmith.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse({"choices": [{"message": {"content": parts}}]}),
    )

    assert LLMRunner(api_key="k").run("prompt") == "# Demo\nBody"


def test_llm_runner_reads_gemini_error_body(monkeypatch) -> None:
    body = b'[{"error": {"code": 429, "message": "Resource has been exhausted (e.g. check quota)."}}]'

    def fake_urlopen(request, timeout=None):
        raise HTTPError(request.full_url, 429, "Too Many Requests", {}, io.BytesIO(body))

    monkeypatch.setattr("docsmith.llm.runner.urlopen", fake_urlopen)

    with pytest.raises(GenerationError, match="API quota exceeded"):
        LLMRunner(api_key="k").run("prompt")


def test_llm_runner_reports_filtered_response(monkeypatch) -> None:
    monkeypatch.setattr(
        "docsmith.llm.runner.urlopen",
        lambda request, timeout=None: FakeResponse(
            {"choices": [{"finish_reason": "content_filter", "message": {"content": ""}}]}
        ),
    )

    with pytest.raises(GenerationError, match="content filter"):
        LLMRunner(api_key="k").run("prompt")
