"""
Tests for the text backends and their factory.
"""

import asyncio
import subprocess

import aiohttp
import pytest

from autocommit.ai_backends import ollama, sgpt
from autocommit.ai_backends.factory import BackendFactory
from autocommit.ai_backends.ollama import OllamaBackend
from autocommit.ai_backends.sgpt import SgptBackend
from autocommit.config.settings import Config
from autocommit.errors import BackendFailureError, MissingDependencyError


@pytest.fixture
def sgpt_on_path(monkeypatch):
    monkeypatch.setattr(sgpt.shutil, "which", lambda name: f"/usr/bin/{name}")


class TestSgptBackend:

    def test_missing_executable(self, monkeypatch):
        monkeypatch.setattr(sgpt.shutil, "which", lambda name: None)
        with pytest.raises(MissingDependencyError) as exc_info:
            SgptBackend()
        assert exc_info.value.exit_code == 3

    def test_prompt_goes_to_stdin(self, sgpt_on_path, monkeypatch):
        seen = {}

        def fake_run(command, input, capture_output, text):
            seen["command"] = command
            seen["input"] = input
            return subprocess.CompletedProcess(command, 0, stdout="FEAT: Add login\n", stderr="")

        monkeypatch.setattr(sgpt.subprocess, "run", fake_run)

        assert SgptBackend().complete("the prompt", "gpt-4o") == "FEAT: Add login\n"
        assert seen["command"] == ["sgpt", "--model", "gpt-4o", "--no-cache"]
        assert seen["input"] == "the prompt"

    def test_non_zero_exit(self, sgpt_on_path, monkeypatch):
        monkeypatch.setattr(
            sgpt.subprocess, "run",
            lambda command, **kwargs: subprocess.CompletedProcess(command, 1, stdout="", stderr="rate limited"),
        )
        with pytest.raises(BackendFailureError) as exc_info:
            SgptBackend().complete("prompt", "gpt-4o")
        assert "rate limited" in str(exc_info.value)


class TestOllamaBackend:

    def test_api_url_is_normalized(self):
        assert OllamaBackend("http://localhost:11434/").api_url == "http://localhost:11434"

    def test_response_text(self, monkeypatch):
        async def fake_call_api(self, prompt, model):
            return f"{model}: {prompt}"

        monkeypatch.setattr(OllamaBackend, "call_api", fake_call_api)
        assert OllamaBackend().complete("hello", "llama3") == "llama3: hello"

    @pytest.mark.parametrize("error", [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()])
    def test_transport_errors(self, monkeypatch, error):
        async def fake_call_api(self, prompt, model):
            raise error

        monkeypatch.setattr(OllamaBackend, "call_api", fake_call_api)
        with pytest.raises(BackendFailureError):
            OllamaBackend(timeout=10).complete("hello", "llama3")


class TestBackendFactory:

    def test_supported(self):
        assert BackendFactory.list_supported_backends() == ["sgpt", "ollama"]

    def test_ollama_uses_config(self):
        backend = BackendFactory.create_backend(Config(backend="ollama", api_url="http://gpu:11434", timeout=30))
        assert isinstance(backend, ollama.OllamaBackend)
        assert backend.api_url == "http://gpu:11434"
        assert backend.timeout == 30
        assert backend.backend_type == "ollama"

    def test_sgpt_is_default(self, sgpt_on_path):
        backend = BackendFactory.create_backend(Config())
        assert isinstance(backend, SgptBackend)
        assert backend.backend_type == "sgpt"
