"""
shell-gpt (``sgpt``) backend.
"""

import shutil
import subprocess
import time

from loguru import logger

from ..errors import BackendFailureError, MissingDependencyError
from .base import TextBackend


class SgptBackend(TextBackend):
    """Pipe the prompt into the ``sgpt`` CLI and read its answer."""

    executable = "sgpt"

    def __init__(self, timeout: int = 120):
        super().__init__(timeout)
        if shutil.which(self.executable) is None:
            raise MissingDependencyError(
                f"'{self.executable}' not found on PATH. Install it with: pip install shell-gpt"
            )

    def complete(self, prompt: str, model: str) -> str:
        self._log_request(prompt, model)
        command = [self.executable, "--model", model, "--no-cache"]

        start_time = time.time()
        try:
            result = subprocess.run(command, input=prompt, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise MissingDependencyError(f"'{self.executable}' disappeared from PATH: {e}") from e
        except OSError as e:
            raise BackendFailureError(f"Failed to run {self.executable}: {e}") from e

        if result.returncode != 0:
            logger.error(f"sgpt stderr: {result.stderr.strip()}")
            raise BackendFailureError(
                f"{self.executable} exited with status {result.returncode}: {result.stderr.strip()}"
            )

        self._log_response(result.stdout, time.time() - start_time)
        return result.stdout
