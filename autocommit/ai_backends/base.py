"""
Abstract base class for text generation backends.
"""

from abc import ABC, abstractmethod

from loguru import logger

from ..errors import AutocommitError, BackendFailureError


class TextBackend(ABC):
    """A backend that turns a prompt into text, synchronously."""

    def __init__(self, timeout: int = 120):
        self.timeout = timeout
        self.backend_type = self.__class__.__name__.lower().replace('backend', '')

    @abstractmethod
    def complete(self, prompt: str, model: str) -> str:
        """Return the backend's answer to ``prompt``.

        Raises ``BackendFailureError`` when the backend errors. An empty
        string is a valid return value; callers decide what it means.
        """

    def _log_request(self, prompt: str, model: str) -> None:
        logger.debug(f"Text backend request to {self.backend_type}")
        logger.debug(f"Model: {model}")
        logger.debug(f"Prompt length: {len(prompt)} characters")

    def _log_response(self, content: str, response_time: float) -> None:
        logger.debug(f"Text backend response from {self.backend_type}")
        logger.debug(f"Response length: {len(content)} characters")
        logger.debug(f"Response time: {response_time:.2f}s")


def complete_or_fail(backend: TextBackend, prompt: str, model: str) -> str:
    """Call ``backend.complete``; anything but an autocommit error becomes ``BackendFailureError``."""
    try:
        return backend.complete(prompt, model)
    except AutocommitError:
        raise
    except Exception as e:
        logger.exception("Unexpected backend error")
        raise BackendFailureError(f"Failed to generate message using {backend.backend_type}: {e}") from e
