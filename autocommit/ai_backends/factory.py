"""
Text backend factory.
"""

from typing import Dict, List, Type

from loguru import logger

from ..config.settings import Config
from .base import TextBackend
from .ollama import OllamaBackend
from .sgpt import SgptBackend


class BackendFactory:
    """Create the text backend named by the configuration."""

    _backends: Dict[str, Type[TextBackend]] = {
        "sgpt": SgptBackend,
        "ollama": OllamaBackend,
    }

    @classmethod
    def create_backend(cls, config: Config) -> TextBackend:
        if config.backend not in cls._backends:
            raise ValueError(f"Unknown backend type: {config.backend}")

        logger.debug(f"Creating {config.backend} backend")
        if config.backend == "ollama":
            return OllamaBackend(api_url=config.api_url, timeout=config.timeout)
        return cls._backends[config.backend](timeout=config.timeout)

    @classmethod
    def list_supported_backends(cls) -> List[str]:
        """List all supported backend types."""
        return list(cls._backends.keys())
