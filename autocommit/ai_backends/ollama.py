"""
Ollama backend over HTTP.
"""

import asyncio
import time

import aiohttp
from loguru import logger

from ..errors import BackendFailureError
from .base import TextBackend


class OllamaBackend(TextBackend):
    """Ollama ``/api/generate`` backend."""

    def __init__(self, api_url: str = "http://localhost:11434", timeout: int = 120):
        super().__init__(timeout)
        self.api_url = api_url.rstrip('/')

    def complete(self, prompt: str, model: str) -> str:
        self._log_request(prompt, model)
        start_time = time.time()

        try:
            content = asyncio.run(self.call_api(prompt, model))
        except aiohttp.ClientError as e:
            logger.error(f"Ollama API error: {e}")
            raise BackendFailureError(f"Ollama API error at {self.api_url}: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"Ollama API timeout after {self.timeout}s")
            raise BackendFailureError(f"Ollama API timeout after {self.timeout}s") from e

        self._log_response(content, time.time() - start_time)
        return content

    async def call_api(self, prompt: str, model: str) -> str:
        """Call the Ollama API."""
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": 0.1,
                "top_p": 0.9,
            }
        }

        async with aiohttp.ClientSession() as session:
            async with session.post(
                f"{self.api_url}/api/generate",
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                response.raise_for_status()
                data = await response.json()
                return data.get("response", "")
