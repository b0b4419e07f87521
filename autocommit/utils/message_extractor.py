"""
Commit message cleanup, validation and the one-shot consistency pass.
"""

import re
from typing import Optional

from loguru import logger

from ..ai_backends.base import TextBackend, complete_or_fail
from ..errors import RefinementFailureError
from .prompts import ArtifactKind, EvidenceDigest, PromptBuilder


# Backends like to explain themselves instead of answering.
PREAMBLE_MARKER = "Based on the changes"

_FENCE = re.compile(r'^```[\w-]*\s*\n(.*?)\n?```$', re.DOTALL)
# only the ticket slot of the subject line: "CATEGORY:[]", "CATEGORY: []" or a leading "[]"
_EMPTY_TICKET_PREFIX = re.compile(r'^(?:([A-Za-z_]+:)[ \t]*|[ \t]*)\[\][ \t]*')


def clean_response(response: Optional[str]) -> str:
    """Strip whitespace, a wrapping markdown code block and wrapping quotes."""
    cleaned = (response or "").strip()

    fenced = _FENCE.match(cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()

    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in ('"', "'", '`'):
        cleaned = cleaned[1:-1].strip()

    return cleaned


def validate_commit_message(message: str, branch: str = "", ticket: str = "") -> bool:
    """Structural smoke test for a generated commit message.

    Catches the two failures seen in practice: lowercase drift and the
    backend talking about the changes instead of writing the message.
    """
    if not re.match(r'[A-Z]', message or ""):
        logger.warning("Validation failed: commit message must start with a capitalized word")
        return False

    if PREAMBLE_MARKER in message:
        logger.warning("Validation failed: commit message contains unnecessary phrases")
        return False

    logger.debug(f"Commit message passed validation (branch={branch!r}, ticket={ticket!r})")
    return True


def strip_empty_ticket(message: str) -> str:
    """Remove the ``[]`` left where a missing ticket number would go."""
    message = _EMPTY_TICKET_PREFIX.sub(lambda m: f"{m.group(1)} " if m.group(1) else "", message, count=1)
    return message.strip()


class ConsistencyEnforcer:
    """Second pass that reformats a rejected commit message."""

    def __init__(self, backend: TextBackend, prompt_builder: Optional[PromptBuilder] = None):
        self.backend = backend
        self.prompt_builder = prompt_builder or PromptBuilder()

    def fix(self, raw_message: str, branch: str, model: str, ticket: str = "") -> str:
        logger.info("Enforcing commit message consistency...")

        prompt = self.prompt_builder.build(
            ArtifactKind.CONSISTENCY_FIX,
            EvidenceDigest.from_message(raw_message),
            branch,
            ticket,
        )
        refined = clean_response(complete_or_fail(self.backend, prompt, model))

        if not ticket:
            refined = strip_empty_ticket(refined)

        if not refined:
            raise RefinementFailureError("Could not refine commit message: backend returned nothing")

        logger.debug(f"Refined commit message: {refined}")
        return refined
