"""
Prompt templates and assembly for every artifact kind.

A prompt is always laid out in the same order: role sentence, evidence,
instruction template, branch/ticket parameters and, last, any context the
user supplied. The backend reads the data before it is told what shape to
answer in, and user context can settle ambiguous cases because nothing
follows it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from loguru import logger

from ..git_ops.repository import CommitRecord


class ArtifactKind(Enum):
    COMMIT = "commit"
    TICKET = "ticket"
    CHANGE_REQUEST = "change_request"
    CONSISTENCY_FIX = "consistency_fix"


class CommitCategory(Enum):
    """Allowed leading tokens of a commit message."""

    FEAT = "FEAT"
    BUGFIX = "BUGFIX"
    REFACTOR = "REFACTOR"
    CHORE = "CHORE"
    CICD = "CICD"
    ETC = "ETC"


CATEGORIES = ", ".join(category.value for category in CommitCategory)


def _fenced(label: str, body: str) -> str:
    return f"{label} {'>' * 52}\n{body}\n{'<' * 66} {label} END"


ROLES = {
    ArtifactKind.COMMIT: "You are an intelligent assistant specializing in creating concise and descriptive Git commit messages.",
    ArtifactKind.TICKET: "You are an assistant helping to generate descriptive issue tracker ticket descriptions.",
    ArtifactKind.CHANGE_REQUEST: "You are an assistant helping to generate clear and detailed Pull Request descriptions.",
    ArtifactKind.CONSISTENCY_FIX: "You are an assistant that reformats Git commit messages without changing what they say.",
}


COMMIT_INSTRUCTIONS = _fenced("COMMIT INSTRUCTIONS", f"""
    Generate a concise git commit message summarizing the key changes.

    **Requirements:**

    - Start with one of these categories: {CATEGORIES}.
    - Include the ticket number if available in the format: [ABC-123].
    - Format the commit message as:
        - **With ticket number:** CATEGORY:[TICKET_NUMBER] A concise summary.
        - **Without ticket number:** CATEGORY: A concise summary.
    - Focus on the overall purpose and impact of the changes.
    - Combine smaller changes into meaningful descriptions.
    - Ignore any code reformatting or minor cleanups.

    **IMPORTANT:**

    - **Provide only the commit message.**
    - **Do not include any introductory or concluding sentences.**
    - **Do not add explanations, summaries, or lists of changes.**

    **Output Format:**

    CATEGORY:[TICKET_NUMBER] A concise summary of changes.

    **Example:**

    FEAT:[ABC-123] Implement user authentication using OAuth 2.0.
""")

TICKET_INSTRUCTIONS = _fenced("TICKET INSTRUCTIONS", """
    Generate a ticket title and description.

    **Requirements:**

    - **Title:** A concise, goal-oriented title for the task to be done.
    - **Description:** A detailed explanation of what needs to be implemented, focusing on high-level objectives and goals.

    **Important:**

    - **Provide only the title and description. Do not include any introductory or concluding sentences.**
    - **Do not add explanations, summaries, or lists of changes.**

    **Output Format:**

    Title: [Your Title]
    Description: [Your Description]

    **Example:**

    Title: FEAT: Implement user authentication
    Description: Add user login and registration functionality using OAuth 2.0. Ensure secure password storage and session management.
""")

CHANGE_REQUEST_INSTRUCTIONS = _fenced("PR INSTRUCTIONS", f"""
    Create a Pull Request title and description.

    **Requirements:**

    - **Title:**
        - Start with one of these categories: {CATEGORIES}.
        - If a ticket number is available, include it in the format: [ABC-123].
        - Format: CATEGORY: [TICKET_NUMBER] A concise summary of changes.

    - **Description:**
        - Provide a detailed summary of the changes made.
        - Highlight key features, fixes, or improvements.
        - Focus on the purpose and impact of the changes.

    **IMPORTANT:**

    - **Provide only the title and description.**
    - **Do not include any introductory or concluding sentences.**

    **Output Format:**

    Title: CATEGORY: [TICKET_NUMBER] Summary
    Description: Detailed description

    **Example:**

    Title: FEAT: [ABC-123] Add user authentication
    Description: Implemented OAuth 2.0 for user login and registration. Ensured secure password storage and session management.
""")

CONSISTENCY_INSTRUCTIONS = _fenced("CONSISTENCY INSTRUCTIONS", """
    Reformat the raw commit message above according to these specifications. Do not write a new message.

    - Begin with the appropriate category (e.g., FEAT, BUGFIX, REFACTOR).
    - Include the ticket number if present.
    - The final format should be: CATEGORY:[TICKET_NUMBER] A concise summary of changes.
    - Preserve the structure of the message, including any bullet points or line breaks.

    **Example:**

    BUGFIX:[ABC-123] Handle missing session cookie on logout.

    **IMPORTANT:**

    - **Provide only the final commit message**
    - **Do not include any introductory or concluding sentences.**
""")

TEMPLATES = {
    ArtifactKind.COMMIT: COMMIT_INSTRUCTIONS,
    ArtifactKind.TICKET: TICKET_INSTRUCTIONS,
    ArtifactKind.CHANGE_REQUEST: CHANGE_REQUEST_INSTRUCTIONS,
    ArtifactKind.CONSISTENCY_FIX: CONSISTENCY_INSTRUCTIONS,
}


@dataclass(frozen=True)
class EvidenceDigest:
    """Exactly one of staged-change text or recent commit records."""

    staged: Optional[str] = None
    commits: Optional[Tuple[CommitRecord, ...]] = None
    raw_message: Optional[str] = None

    def __post_init__(self):
        provided = [value for value in (self.staged, self.commits, self.raw_message) if value is not None]
        if len(provided) != 1:
            raise ValueError("EvidenceDigest needs exactly one source of evidence")

    @classmethod
    def from_staged(cls, classification: str, diffs: str) -> "EvidenceDigest":
        return cls(staged=f"{classification}\n\nSummarized Diffs:\n{diffs}")

    @classmethod
    def from_commits(cls, commits: Sequence[CommitRecord]) -> "EvidenceDigest":
        return cls(commits=tuple(commits))

    @classmethod
    def from_message(cls, message: str) -> "EvidenceDigest":
        return cls(raw_message=message)

    @property
    def label(self) -> str:
        if self.staged is not None:
            return "STAGED CHANGES"
        if self.commits is not None:
            return "RECENT COMMITS"
        return "RAW COMMIT MESSAGE"

    @property
    def is_empty(self) -> bool:
        if self.commits is not None:
            return not self.commits
        return not (self.staged or self.raw_message or "").strip()

    def render(self) -> str:
        if self.staged is not None:
            body = self.staged
        elif self.commits is not None:
            body = "\n".join(str(record) for record in self.commits)
        else:
            body = f'Raw commit message: "{self.raw_message}"'
        return _fenced(self.label, f"\n{body}\n")


@dataclass(frozen=True)
class PromptRequest:
    """Everything the backend sees for one call."""

    kind: ArtifactKind
    role: str
    evidence: str
    instructions: str
    branch_name: str
    ticket_ref: str = ""
    user_context: Optional[str] = None

    @property
    def parameters(self) -> str:
        if self.kind is ArtifactKind.CONSISTENCY_FIX:
            return (
                f"- If ticket number is not present, try to infer it from the branch name: {self.branch_name}\n"
                f"- Use this ticket number if available: {self.ticket_ref}"
            )
        return (
            f"- Use the current branch name for context: {self.branch_name}.\n"
            f"- Use this ticket number: {self.ticket_ref}"
        )

    def render(self) -> str:
        parts = [self.role, self.evidence, self.instructions, self.parameters]
        if self.user_context:
            parts.append(f"**THE LATEST CONTEXT**: {self.user_context}")
        return "\n\n".join(parts)


class PromptBuilder:
    """Select and fill the template for an artifact kind."""

    def build_request(
        self,
        kind: ArtifactKind,
        evidence: EvidenceDigest,
        branch: str,
        ticket: str = "",
        context: Optional[str] = None
    ) -> PromptRequest:
        try:
            instructions = TEMPLATES[kind]
            role = ROLES[kind]
        except KeyError:
            raise ValueError(f"No prompt template for {kind}")

        context = context.strip() if context else None
        return PromptRequest(
            kind=kind,
            role=role,
            evidence=evidence.render(),
            instructions=instructions,
            branch_name=branch,
            ticket_ref=ticket or "",
            user_context=context or None,
        )

    def build(
        self,
        kind: ArtifactKind,
        evidence: EvidenceDigest,
        branch: str,
        ticket: str = "",
        context: Optional[str] = None
    ) -> str:
        prompt = self.build_request(kind, evidence, branch, ticket, context).render()
        logger.debug(f"Built {kind.value} prompt from {evidence.label}: {len(prompt)} characters")
        return prompt
