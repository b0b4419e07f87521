"""
Core autocommit pipeline: evidence, prompt, generation, validation, commit.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from .ai_backends.base import TextBackend, complete_or_fail
from .ai_backends.factory import BackendFactory
from .config.settings import Config
from .errors import BackendFailureError, CommitFailureError, NoEvidenceError
from .git_ops.repository import GitRepository, RepositoryInspector, extract_ticket_reference
from .ui.console import AutocommitConsole
from .utils.changes import build_change_set, classify_change_set, summarize_diffs
from .utils.message_extractor import ConsistencyEnforcer, clean_response, validate_commit_message
from .utils.prompts import ArtifactKind, EvidenceDigest, PromptBuilder


# Records bound with this flag go to the optional commit log sink only.
commit_log = logger.bind(commit_log=True)


@dataclass
class GeneratedArtifact:
    """Result of one pipeline run."""

    kind: ArtifactKind
    raw_text: str
    text: str
    valid: Optional[bool] = None
    refined: Optional[str] = None
    commit_hash: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.commit_hash is not None


class Autocommit:
    """Sequences evidence gathering, prompting, validation and commit creation."""

    def __init__(
        self,
        config: Config,
        repository: RepositoryInspector,
        backend: TextBackend,
        console: Optional[AutocommitConsole] = None,
        prompt_builder: Optional[PromptBuilder] = None
    ):
        self.config = config
        self.repository = repository
        self.backend = backend
        self.console = console or AutocommitConsole(verbose=config.verbose)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.enforcer = ConsistencyEnforcer(backend, self.prompt_builder)

    @classmethod
    def create(cls, repo_path: Optional[Path] = None, **overrides) -> "Autocommit":
        """Wire the real collaborators for the repository at ``repo_path``."""
        repository = GitRepository(repo_path)
        config = Config.load(repo_root=repository.root, **overrides)
        backend = BackendFactory.create_backend(config)
        logger.info(f"Using {backend.backend_type} backend with model {config.model}")
        return cls(config, repository, backend)

    def generate(
        self,
        kind: ArtifactKind = ArtifactKind.COMMIT,
        recent_commit_count: Optional[Union[int, str]] = None,
        context: Optional[str] = None,
        model: Optional[str] = None,
        message_only: bool = False
    ) -> GeneratedArtifact:
        """Run the pipeline once and return the generated artifact.

        A commit is created only for commit messages generated from staged
        changes, and only when ``message_only`` is false.
        """
        if kind is ArtifactKind.CONSISTENCY_FIX:
            raise ValueError("consistency_fix is applied to commit messages, not generated directly")

        model = model or self.config.model
        branch = self.repository.current_branch()
        ticket = extract_ticket_reference(branch)

        self._trace(
            f"Generating {kind.value}: commits={recent_commit_count}, model={model}, "
            f"branch={branch}, ticket={ticket or '-'}, context={context!r}"
        )

        evidence = self._gather_evidence(recent_commit_count)
        prompt = self.prompt_builder.build(kind, evidence, branch, ticket, context)
        self._trace(f"Prompt built from {evidence.label} ({len(prompt)} characters)")

        raw_text = clean_response(complete_or_fail(self.backend, prompt, model))
        if not raw_text:
            raise BackendFailureError("Failed to generate message: backend returned an empty response")
        self._trace(f"Raw message: {raw_text}")

        artifact = GeneratedArtifact(kind=kind, raw_text=raw_text, text=raw_text)
        if kind is not ArtifactKind.COMMIT:
            return artifact

        artifact.valid = validate_commit_message(raw_text, branch, ticket)
        if not artifact.valid:
            self._trace("Raw message validation failed, running consistency pass")
            artifact.refined = self.enforcer.fix(raw_text, branch, model, ticket)
            artifact.text = artifact.refined
            self._trace(f"Refined message: {artifact.text}")

        if message_only or recent_commit_count is not None:
            self._trace("Message only, skipping commit")
            return artifact

        artifact.commit_hash = self._commit(artifact.text)
        return artifact

    def _gather_evidence(self, recent_commit_count: Optional[Union[int, str]]) -> EvidenceDigest:
        if recent_commit_count is not None:
            count = parse_commit_count(recent_commit_count)
            evidence = EvidenceDigest.from_commits(self.repository.recent_commits(count))
            if evidence.is_empty:
                raise NoEvidenceError("No commits to analyze")
            self._trace(f"Analyzing {len(evidence.commits)} recent commits")
            return evidence

        changes = build_change_set(self.repository.staged_files())
        if not changes:
            raise NoEvidenceError("No changes staged for commit. Use 'git add' to stage changes.")

        self._trace(f"Analyzing {len(changes)} staged files")
        classification = classify_change_set(changes)
        diffs = summarize_diffs([change.path for change in changes], self.repository.staged_diff)
        return EvidenceDigest.from_staged(classification.render(), diffs)

    def _commit(self, message: str) -> str:
        try:
            commit_hash = self.repository.commit(message)
        except CommitFailureError:
            commit_log.info("Commit failed")
            raise
        commit_log.info(f"Commit successful: {message}")
        return commit_hash

    def _trace(self, message: str) -> None:
        logger.debug(message)
        self.console.print_trace(message)


def parse_commit_count(value: Union[int, str]) -> int:
    """Validate the recent-commit count, which must be a positive integer."""
    if isinstance(value, bool):
        raise NoEvidenceError(f"Commit count must be a positive integer, got {value!r}")
    try:
        count = int(str(value).strip())
    except ValueError:
        raise NoEvidenceError(f"Commit count must be a positive integer, got {value!r}")
    if count <= 0:
        raise NoEvidenceError(f"Commit count must be a positive integer, got {count}")
    return count
