"""
Git repository operations behind a narrow inspector interface.
"""

import re
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple

from loguru import logger

from ..errors import (
    CommitFailureError,
    MissingDependencyError,
    NotARepositoryError,
)

try:
    from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
except ImportError as e:  # GitPython refuses to import without a git executable
    raise MissingDependencyError(f"git is not available: {e}") from e


TICKET_PATTERN = re.compile(r'([A-Z]+-[0-9]+)')


class Operation(Enum):
    """What happened to a staged file."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class FileChange:
    """Represents a single staged file change."""

    path: str
    operation: Operation
    sensitive: bool = False

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip('.').lower()

    @property
    def is_added(self) -> bool:
        return self.operation is Operation.ADDED

    @property
    def is_deleted(self) -> bool:
        return self.operation is Operation.DELETED


@dataclass(frozen=True)
class CommitRecord:
    """A commit in recent-commits mode."""

    short_hash: str
    subject: str

    def __str__(self) -> str:
        return f"{self.short_hash} {self.subject}"


def extract_ticket_reference(branch_name: str) -> str:
    """Return the first ``ABC-123`` style ticket id in a branch name, or ``""``."""
    match = TICKET_PATTERN.search(branch_name or "")
    return match.group(1) if match else ""


class RepositoryInspector(ABC):
    """Everything the pipeline needs from version control."""

    @property
    @abstractmethod
    def root(self) -> Path:
        """Repository working tree root."""

    @abstractmethod
    def current_branch(self) -> str:
        pass

    @abstractmethod
    def staged_files(self) -> List[Tuple[str, Operation]]:
        """Staged paths with their operation, in git's listing order."""

    @abstractmethod
    def staged_diff(self, path: str) -> str:
        """Full staged diff of a single path."""

    @abstractmethod
    def recent_commits(self, count: int) -> List[CommitRecord]:
        pass

    @abstractmethod
    def commit(self, message: str) -> str:
        """Create a commit from the index and return its hash."""


class GitRepository(RepositoryInspector):
    """GitPython-backed repository inspector."""

    def __init__(self, repo_path: Optional[Path] = None):
        """Initialize Git repository."""
        if shutil.which("git") is None:
            raise MissingDependencyError("git executable not found on PATH")

        self.repo_path = repo_path or Path.cwd()
        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise NotARepositoryError(f"Not a Git repository: {self.repo_path}")

        if self.repo.bare:
            raise NotARepositoryError(f"Bare repository has no working tree: {self.repo_path}")

        logger.debug(f"Initialized Git repository at {self.repo.working_tree_dir}")

    @property
    def root(self) -> Path:
        return Path(self.repo.working_tree_dir)

    def current_branch(self) -> str:
        try:
            return self.repo.active_branch.name
        except TypeError:
            # detached HEAD
            logger.debug("HEAD is detached, using 'HEAD' as branch name")
            return "HEAD"

    def staged_files(self) -> List[Tuple[str, Operation]]:
        try:
            # -z: NUL separated and never quoted, whatever core.quotePath says
            output = self.repo.git.diff("--cached", "--name-status", "-z")
        except GitCommandError as e:
            raise NotARepositoryError(f"Failed to list staged files: {e}") from e

        listing = output.strip("\0")
        fields = listing.split("\0") if listing else []
        files = []
        i = 0
        while i < len(fields):
            status = fields[i]
            # renames and copies list the source path before the destination
            width = 2 if status[:1] in ("R", "C") else 1
            files.append((fields[i + width], self._operation_for(status)))
            i += width + 1

        logger.debug(f"Found {len(files)} staged files")
        return files

    @staticmethod
    def _operation_for(status: str) -> Operation:
        """Map a ``--name-status`` code to an operation."""
        code = status[:1]
        if code in ('A', 'C'):
            return Operation.ADDED
        if code == 'D':
            return Operation.DELETED
        return Operation.MODIFIED

    def staged_diff(self, path: str) -> str:
        try:
            return self.repo.git.diff("--cached", "--", path)
        except GitCommandError as e:
            logger.warning(f"Could not get staged diff for {path}: {e}")
            return ""

    def recent_commits(self, count: int) -> List[CommitRecord]:
        try:
            return [
                CommitRecord(short_hash=commit.hexsha[:7], subject=commit.summary)
                for commit in self.repo.iter_commits(max_count=count)
            ]
        except (ValueError, GitCommandError) as e:
            # no commits yet on this branch
            logger.debug(f"Could not read recent commits: {e}")
            return []

    def commit(self, message: str) -> str:
        """Create a commit with the given message, running the usual git hooks."""
        try:
            self.repo.git.commit("-m", message)
        except GitCommandError as e:
            detail = str(e.stderr or "").strip() or str(e)
            raise CommitFailureError(f"Failed to create commit: {detail}") from e

        commit_hash = self.repo.head.commit.hexsha
        logger.info(f"Created commit {commit_hash[:8]}: {message}")
        return commit_hash
