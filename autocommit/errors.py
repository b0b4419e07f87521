"""
Error taxonomy for autocommit.

Every error is terminal for the current run and maps to a distinct process
exit code so scripts can branch on the failure class.
"""

from typing import Optional


class AutocommitError(Exception):
    """Base exception for autocommit operations."""

    exit_code = 1
    step = "autocommit"

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        if step:
            self.step = step

    def __str__(self) -> str:
        return f"[{self.step}] {super().__str__()}"


class NotARepositoryError(AutocommitError):
    """The working directory is not inside a git repository."""

    exit_code = 2
    step = "repository"


class MissingDependencyError(AutocommitError):
    """The git executable or the text backend CLI is not available."""

    exit_code = 3
    step = "dependencies"


class InvalidConfigurationError(AutocommitError):
    """A configuration file is malformed or holds an invalid value."""

    exit_code = 4
    step = "configuration"


class NoEvidenceError(AutocommitError):
    """Nothing staged, or the recent-commit count is not a positive integer."""

    exit_code = 5
    step = "evidence"


class MutuallyExclusiveOptionsError(AutocommitError):
    """Two output kinds were requested at once."""

    exit_code = 6
    step = "options"


class BackendFailureError(AutocommitError):
    """The text backend failed or returned an empty response."""

    exit_code = 7
    step = "backend"


class RefinementFailureError(AutocommitError):
    """The consistency pass produced nothing usable."""

    exit_code = 8
    step = "refinement"


class CommitFailureError(AutocommitError):
    """The commit could not be created."""

    exit_code = 9
    step = "commit"
