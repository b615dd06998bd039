"""Exception types raised by the ups-diff pipeline.

Each stage raises its own error type so the command line layer can report the
failure and exit with a non-zero status. None of them are retried.
"""

from typing import Optional

__all__ = [
    "UpsError",
    "ConfigurationError",
    "GitCommandError",
    "RepositoryError",
    "GenerationError",
    "CommitError",
    "PushError",
]


class UpsError(Exception):
    """Base class for all pipeline failures."""


class ConfigurationError(UpsError):
    """Raised when a required setting, such as the API key, is missing."""


class GitCommandError(UpsError):
    """A failed git invocation, carrying the captured diagnostic output."""

    def __init__(self, message: str, stderr: Optional[str] = None) -> None:
        self.stderr = (stderr or "").strip()
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class RepositoryError(GitCommandError):
    """Raised when the change set cannot be read from the repository."""


class GenerationError(UpsError):
    """Raised when the text-generation service fails or returns nothing."""


class CommitError(GitCommandError):
    """Raised when staging or committing fails."""


class PushError(GitCommandError):
    """Raised when the current branch cannot be pushed.

    The local commit is left in place when this is raised.
    """
