"""Git operations used by the pipeline.

Reading the change set is an ordered chain of diff attempts. Each attempt
yields a tagged result, and ``FALLBACK_ON`` decides which failure tags let the
chain move on to the next attempt. Committing goes through a transient message
file that is removed on every exit path.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Literal, Optional, Sequence, Tuple

from ups.errors import CommitError, PushError, RepositoryError
from ups.utils import ChangeSet, CommitMessage, SubprocessHandler

__all__ = [
    "DiffAttempt",
    "DiffResult",
    "DIFF_ATTEMPTS",
    "FALLBACK_ON",
    "run_git_command",
    "classify_failure",
    "run_diff",
    "get_change_set",
    "stage_all",
    "transient_commit_file",
    "commit_with_file",
    "get_current_branch",
    "push_branch",
    "commit_and_sync",
]

logger = logging.getLogger(__name__)

DiffStatus = Literal["ok", "no-repo", "no-head", "error"]

_NO_REPO_MARKERS = ("not a git repository",)
_NO_HEAD_MARKERS = ("ambiguous argument 'head'", "unknown revision", "bad revision 'head'")


@dataclass(frozen=True)
class DiffAttempt:
    label: str
    command: Tuple[str, ...]


@dataclass(frozen=True)
class DiffResult:
    status: DiffStatus
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"


DIFF_ATTEMPTS: Tuple[DiffAttempt, ...] = (
    DiffAttempt("working tree against HEAD", ("git", "diff", "HEAD")),
    DiffAttempt("staged changes", ("git", "diff", "--cached")),
)

# Failure tags that move the chain on to the next attempt. Everything else is fatal.
FALLBACK_ON: Dict[DiffStatus, bool] = {
    "no-head": True,
    "no-repo": False,
    "error": False,
}


def run_git_command(command: List[str], handler: Optional[SubprocessHandler] = None) -> Tuple[str, str, int]:
    """Run a git command and return its stdout, stderr and return code.

    Failure to start git at all, or a timeout, is reported as a non-zero
    return code so callers only deal with one failure shape.
    """
    handler = handler or SubprocessHandler()
    try:
        return handler.run_command(command)
    except (OSError, TimeoutError) as e:
        logger.debug("git invocation failed to run: %s", e)
        return "", str(e), 1


def classify_failure(stderr: str) -> DiffStatus:
    """Map git's diagnostic output to a failure tag."""
    text = stderr.lower()
    if any(marker in text for marker in _NO_REPO_MARKERS):
        return "no-repo"
    if any(marker in text for marker in _NO_HEAD_MARKERS):
        return "no-head"
    return "error"


def run_diff(attempt: DiffAttempt, handler: Optional[SubprocessHandler] = None) -> DiffResult:
    stdout, stderr, code = run_git_command(list(attempt.command), handler)
    if code == 0:
        return DiffResult("ok", stdout, stderr)
    return DiffResult(classify_failure(stderr), stdout, stderr)


def get_change_set(handler: Optional[SubprocessHandler] = None,
                   attempts: Sequence[DiffAttempt] = DIFF_ATTEMPTS) -> ChangeSet:
    """Resolve the diff to describe, falling back when HEAD does not exist yet.

    Raises:
        RepositoryError: If the directory is not a repository, or a diff fails
            for a reason with no fallback.
    """
    result = DiffResult("error", stderr="no diff attempts configured")
    for attempt in attempts:
        result = run_diff(attempt, handler)
        if result.ok:
            if result.stdout.strip():
                logger.info("Diff of %s retrieved", attempt.label)
            else:
                logger.info("No changes in diff of %s", attempt.label)
            return ChangeSet(result.stdout)

        if result.status == "no-repo":
            raise RepositoryError("Not a git repository", result.stderr)
        if not FALLBACK_ON.get(result.status, False):
            break
        logger.warning("Diff of %s unavailable (%s), trying the next source", attempt.label, result.status)

    raise RepositoryError("Git command failed", result.stderr)


def stage_all(handler: Optional[SubprocessHandler] = None) -> None:
    _, stderr, code = run_git_command(["git", "add", "-A"], handler)
    if code != 0:
        raise CommitError("Failed to stage changes", stderr)


@contextmanager
def transient_commit_file(text: str) -> Iterator[str]:
    """Write ``text`` to a uniquely named temporary file and remove it on exit."""
    fd, path = tempfile.mkstemp(prefix="ups-commit-", suffix=".txt")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


def commit_with_file(text: str, handler: Optional[SubprocessHandler] = None) -> str:
    with transient_commit_file(text) as path:
        stdout, stderr, code = run_git_command(["git", "commit", "-F", path], handler)
    if code != 0:
        raise CommitError("Failed to commit", stderr or stdout)
    return stdout


def get_current_branch(handler: Optional[SubprocessHandler] = None) -> str:
    stdout, stderr, code = run_git_command(["git", "rev-parse", "--abbrev-ref", "HEAD"], handler)
    if code != 0:
        raise PushError("Could not determine current branch", stderr)
    return stdout.strip()


def push_branch(branch: str, remote: str = "origin", handler: Optional[SubprocessHandler] = None) -> str:
    stdout, stderr, code = run_git_command(["git", "push", remote, branch], handler)
    if code != 0:
        raise PushError(f"Failed to push {branch} to {remote}", stderr)
    # git reports push progress on stderr
    return stderr or stdout


def commit_and_sync(message: CommitMessage,
                    handler: Optional[SubprocessHandler] = None,
                    remote: str = "origin",
                    on_transition: Optional[Callable[[str], None]] = None) -> None:
    """Stage everything, commit with ``message`` and push the current branch.

    Moves through Idle -> Staged -> Committed -> Pushed. If the push fails the
    commit stays in place; nothing is rolled back.

    Raises:
        CommitError: If staging or committing fails.
        PushError: If the branch cannot be resolved or the push fails.
    """
    def advance(state: str) -> None:
        logger.info("Commit sync: %s", state)
        if on_transition is not None:
            on_transition(state)

    stage_all(handler)
    advance("Staged")

    commit_with_file(message.text, handler)
    advance("Committed")

    branch = get_current_branch(handler)
    if not branch:
        raise PushError("could not determine current branch")
    push_branch(branch, remote, handler)
    advance("Pushed")
