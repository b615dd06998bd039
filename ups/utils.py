import logging
import os
import subprocess
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "console",
    "setup_logging",
    "SubprocessHandler",
    "ChangeSet",
    "CommitMessage",
    "PipelineOptions",
    "generate_filename",
    "save_artifact",
]

console = Console()

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Route log records through rich, at DEBUG when verbose and WARNING otherwise."""
    level = logging.DEBUG if verbose else logging.WARNING
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Drop handlers from a previous call so records are not printed twice
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        show_time=verbose,
        show_path=verbose,
    ))


@dataclass(frozen=True)
class ChangeSet:
    """The unified diff selected for this invocation."""
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class CommitMessage:
    """A commit message; ``generated`` is False for the no-changes placeholder."""
    text: str
    generated: bool = True

    @property
    def is_sentinel(self) -> bool:
        return not self.generated


@dataclass(frozen=True)
class PipelineOptions:
    save_diff: bool = False
    save_message: bool = False


class SubprocessHandler:
    """Runs external commands and always reclaims the child process.

    Output is captured as text, decoded as UTF-8 with undecodable bytes replaced,
    and returned as a ``(stdout, stderr, returncode)`` tuple.
    """

    def __init__(self, timeout: Optional[int] = None,
                 max_termination_retries: Optional[int] = None,
                 termination_wait: Optional[float] = None) -> None:
        """Initialize the handler.

        Args:
            timeout: Maximum time in seconds to wait for a command to complete.
            max_termination_retries: Number of polls after asking a process to terminate.
            termination_wait: Time to wait between those polls in seconds.
        """
        self.timeout: int = timeout or 30
        self.max_termination_retries: int = max_termination_retries or 3
        self.termination_wait: float = termination_wait or 0.5

    @staticmethod
    def create_env() -> Dict[str, str]:
        """Copy the environment, forcing UTF-8 and disabling git's interactive pager."""
        env = os.environ.copy()
        env['PYTHONIOENCODING'] = 'utf-8'
        env['GIT_PAGER'] = 'cat'
        return env

    def run_command(self, command: List[str], timeout: Optional[int] = None) -> Tuple[str, str, int]:
        """Execute a command and wait for it to finish.

        Args:
            command: Command to execute as a list of strings.
            timeout: Overrides the handler's default timeout for this call.

        Returns:
            Tuple[str, str, int]: stdout, stderr, and return code.

        Raises:
            TimeoutError: If the process exceeds the timeout.
            OSError: If the executable cannot be started.
        """
        limit = timeout or self.timeout
        logger.debug("Running: %s", " ".join(command))
        process: Optional[subprocess.Popen[Any]] = None
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8',
                errors='replace',
                env=self.create_env(),
            )
            stdout, stderr = process.communicate(timeout=limit)
            return stdout, stderr, process.returncode
        except subprocess.TimeoutExpired:
            self._terminate_process(process)
            raise TimeoutError(f"Command timed out after {limit} seconds: {' '.join(command)}")
        finally:
            self._cleanup_process(process)

    def _terminate_process(self, process: Optional[subprocess.Popen[Any]]) -> None:
        """Terminate a process, killing it if it does not exit in time."""
        if process is None or process.poll() is not None:
            return

        try:
            process.terminate()
            for _ in range(self.max_termination_retries):
                if process.poll() is not None:
                    return
                time.sleep(self.termination_wait)
            process.kill()
        except OSError:
            # Process already gone
            pass

    def _cleanup_process(self, process: Optional[subprocess.Popen[Any]]) -> None:
        if process is None:
            return

        for stream in (process.stdout, process.stderr):
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass

        self._terminate_process(process)


def generate_filename(prefix: str, now: Optional[datetime] = None) -> str:
    """Build an artifact name such as ``diff_20240131235959.txt``.

    The timestamp has one-second resolution, so two runs within the same
    second produce the same name.
    """
    now = now or datetime.now(timezone.utc)
    return f"{prefix}_{now.strftime('%Y%m%d%H%M%S')}.txt"


def save_artifact(content: str, directory: Union[str, Path], prefix: str) -> Path:
    """Write ``content`` to a timestamped file in ``directory``.

    Returns:
        Path: The file that was written.
    """
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / generate_filename(prefix)
    path.write_text(content, encoding='utf-8')
    logger.debug("Wrote %d characters to %s", len(content), path)
    return path
