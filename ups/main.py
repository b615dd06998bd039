"""Pipeline orchestration: diff, generate, save, confirm, commit and push."""

import logging
from pathlib import Path
from typing import Callable, Literal, Optional

from rich.panel import Panel

from ups.config import Config
from ups.generator import MessageGenerator, get_api_key
from ups.git_ops import commit_and_sync, get_change_set
from ups.utils import (ChangeSet, CommitMessage, PipelineOptions, SubprocessHandler,
                       console, save_artifact)

__all__ = [
    "PLACEHOLDER_MESSAGE",
    "PipelineOutcome",
    "confirm",
    "display_commit_preview",
    "save_diff",
    "save_commit_message",
    "run_pipeline",
]

logger = logging.getLogger(__name__)

PLACEHOLDER_MESSAGE = "No changes detected."

PipelineOutcome = Literal["no-changes", "no-op", "declined", "committed"]

InputFunc = Callable[[str], str]


def confirm(prompt_text: str, input_func: Optional[InputFunc] = None) -> bool:
    """Ask a yes/no question; an empty answer means yes.

    A closed input stream counts as a refusal.
    """
    read = input_func or input
    try:
        answer = read(prompt_text)
    except EOFError:
        console.print()
        return False
    return answer.strip().lower() in ("", "y", "yes")


def display_commit_preview(message: CommitMessage) -> None:
    console.print(Panel(message.text, title="Generated Commit Message", border_style="blue", expand=False))


def save_diff(change_set: ChangeSet, directory: Path) -> Path:
    path = save_artifact(change_set.text, directory, "diff")
    console.print(f"[green]✔ Git diff saved to:[/green] {path}")
    return path


def save_commit_message(text: str, directory: Path, prefix: str = "commit_message") -> Path:
    path = save_artifact(text, directory, prefix)
    console.print(f"[green]✔ Commit message saved to:[/green] {path}")
    return path


def run_pipeline(options: PipelineOptions,
                 config: Config,
                 generator: Optional[MessageGenerator] = None,
                 input_func: Optional[InputFunc] = None,
                 handler: Optional[SubprocessHandler] = None) -> PipelineOutcome:
    """Run the whole pipeline once.

    Errors from any stage propagate unchanged to the caller.

    Returns:
        PipelineOutcome: How the run ended.
    """
    handler = handler or SubprocessHandler(timeout=config.git_timeout)

    console.print("[cyan]🔍 Getting git diff...[/cyan]")
    change_set = get_change_set(handler)

    if change_set.is_empty and not options.save_diff:
        console.print("[green]✔ No changes detected and --diff not specified. Nothing to do.[/green]")
        return "no-changes"

    if generator is None:
        generator = MessageGenerator(config, get_api_key(config))

    if not change_set.is_empty:
        console.print("[cyan]📝 Generating commit message...[/cyan]")
    message = generator.generate(change_set)

    if message.is_sentinel:
        console.print("[yellow]No changes detected; nothing to commit.[/yellow]")
        if options.save_diff:
            save_diff(change_set, config.output_dir)
        if options.save_message:
            save_commit_message(PLACEHOLDER_MESSAGE, config.output_dir, "commit_message_empty")
        return "no-op"

    display_commit_preview(message)
    if options.save_diff:
        save_diff(change_set, config.output_dir)
    if options.save_message:
        save_commit_message(message.text, config.output_dir)

    if not confirm("Commit and push these changes? [Y/n] ", input_func):
        console.print("[yellow]Commit skipped.[/yellow]")
        return "declined"

    commit_and_sync(message, handler, remote=config.remote)
    console.print(f"[green]✔ Successfully committed and pushed:[/green] {message.text.splitlines()[0]}")
    return "committed"
