"""
ups-diff: AI commit messages for the changes in your working tree

Key Features:
    - Reads the diff against HEAD, falling back to staged changes in a repository with no commits
    - Generates a commit message with a g4f chat model
    - Optionally saves the diff and the message to timestamped files
    - Commits and pushes the current branch after confirmation

Usage:
    Run inside a Git repository with GEMINI_API_KEY set:
    $ ups-diff [--diff] [--msg]

Commands:
    - [Y/Enter]: Commit and push
    - [n]: Keep the changes uncommitted
"""

__version__ = "1.0.0"
__author__ = "Uwayss"

from .main import run_pipeline

__all__ = ['run_pipeline', '__version__', '__author__']
