"""Configuration module for ups-diff.

This module provides a configuration class that holds all the settings
for the diff-to-commit pipeline.
"""

from pathlib import Path
from typing import List, Optional, Union

DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_PROVIDER = "GeminiPro"
DEFAULT_API_KEY_ENV = "GEMINI_API_KEY"


def default_output_dir() -> Path:
    """Return the directory artifacts are written to when none is given."""
    return Path.home() / "Desktop"


class Config:
    """Configuration class for ups-diff.

    Attributes:
        model: Name of the model used to generate commit messages.
        provider: Name of the g4f provider serving the model.
        api_key_env: Environment variable holding the provider's API key.
        temperature: Sampling temperature passed to the model.
        generation_timeout: Timeout in seconds for the generation request.
        git_timeout: Timeout in seconds for each git invocation.
        output_dir: Directory that saved diff and message artifacts go to.
        remote: Name of the remote the current branch is pushed to.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        provider: str = DEFAULT_PROVIDER,
        api_key_env: str = DEFAULT_API_KEY_ENV,
        temperature: float = 0.3,
        generation_timeout: float = 60.0,
        git_timeout: int = 30,
        output_dir: Optional[Union[str, Path]] = None,
        remote: str = "origin",
    ):
        self.model: str = model
        self.provider: str = provider
        self.api_key_env: str = api_key_env
        self.temperature: float = temperature
        self.generation_timeout: float = generation_timeout
        self.git_timeout: int = git_timeout
        self.output_dir: Path = Path(output_dir) if output_dir is not None else default_output_dir()
        self.remote: str = remote

        errors = self.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

    def validate(self) -> List[str]:
        """Collect every problem with the current settings.

        Returns:
            List[str]: Human readable validation errors, empty when valid.
        """
        errors = []
        for name in ("model", "provider", "api_key_env", "remote"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                errors.append(f"{name} must be a non-empty string")

        if (isinstance(self.temperature, bool)
                or not isinstance(self.temperature, (int, float))
                or not 0.0 <= self.temperature <= 2.0):
            errors.append("temperature must be a number between 0.0 and 2.0")

        if (isinstance(self.generation_timeout, bool)
                or not isinstance(self.generation_timeout, (int, float))
                or not 1.0 <= self.generation_timeout <= 600.0):
            errors.append("generation_timeout must be a number between 1.0 and 600.0")

        if (isinstance(self.git_timeout, bool)
                or not isinstance(self.git_timeout, int)
                or not 1 <= self.git_timeout <= 600):
            errors.append("git_timeout must be an integer between 1 and 600")

        return errors

    def is_valid(self) -> bool:
        return not self.validate()

