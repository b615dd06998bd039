"""Commit message generation through a g4f chat-completion client."""

import logging
import os
from typing import Any, Optional

import g4f  # type: ignore
from g4f.client import Client  # type: ignore

from ups.config import Config
from ups.errors import ConfigurationError, GenerationError
from ups.utils import ChangeSet, CommitMessage

__all__ = ["NO_CHANGES_MESSAGE", "build_prompt", "get_api_key", "MessageGenerator"]

logger = logging.getLogger(__name__)

NO_CHANGES_MESSAGE = "No changes to commit."

SYSTEM_PROMPT = "You are a helpful assistant that writes git commit messages."

PROMPT_TEMPLATE = """Analyze the following git diff and generate a concise, well-structured commit message.

The commit message should follow these conventions:
1.  A short, imperative-mood title (max 70 characters) on the first line. Example: "Refactor user authentication module"
2.  A blank line after the title.
3.  A bulleted list summarizing the key changes and their purpose. Each bullet point should be concise.
    - Start each bullet point with a capital letter.
    - Focus on *what* changed and *why*, not just *how*.

Do NOT include any markdown formatting like "```" or code blocks in the commit message itself.
Output only the raw commit message text.

Git Diff:
{diff}"""


def build_prompt(diff: str) -> str:
    return PROMPT_TEMPLATE.format(diff=diff)


def get_api_key(config: Config) -> str:
    """Read the provider's API key from the environment.

    Raises:
        ConfigurationError: If the variable is unset or blank.
    """
    api_key = os.environ.get(config.api_key_env, "").strip()
    if not api_key:
        raise ConfigurationError(f"{config.api_key_env} environment variable not set")
    return api_key


class MessageGenerator:
    """Turns a change set into a commit message.

    ``client`` may be any object exposing ``chat.completions.create`` in the
    OpenAI style; by default a g4f client for the configured provider is built.
    """

    def __init__(self, config: Config, api_key: str, client: Optional[Any] = None) -> None:
        self.config = config
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self) -> Any:
        provider = getattr(g4f.Provider, self.config.provider, None)
        if provider is None:
            raise ConfigurationError(f"Unknown g4f provider: {self.config.provider}")
        return Client(provider=provider, api_key=self.api_key)

    def generate(self, change_set: ChangeSet) -> CommitMessage:
        """Generate a commit message for ``change_set``.

        An empty change set yields the no-changes placeholder without calling
        the model.

        Raises:
            GenerationError: If the request fails or the reply is empty.
        """
        if change_set.is_empty:
            logger.info("No diff content, skipping the model call")
            return CommitMessage(NO_CHANGES_MESSAGE, generated=False)

        text = self.request(build_prompt(change_set.text))
        return CommitMessage(text.strip())

    def request(self, prompt: str) -> str:
        logger.info("Calling %s via %s", self.config.model, self.config.provider)
        try:
            response = self.client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.config.temperature,
                timeout=self.config.generation_timeout,
            )
        except ConfigurationError:
            raise
        except Exception as e:
            message = f"Error calling {self.config.model}: {e}"
            if "API key not valid" in str(e):
                message += (f". Ensure your {self.config.api_key_env} is correct "
                            "and has permissions for the model.")
            raise GenerationError(message) from e

        content = None
        if response is not None and getattr(response, "choices", None):
            content = response.choices[0].message.content
        if not content or not content.strip():
            raise GenerationError(f"Empty response from {self.config.model}")
        return content
