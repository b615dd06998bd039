from unittest.mock import MagicMock, patch

import pytest

from ups.errors import ConfigurationError, GenerationError
from ups.generator import NO_CHANGES_MESSAGE, MessageGenerator, build_prompt, get_api_key
from ups.utils import ChangeSet


@pytest.fixture
def generator(config, mock_client):
    return MessageGenerator(config, "test-key", client=mock_client)


@pytest.mark.parametrize("diff", ["", " ", "\n\n", "\t \n"])
def test_empty_diff_never_calls_the_model(generator, mock_client, diff):
    message = generator.generate(ChangeSet(diff))
    assert message.text == NO_CHANGES_MESSAGE
    assert message.is_sentinel
    mock_client.chat.completions.create.assert_not_called()


@pytest.mark.parametrize("diff", ["+added line", "-removed\n+added\n", "diff --git a/x b/x\n"])
def test_non_empty_diff_calls_the_model_once(generator, mock_client, diff):
    message = generator.generate(ChangeSet(diff))
    assert message.text == "feat: add line"
    assert not message.is_sentinel
    assert mock_client.chat.completions.create.call_count == 1


def test_request_contents(generator, mock_client, config):
    generator.generate(ChangeSet("+added line"))
    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == config.model
    assert kwargs["temperature"] == config.temperature
    assert kwargs["timeout"] == config.generation_timeout
    assert kwargs["messages"][0]["role"] == "system"
    assert kwargs["messages"][-1] == {"role": "user", "content": build_prompt("+added line")}


def test_prompt_embeds_diff_verbatim():
    diff = "diff --git a/app.py b/app.py\n+print('{not a placeholder}')\n"
    prompt = build_prompt(diff)
    assert prompt.endswith(diff)
    assert "imperative" in prompt
    assert "Output only the raw commit message text." in prompt


def test_reply_is_stripped(generator, mock_client, response_factory):
    mock_client.chat.completions.create.return_value = response_factory("\n  fix: handle empty input \n")
    assert generator.generate(ChangeSet("+x")).text == "fix: handle empty input"


def test_request_failure_raises_generation_error(generator, mock_client):
    mock_client.chat.completions.create.side_effect = Exception("quota exceeded")
    with pytest.raises(GenerationError, match="quota exceeded"):
        generator.generate(ChangeSet("+added line"))
    assert mock_client.chat.completions.create.call_count == 1


@pytest.mark.parametrize("content", [None, "", "   "])
def test_empty_reply_raises_generation_error(generator, mock_client, response_factory, content):
    mock_client.chat.completions.create.return_value = response_factory(content)
    with pytest.raises(GenerationError, match="Empty response"):
        generator.generate(ChangeSet("+added line"))


def test_reply_without_choices_raises_generation_error(generator, mock_client):
    mock_client.chat.completions.create.return_value = MagicMock(choices=[])
    with pytest.raises(GenerationError):
        generator.generate(ChangeSet("+added line"))


class TestApiKey:

    def test_key_is_read_from_environment(self, config, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", " secret ")
        assert get_api_key(config) == "secret"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_key_is_a_configuration_error(self, config, monkeypatch, value):
        if value is None:
            monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        else:
            monkeypatch.setenv("GEMINI_API_KEY", value)
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            get_api_key(config)


class TestDefaultClient:

    def test_client_is_built_for_configured_provider(self, config):
        with patch("ups.generator.Client") as mock_client_cls, \
                patch("ups.generator.g4f.Provider") as mock_providers:
            generator = MessageGenerator(config, "test-key")
            client = generator.client
        mock_client_cls.assert_called_once_with(provider=mock_providers.GeminiPro, api_key="test-key")
        assert client is mock_client_cls.return_value

    def test_unknown_provider_is_a_configuration_error(self, config):
        config.provider = "NoSuchProvider"
        with patch("ups.generator.g4f.Provider", new=object()):
            generator = MessageGenerator(config, "test-key")
            with pytest.raises(ConfigurationError, match="NoSuchProvider"):
                generator.generate(ChangeSet("+added line"))


def test_invalid_api_key_error_mentions_key_variable(generator, mock_client):
    mock_client.chat.completions.create.side_effect = Exception("400 API key not valid. Please pass a valid API key.")
    with pytest.raises(GenerationError) as excinfo:
        generator.generate(ChangeSet("+added line"))
    assert "Ensure your GEMINI_API_KEY is correct" in str(excinfo.value)


def test_other_errors_do_not_mention_key_variable(generator, mock_client):
    mock_client.chat.completions.create.side_effect = Exception("connection reset")
    with pytest.raises(GenerationError) as excinfo:
        generator.generate(ChangeSet("+added line"))
    assert "GEMINI_API_KEY" not in str(excinfo.value)
