"""Tests for the chat completion wrapper and cost estimate."""

from unittest.mock import MagicMock, patch

import pytest

from app.core.errors import ProviderError
from app.core.llm import complete_chat, estimate_cost


def _completion(text: str | None, model: str = "gpt-4-turbo-preview"):
    response = MagicMock()
    choice = MagicMock()
    choice.message.content = text
    response.choices = [choice]
    response.model = model
    response.usage.prompt_tokens = 1200
    response.usage.completion_tokens = 300
    response.usage.total_tokens = 1500
    return response


def test_complete_chat_returns_text_and_usage():
    with patch("app.core.llm._get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _completion("Answer")
        mock_get_client.return_value = mock_client

        result = complete_chat(
            [{"role": "user", "content": "Hi"}],
            model="gpt-4-turbo-preview",
            temperature=0.3,
            max_tokens=100,
        )

    assert result.text == "Answer"
    assert result.model == "gpt-4-turbo-preview"
    assert result.prompt_tokens == 1200
    assert result.completion_tokens == 300
    assert result.total_tokens == 1500

    kwargs = mock_client.chat.completions.create.call_args[1]
    assert kwargs["temperature"] == 0.3
    assert kwargs["max_tokens"] == 100


def test_complete_chat_empty_content_is_provider_error():
    with patch("app.core.llm._get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _completion("")
        mock_get_client.return_value = mock_client

        with pytest.raises(ProviderError, match="no content"):
            complete_chat([], model="m", temperature=0, max_tokens=10)


def test_complete_chat_api_failure():
    with patch("app.core.llm._get_client") as mock_get_client:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = Exception("connection reset")
        mock_get_client.return_value = mock_client

        with pytest.raises(ProviderError, match="connection reset"):
            complete_chat([], model="m", temperature=0, max_tokens=10)


def test_estimate_cost_uses_price_table():
    # 1200 * 0.01/1K + 300 * 0.03/1K
    assert estimate_cost(1200, 300) == 0.021


def test_estimate_cost_zero_tokens():
    assert estimate_cost(0, 0) == 0.0
