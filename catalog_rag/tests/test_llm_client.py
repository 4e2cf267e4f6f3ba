"""Tests for LLMClient provider abstraction."""

import logging

import pytest
from unittest.mock import Mock

from catalog_rag.common.llm_client import LLMClient


HISTORY = [
    {"role": "user", "content": "Do you sell pumps?"},
    {"role": "assistant", "content": "Yes, several."},
]


class TestLLMClientInit:
    @pytest.mark.parametrize("provider", ["google", "anthropic", "openai"])
    def test_missing_key_logs_info(self, provider, caplog):
        with caplog.at_level(logging.INFO, logger="catalog_rag.common.llm_client"):
            client = LLMClient(provider=provider)
        assert not client.is_available
        assert "API key not provided" in caplog.text

    def test_unsupported_provider_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="catalog_rag.common.llm_client"):
            client = LLMClient(provider="unsupported_xyz")
        assert not client.is_available
        assert "Unsupported" in caplog.text

    def test_provider_is_normalized(self):
        client = LLMClient(provider="OpenAI")
        assert client.provider == "openai"


class TestLLMClientGenerate:
    def test_generate_raises_when_unavailable(self):
        client = LLMClient(provider="google")
        with pytest.raises(RuntimeError, match="not available"):
            client.generate("test")

    def test_anthropic_passes_system_and_history(self):
        client = LLMClient(provider="anthropic", model="claude-test")
        client._client = Mock()
        client._client.messages.create.return_value = Mock(content=[Mock(text="  We have two.  ")])

        answer = client.generate("How many?", system="Be brief", history=HISTORY, max_tokens=50)

        assert answer == "We have two."
        kwargs = client._client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["system"] == "Be brief"
        assert kwargs["max_tokens"] == 50
        assert kwargs["messages"] == HISTORY + [{"role": "user", "content": "How many?"}]

    def test_openai_prepends_system_message(self):
        client = LLMClient(provider="openai", model="gpt-test")
        client._client = Mock()
        choice = Mock()
        choice.message.content = "Sure."
        client._client.chat.completions.create.return_value = Mock(choices=[choice])

        answer = client.generate("Price?", system="Be brief", history=HISTORY)

        assert answer == "Sure."
        messages = client._client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "Be brief"}
        assert messages[-1] == {"role": "user", "content": "Price?"}
        assert len(messages) == 4

    def test_google_maps_history_roles(self):
        client = LLMClient(provider="google", model="gemini-test")
        genai = Mock()
        chat = genai.GenerativeModel.return_value.start_chat.return_value
        chat.send_message.return_value = Mock(text="In stock. ")
        client._client = genai
        client._google_models = {}

        answer = client.generate("Stock?", system="Be brief", history=HISTORY)

        assert answer == "In stock."
        genai.GenerativeModel.assert_called_once_with(
            model_name="gemini-test", system_instruction="Be brief"
        )
        history = genai.GenerativeModel.return_value.start_chat.call_args.kwargs["history"]
        assert [turn["role"] for turn in history] == ["user", "model"]
        assert history[1]["parts"] == ["Yes, several."]
        assert chat.send_message.call_args.args[0] == "Stock?"

    def test_google_model_cached_per_system_prompt(self):
        client = LLMClient(provider="google", model="gemini-test")
        genai = Mock()
        genai.GenerativeModel.return_value.start_chat.return_value.send_message.return_value = Mock(text="ok")
        client._client = genai
        client._google_models = {}

        client.generate("a", system="S1")
        client.generate("b", system="S1")
        client.generate("c", system="S2")

        assert genai.GenerativeModel.call_count == 2
