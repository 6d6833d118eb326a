"""Tests for the Generator (prompt -> chat client)."""

from unittest.mock import MagicMock

import pytest

from bulkgen.generation.exceptions import GenerationUpstreamError
from bulkgen.generation.generator import Generator


def _make_generator(client: MagicMock | None = None, **kwargs: object) -> Generator:
    if client is None:
        client = MagicMock()
        client.create_chat_completion.return_value = "generated"
    return Generator(client=client, model="test-model", **kwargs)  # type: ignore[arg-type]


class TestGenerate:
    def test_returns_client_response(self) -> None:
        assert _make_generator().generate("prompt", {}) == "generated"

    def test_uses_default_model_and_prompt(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = "ok"
        generator = _make_generator(client, temperature=0.3, system_prompt="be helpful")

        generator.generate("the prompt", {"name": "agent"})

        kwargs = client.create_chat_completion.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.3
        assert kwargs["system_prompt"] == "be helpful"
        assert kwargs["user_prompt"] == "the prompt"

    def test_agent_config_overrides(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = "ok"
        generator = _make_generator(client)

        generator.generate(
            "p",
            {"model": "gpt-3.5-turbo", "temperature": 0.7, "system_prompt": "terse"},
        )

        kwargs = client.create_chat_completion.call_args.kwargs
        assert kwargs["model"] == "gpt-3.5-turbo"
        assert kwargs["temperature"] == 0.7
        assert kwargs["system_prompt"] == "terse"

    def test_empty_override_falls_back(self) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = "ok"

        _make_generator(client).generate("p", {"model": ""})

        assert client.create_chat_completion.call_args.kwargs["model"] == "test-model"

    @pytest.mark.parametrize(("value", "expected"), [(-1, 0.0), (5, 2.0), ("hot", 0.0)])
    def test_temperature_is_clamped(self, value: object, expected: float) -> None:
        client = MagicMock()
        client.create_chat_completion.return_value = "ok"

        _make_generator(client).generate("p", {"temperature": value})

        assert client.create_chat_completion.call_args.kwargs["temperature"] == expected

    def test_propagates_client_errors(self) -> None:
        client = MagicMock()
        client.create_chat_completion.side_effect = GenerationUpstreamError("down")
        with pytest.raises(GenerationUpstreamError, match="down"):
            _make_generator(client).generate("p", {})


class TestIsConfigured:
    def test_configured(self) -> None:
        assert _make_generator().is_configured() is True

    def test_not_configured_flag(self) -> None:
        assert _make_generator(configured=False).is_configured() is False

    def test_missing_model(self) -> None:
        generator = Generator(client=MagicMock(), model="")
        assert generator.is_configured() is False
