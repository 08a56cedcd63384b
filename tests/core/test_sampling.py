"""Tests for the sampling capability."""

from __future__ import annotations

from typing import Any

import pytest

from mcpkit.core.errors import SamplingUnavailableError
from mcpkit.core.sampling import SAMPLING_METHOD, ClientChannel, Sampling


class _Channel:
    def __init__(self, result: dict[str, Any]) -> None:
        self.result = result
        self.sent: list[tuple[str, dict[str, Any]]] = []

    async def request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        self.sent.append((method, params))
        return self.result


class TestSampling:
    def test_unavailable_is_falsy(self) -> None:
        sampling = Sampling.unavailable()
        assert not sampling
        assert sampling.available is False

    async def test_ask_unavailable_raises(self) -> None:
        with pytest.raises(SamplingUnavailableError):
            await Sampling.unavailable().ask("hello")

    async def test_ask_function(self) -> None:
        async def ask(prompt: str) -> str:
            return prompt.upper()

        sampling = Sampling(ask)
        assert sampling
        assert await sampling.ask("hi") == "HI"

    async def test_over_channel_sends_create_message(self) -> None:
        channel = _Channel({"role": "assistant", "content": {"type": "text", "text": "More detail please"}})
        assert isinstance(channel, ClientChannel)

        reply = await Sampling.over(channel, max_tokens=50).ask("What context?")

        assert reply == "More detail please"
        method, params = channel.sent[0]
        assert method == SAMPLING_METHOD
        assert params["maxTokens"] == 50
        assert params["messages"][0]["content"] == {"type": "text", "text": "What context?"}

    async def test_list_content_joined(self) -> None:
        channel = _Channel({"content": [{"type": "text", "text": "a"}, {"type": "image"}, {"type": "text", "text": "b"}]})
        assert await Sampling.over(channel).ask("q") == "a\nb"

    async def test_missing_content(self) -> None:
        assert await Sampling.over(_Channel({})).ask("q") == ""
