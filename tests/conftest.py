"""Shared fakes for the search pipeline tests."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from tripscout.config import settings
from tripscout.llm_client import TextGenerator, TextStream


def make_chunk(text: str) -> SimpleNamespace:
    """Shape of one streamed chat completion chunk."""
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class FakeChunkStream:
    """Stands in for the SDK's async completion stream."""

    def __init__(self, chunks, *, gate: asyncio.Event | None = None, error: Exception | None = None):
        self._chunks = list(chunks)
        self._gate = gate
        self._error = error
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self._gate is not None:
            await asyncio.wait_for(self._gate.wait(), timeout=1.0)
        for chunk in self._chunks:
            yield make_chunk(chunk)
        if self._error is not None:
            raise self._error

    async def close(self):
        self.closed = True


async def _resolved(value):
    return value


class FakeGenerator(TextGenerator):
    provider = "fake"

    def __init__(
        self,
        *,
        chunks=(),
        reply: str = "",
        stream_error: Exception | None = None,
        reply_error: Exception | None = None,
        gate: asyncio.Event | None = None,
        started: asyncio.Event | None = None,
        block: bool = False,
    ):
        self.chunks = list(chunks)
        self.reply = reply
        self.stream_error = stream_error
        self.reply_error = reply_error
        self.gate = gate
        self.started = started
        self.block = block
        self.cancelled = False
        self.stream_calls: list[list[dict]] = []
        self.generate_calls: list[list[dict]] = []
        self.streams: list[FakeChunkStream] = []

    @property
    def model(self) -> str:
        return "fake-model"

    def stream_text(self, messages, *, temperature, max_tokens):
        self.stream_calls.append(messages)
        stream = FakeChunkStream(self.chunks, gate=self.gate, error=self.stream_error)
        self.streams.append(stream)
        return TextStream(_resolved(stream), self.provider)

    async def generate_text(self, messages, *, temperature, max_tokens):
        self.generate_calls.append(messages)
        if self.started is not None:
            self.started.set()
        if self.block:
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.reply_error is not None:
            raise self.reply_error
        return self.reply


@pytest.fixture
def fake_generator_cls():
    return FakeGenerator


@pytest.fixture
def chunk_stream_cls():
    return FakeChunkStream


@pytest.fixture(autouse=True)
def no_cosmetic_delays(monkeypatch):
    monkeypatch.setattr(settings, "sources_render_delay_ms", 0)
    monkeypatch.setattr(settings, "typing_delay_ms", 0)


@pytest.fixture
def raw_results():
    return [
        {
            "url": "https://www.lonelyplanet.com/indonesia/bali/beaches",
            "title": "Best beaches in Bali",
            "markdown": "Uluwatu and Padang Padang are the best beaches in Bali for surfers.",
            "metadata": {"description": "Beach guide", "ogImage": "https://img/bali.jpg"},
        },
        {
            "url": "https://lonelyplanet.com/articles/bali-on-a-budget",
            "title": "Bali on a budget",
            "content": "Cheap warungs and beach bungalows in Amed.",
        },
        {
            "url": "https://shop.lonelyplanet.com/products/bali-guide",
            "markdown": "Lonely Planet Bali travel guide book.",
        },
        {
            "url": "https://www.tripadvisor.com/Attractions-Bali",
            "title": "Things to do in Bali",
            "markdown": "Top attractions in Bali.",
        },
        {
            "url": "https://notlonelyplanet.com/bali",
            "title": "Lookalike domain",
            "markdown": "Should never be surfaced when filtering.",
        },
    ]
