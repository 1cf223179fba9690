"""Tests for the OpenAI-compatible text generators."""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from tripscout.config import settings
from tripscout.errors import ConfigurationError, ModelBackendError
from tripscout.llm_client import (
    DeepSeekGenerator,
    OpenAIGenerator,
    get_follow_up_generator,
    get_text_generator,
    has_credentials,
)
from tripscout.models.schemas import ModelProvider

REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def fake_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(settings, "deepseek_api_key", "ds-test")


class TestStreaming:
    @pytest.mark.asyncio
    async def test_stream_text_yields_chunks_and_closes(self, credentials, chunk_stream_cls):
        stream = chunk_stream_cls(["Bali ", "is ", "", "lovely."])
        create = AsyncMock(return_value=stream)
        generator = OpenAIGenerator(client=fake_client(create))

        async with generator.stream_text([{"role": "user", "content": "hi"}], temperature=0.7, max_tokens=2000) as text:
            chunks = [chunk async for chunk in text.text_stream]

        assert chunks == ["Bali ", "is ", "lovely."]
        assert text.text == "Bali is lovely."
        assert text.finished
        assert stream.closed
        kwargs = create.await_args.kwargs
        assert kwargs["stream"] is True
        assert kwargs["model"] == settings.openai_model
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 2000

    @pytest.mark.asyncio
    async def test_status_error_on_open_is_wrapped(self, credentials):
        error = openai.RateLimitError(
            "Rate limit reached",
            response=httpx.Response(429, request=REQUEST),
            body=None,
        )
        generator = DeepSeekGenerator(client=fake_client(AsyncMock(side_effect=error)))

        with pytest.raises(ModelBackendError) as excinfo:
            async with generator.stream_text([], temperature=0.7, max_tokens=10):
                pass

        assert excinfo.value.status_code == 429
        assert excinfo.value.provider == "deepseek"

    @pytest.mark.asyncio
    async def test_mid_stream_timeout_maps_to_504(self, credentials, chunk_stream_cls):
        stream = chunk_stream_cls(["partial"], error=openai.APITimeoutError(request=REQUEST))
        generator = OpenAIGenerator(client=fake_client(AsyncMock(return_value=stream)))

        received = []
        with pytest.raises(ModelBackendError) as excinfo:
            async with generator.stream_text([], temperature=0.7, max_tokens=10) as text:
                async for chunk in text.text_stream:
                    received.append(chunk)

        assert received == ["partial"]
        assert excinfo.value.status_code == 504
        assert stream.closed

    @pytest.mark.asyncio
    async def test_non_sdk_errors_propagate_unchanged(self, credentials, chunk_stream_cls):
        stream = chunk_stream_cls([], error=RuntimeError("socket gone"))
        generator = OpenAIGenerator(client=fake_client(AsyncMock(return_value=stream)))

        with pytest.raises(RuntimeError, match="socket gone"):
            async with generator.stream_text([], temperature=0.7, max_tokens=10) as text:
                async for _ in text.text_stream:
                    pass


class TestGenerateText:
    @pytest.mark.asyncio
    async def test_returns_message_content(self, credentials):
        create = AsyncMock(return_value=completion("Q1?\nQ2?"))
        generator = OpenAIGenerator(model="gpt-4o-mini", client=fake_client(create))

        text = await generator.generate_text([], temperature=0.7, max_tokens=150)

        assert text == "Q1?\nQ2?"
        assert create.await_args.kwargs["max_tokens"] == 150
        assert "stream" not in create.await_args.kwargs

    @pytest.mark.asyncio
    async def test_empty_choices_give_empty_text(self, credentials):
        generator = OpenAIGenerator(client=fake_client(AsyncMock(return_value=SimpleNamespace(choices=[]))))
        assert await generator.generate_text([], temperature=0.7, max_tokens=150) == ""

    @pytest.mark.asyncio
    async def test_connection_error_has_no_status(self, credentials):
        create = AsyncMock(side_effect=openai.APIConnectionError(request=REQUEST))
        generator = OpenAIGenerator(client=fake_client(create))

        with pytest.raises(ModelBackendError) as excinfo:
            await generator.generate_text([], temperature=0.7, max_tokens=150)

        assert excinfo.value.status_code is None


class TestFactories:
    def test_missing_key_raises_configuration_error(self, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "")
        with pytest.raises(ConfigurationError):
            OpenAIGenerator(client=fake_client(AsyncMock()))
        assert not has_credentials(ModelProvider.OPENAI)

    def test_get_text_generator_selects_backend(self, credentials):
        assert isinstance(get_text_generator(ModelProvider.OPENAI), OpenAIGenerator)
        deepseek = get_text_generator(ModelProvider.DEEPSEEK)
        assert isinstance(deepseek, DeepSeekGenerator)
        assert deepseek.model == settings.deepseek_model

    def test_follow_up_generator_uses_lightweight_model(self, credentials, monkeypatch):
        monkeypatch.setattr(settings, "follow_up_model", "gpt-4o-mini")
        generator = get_follow_up_generator()
        assert isinstance(generator, OpenAIGenerator)
        assert generator.model == "gpt-4o-mini"
