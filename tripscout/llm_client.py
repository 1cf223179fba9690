"""Text generation backends behind a single OpenAI-compatible interface."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Awaitable

from tripscout.config import settings
from tripscout.errors import ConfigurationError, ModelBackendError
from tripscout.models.schemas import ModelProvider

Message = dict[str, str]


def _wrap_openai_error(exc: Exception, provider: str) -> ModelBackendError | None:
    """Translate an ``openai`` SDK exception into a ModelBackendError."""
    import openai

    if isinstance(exc, openai.APITimeoutError):
        return ModelBackendError(f"{provider} request timed out", status_code=504, provider=provider)
    if isinstance(exc, openai.APIStatusError):
        return ModelBackendError(str(exc.message), status_code=exc.status_code, provider=provider)
    if isinstance(exc, openai.APIError):
        return ModelBackendError(str(exc.message), provider=provider)
    return None


class TextStream:
    """Incremental answer text from a streaming chat completion.

    Use as an async context manager and iterate ``text_stream``; ``text``
    holds everything received so far.
    """

    def __init__(self, stream_coro: Awaitable[Any], provider: str):
        self._stream_coro = stream_coro
        self._stream: Any | None = None
        self._provider = provider
        self._parts: list[str] = []
        self._finished = False

    async def __aenter__(self) -> "TextStream":
        try:
            self._stream = await self._stream_coro
        except Exception as exc:
            wrapped = _wrap_openai_error(exc, self._provider)
            if wrapped is None:
                raise
            raise wrapped from exc
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._stream is not None:
            await self._stream.close()

    async def _iter_text(self) -> AsyncIterator[str]:
        if self._stream is None:
            return
        try:
            async for chunk in self._stream:
                choices = getattr(chunk, "choices", None) or []
                if not choices:
                    continue
                delta = getattr(choices[0], "delta", None)
                if not delta:
                    continue
                text = getattr(delta, "content", None)
                if text:
                    self._parts.append(text)
                    yield text
        except Exception as exc:
            wrapped = _wrap_openai_error(exc, self._provider)
            if wrapped is None:
                raise
            raise wrapped from exc
        self._finished = True

    @property
    def text_stream(self) -> AsyncIterator[str]:
        return self._iter_text()

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def text(self) -> str:
        return "".join(self._parts)


class TextGenerator(ABC):
    """A language model backend able to stream or return complete text."""

    provider: str

    @property
    @abstractmethod
    def model(self) -> str:
        ...

    @abstractmethod
    def stream_text(
        self,
        messages: list[Message],
        *,
        temperature: float,
        max_tokens: int,
    ) -> TextStream:
        ...

    @abstractmethod
    async def generate_text(
        self,
        messages: list[Message],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        ...


class OpenAICompatibleGenerator(TextGenerator):
    """Chat completions against any OpenAI-compatible endpoint."""

    provider = "openai-compatible"

    def __init__(self, *, api_key: str, base_url: str, model: str, client: Any | None = None):
        if not api_key:
            raise ConfigurationError(f"{self.provider} API key not configured")
        self._model = model
        if client is None:
            from openai import AsyncOpenAI

            client = AsyncOpenAI(api_key=api_key, base_url=base_url)
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    def stream_text(
        self,
        messages: list[Message],
        *,
        temperature: float,
        max_tokens: int,
    ) -> TextStream:
        stream = self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            stream=True,
        )
        return TextStream(stream, self.provider)

    async def generate_text(
        self,
        messages: list[Message],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as exc:
            wrapped = _wrap_openai_error(exc, self.provider)
            if wrapped is None:
                raise
            raise wrapped from exc
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return getattr(choices[0].message, "content", None) or ""


class OpenAIGenerator(OpenAICompatibleGenerator):
    provider = "openai"

    def __init__(self, *, model: str | None = None, client: Any | None = None):
        super().__init__(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=model or settings.openai_model,
            client=client,
        )


class DeepSeekGenerator(OpenAICompatibleGenerator):
    provider = "deepseek"

    def __init__(self, *, model: str | None = None, client: Any | None = None):
        super().__init__(
            api_key=settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            model=model or settings.deepseek_model,
            client=client,
        )


_GENERATORS: dict[ModelProvider, type[OpenAICompatibleGenerator]] = {
    ModelProvider.OPENAI: OpenAIGenerator,
    ModelProvider.DEEPSEEK: DeepSeekGenerator,
}


def has_credentials(provider: ModelProvider) -> bool:
    if provider is ModelProvider.DEEPSEEK:
        return bool(settings.deepseek_api_key)
    return bool(settings.openai_api_key)


def get_text_generator(provider: ModelProvider) -> TextGenerator:
    """Answer backend for ``provider``."""
    return _GENERATORS[provider]()


def get_follow_up_generator() -> TextGenerator:
    """Lightweight backend used for follow-up questions, whatever the answer backend."""
    return OpenAIGenerator(model=settings.follow_up_model)
