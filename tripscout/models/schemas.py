from __future__ import annotations

import re
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_SCHEME_AND_WWW = re.compile(r"^(https?://)?(www\.)?", re.IGNORECASE)


class ModelProvider(str, Enum):
    OPENAI = "openai"
    DEEPSEEK = "deepseek"


TimeRange = Literal["all", "1d", "7d", "30d"]


def normalize_domain(raw: str) -> str:
    """Reduce user input like ``https://www.Example.com/`` to ``example.com``."""
    cleaned = _SCHEME_AND_WWW.sub("", raw.strip())
    return cleaned.rstrip("/").lower()


# --- Requests ---


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(default_factory=list)
    query: str | None = None
    search_domains: list[str] = Field(default_factory=list, alias="searchDomains")
    time_range: TimeRange = Field(default="all", alias="timeRange")
    model_provider: ModelProvider = Field(default=ModelProvider.OPENAI, alias="modelProvider")
    firecrawl_api_key: str | None = Field(default=None, alias="firecrawlApiKey")

    @field_validator("search_domains")
    @classmethod
    def _clean_domains(cls, value: list[str]) -> list[str]:
        cleaned: list[str] = []
        for raw in value:
            domain = normalize_domain(raw)
            if domain and domain not in cleaned:
                cleaned.append(domain)
        return cleaned

    def resolve_query(self) -> str | None:
        """The newest message wins; the bare ``query`` field is the fallback."""
        if self.messages and self.messages[-1].content.strip():
            return self.messages[-1].content.strip()
        if self.query and self.query.strip():
            return self.query.strip()
        return None


# --- Responses ---


class ModelInfo(BaseModel):
    id: str
    name: str
    description: str


class ModelsResponse(BaseModel):
    models: list[ModelInfo]


class EnvStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_firecrawl_key: bool = Field(alias="hasFirecrawlKey")
    has_openai_key: bool = Field(alias="hasOpenaiKey")
    has_deepseek_key: bool = Field(alias="hasDeepseekKey")
