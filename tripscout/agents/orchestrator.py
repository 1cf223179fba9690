from __future__ import annotations

import asyncio
import re
import time
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import AsyncGenerator, Sequence
from uuid import uuid4

from loguru import logger

from tripscout.config import settings
from tripscout.llm_client import TextGenerator, get_follow_up_generator, get_text_generator
from tripscout.models.events import StreamEvent
from tripscout.models.schemas import ModelProvider, SearchRequest
from tripscout.models.search import MAX_FOLLOW_UP_QUESTIONS, SearchConfiguration, Source
from tripscout.services import domain_filter, streaming
from tripscout.services import logger as log_service
from tripscout.services.context_builder import build_context
from tripscout.services.error_classifier import classify_error
from tripscout.services.prompt_store import render_prompt
from tripscout.services.source_normalizer import normalize_sources
from tripscout.tools import firecrawl_search
from tripscout.tools.ticker import detect_company_ticker

_LIST_MARKER = re.compile(r"^(?:[-*•]|\d+[.)])\s+")

# More turns than this means the request continues an earlier conversation.
INITIAL_TURN_LIMIT = 2


@dataclass(frozen=True)
class QueryPlan:
    """Everything one request needs, resolved before the stream opens."""

    query: str
    messages: tuple[dict[str, str], ...] = ()
    search_domains: tuple[str, ...] = ()
    time_range: str = "all"
    model_provider: ModelProvider = ModelProvider.OPENAI
    search_api_key: str = ""
    request_id: str = field(default_factory=lambda: uuid4().hex[:8])

    @classmethod
    def from_request(cls, request: SearchRequest, *, query: str, search_api_key: str) -> "QueryPlan":
        return cls(
            query=query,
            messages=tuple({"role": m.role, "content": m.content} for m in request.messages),
            search_domains=tuple(request.search_domains),
            time_range=request.time_range,
            model_provider=request.model_provider,
            search_api_key=search_api_key,
        )

    @property
    def is_follow_up(self) -> bool:
        return len(self.messages) > INITIAL_TURN_LIMIT


def build_search_configuration(plan: QueryPlan) -> SearchConfiguration:
    return SearchConfiguration(
        time_range=None if plan.time_range == "all" else plan.time_range,
        include_paths=domain_filter.expand_domain_globs(plan.search_domains),
    )


def build_answer_messages(plan: QueryPlan, context: str) -> list[dict[str, str]]:
    """System preamble, prior turns for follow-ups, then the query with its sources."""
    if plan.is_follow_up:
        messages = [{"role": "system", "content": render_prompt("answer.system_follow_up")}]
        # The newest turn is re-sent below together with the fresh context.
        messages.extend(dict(m) for m in plan.messages[:-1])
    else:
        messages = [{"role": "system", "content": render_prompt("answer.system_initial")}]
    messages.append(
        {
            "role": "user",
            "content": render_prompt("answer.user", query=plan.query, context=context),
        }
    )
    return messages


def build_follow_up_messages(plan: QueryPlan, sources: Sequence[Source]) -> list[dict[str, str]]:
    if plan.is_follow_up:
        conversation = "\n\n".join(f"{m['role']}: {m['content']}" for m in plan.messages)
    else:
        conversation = f"user: {plan.query}"
    sources_line = ""
    if sources:
        sources_line = render_prompt(
            "follow_up.sources_line",
            titles=", ".join(source.title for source in sources),
        )
    return [
        {"role": "system", "content": render_prompt("follow_up.system")},
        {
            "role": "user",
            "content": render_prompt(
                "follow_up.user",
                query=plan.query,
                conversation=conversation,
                sources_line=sources_line,
            ),
        },
    ]


def parse_follow_up_questions(raw: str) -> list[str]:
    """One question per line; blanks and list markers dropped, at most five kept."""
    questions: list[str] = []
    for line in raw.splitlines():
        question = _LIST_MARKER.sub("", line.strip()).strip()
        if question:
            questions.append(question)
    return questions[:MAX_FOLLOW_UP_QUESTIONS]


async def _pause(ms: int) -> None:
    if ms > 0:
        await asyncio.sleep(ms / 1000)


class SearchOrchestrator:
    """Runs one travel query from search to a streamed, cited answer.

    Flow:
      1. Search Firecrawl with the request's time range and domain hints
      2. Enforce the domain allow-list on the returned URLs
      3. Normalize sources and build the numbered context
      4. Stream the answer while follow-up questions are generated alongside
      5. Emit follow-up questions, then ``complete``

    Every step yields StreamEvents. Failures inside the pipeline become a
    single ``error`` event instead of breaking the stream.
    """

    def __init__(
        self,
        model_provider: ModelProvider = ModelProvider.OPENAI,
        *,
        generator: TextGenerator | None = None,
        follow_up_generator: TextGenerator | None = None,
    ):
        self.model_provider = model_provider
        self.generator = generator or get_text_generator(model_provider)
        self.follow_up_generator = follow_up_generator or get_follow_up_generator()

    async def _short_circuit_domain_miss(self, plan: QueryPlan) -> AsyncGenerator[StreamEvent, None]:
        """No model call: explain that the allow-list filtered out every result."""
        logger.warning(f"[{plan.request_id}] All results were filtered out by domain restriction")
        yield streaming.status(render_prompt("domain_filter.warning"))
        yield streaming.sources([])

        message = render_prompt(
            "domain_filter.no_results",
            domains=", ".join(plan.search_domains),
            query=plan.query,
        )
        for word in message.split(" "):
            yield streaming.text(word + " ")
            await _pause(settings.typing_delay_ms)
        yield streaming.complete()

    async def _generate_follow_up_questions(
        self,
        plan: QueryPlan,
        sources: Sequence[Source],
    ) -> list[str]:
        t0 = time.monotonic()
        raw = await self.follow_up_generator.generate_text(
            build_follow_up_messages(plan, sources),
            temperature=settings.follow_up_temperature,
            max_tokens=settings.follow_up_max_tokens,
        )
        log_service.log_llm_call(
            model=self.follow_up_generator.model,
            caller="orchestrator.follow_up_questions",
            duration_ms=int((time.monotonic() - t0) * 1000),
            output_chars=len(raw),
            request_id=plan.request_id,
        )
        return parse_follow_up_questions(raw)

    async def _answer(
        self,
        plan: QueryPlan,
        sources: tuple[Source, ...],
        context: str,
    ) -> AsyncGenerator[StreamEvent, None]:
        """Stream the answer, then the follow-up questions, then ``complete``."""
        messages = build_answer_messages(plan, context)
        logger.info(f"[{plan.request_id}] Creating text stream, context length {len(context)}")

        # Scheduled before the answer stream is consumed so both run at once.
        follow_up_task = asyncio.create_task(self._generate_follow_up_questions(plan, sources))
        try:
            t0 = time.monotonic()
            async with self.generator.stream_text(
                messages,
                temperature=settings.answer_temperature,
                max_tokens=settings.answer_max_tokens,
            ) as stream:
                async for chunk in stream.text_stream:
                    yield streaming.text(chunk)
            log_service.log_llm_call(
                model=self.generator.model,
                caller="orchestrator.answer",
                duration_ms=int((time.monotonic() - t0) * 1000),
                output_chars=len(stream.text),
                request_id=plan.request_id,
            )
            questions = await follow_up_task
        finally:
            if not follow_up_task.done():
                follow_up_task.cancel()

        yield streaming.follow_up_questions(questions)
        yield streaming.complete()

    async def run(self, plan: QueryPlan) -> AsyncGenerator[StreamEvent, None]:
        """Execute the pipeline for ``plan``, yielding events in protocol order."""
        log_service.log_event(
            event_type="search_started",
            message="Search pipeline started",
            request_id=plan.request_id,
            query=plan.query[:100],
            follow_up=plan.is_follow_up,
            domains=list(plan.search_domains),
            time_range=plan.time_range,
            model_provider=self.model_provider.value,
        )
        try:
            yield streaming.status(render_prompt("status.search_starting"))
            yield streaming.status(render_prompt("status.searching"))

            config = build_search_configuration(plan)
            raw_results = await firecrawl_search.search(
                plan.query,
                config,
                api_key=plan.search_api_key,
            )
            results = domain_filter.filter_by_domains(raw_results, plan.search_domains)
            if plan.search_domains:
                logger.info(
                    f"[{plan.request_id}] Domain filter kept {len(results)} of {len(raw_results)} results"
                )

            if domain_filter.filtered_everything(raw_results, results, plan.search_domains):
                async with aclosing(self._short_circuit_domain_miss(plan)) as events:
                    async for event in events:
                        yield event
                return

            sources = normalize_sources(results)
            yield streaming.sources(sources)
            await _pause(settings.sources_render_delay_ms)
            yield streaming.status(render_prompt("status.analyzing"))

            symbol = detect_company_ticker(plan.query)
            if symbol:
                logger.info(f"[{plan.request_id}] Detected ticker {symbol}")
                yield streaming.ticker(symbol)

            context = build_context(sources, plan.query)
            # aclosing: a client disconnect must reach the answer stream and follow-up task.
            async with aclosing(self._answer(plan, sources, context)) as events:
                async for event in events:
                    yield event
        except Exception as e:
            logger.exception(f"[{plan.request_id}] Search pipeline failed: {e}")
            yield classify_error(e).to_event()
