from __future__ import annotations

from typing import Any, Iterable

from tripscout.models.events import EventType, StreamEvent
from tripscout.models.search import MAX_FOLLOW_UP_QUESTIONS, Source


def status(message: str) -> StreamEvent:
    return StreamEvent(event=EventType.STATUS, data={"message": message})


def sources(items: Iterable[Source]) -> StreamEvent:
    return StreamEvent(
        event=EventType.SOURCES,
        data={"sources": [source.to_dict() for source in items]},
    )


def ticker(symbol: str) -> StreamEvent:
    return StreamEvent(event=EventType.TICKER, data={"symbol": symbol})


def text(chunk: str) -> StreamEvent:
    """A raw slice of the streamed answer."""
    return StreamEvent(event=EventType.TEXT, data={"text": chunk})


def follow_up_questions(questions: list[str]) -> StreamEvent:
    kept = [q for q in questions if q][:MAX_FOLLOW_UP_QUESTIONS]
    return StreamEvent(event=EventType.FOLLOW_UP_QUESTIONS, data={"questions": kept})


def error(
    kind: str,
    message: str,
    *,
    suggestion: str | None = None,
    code: int | None = None,
) -> StreamEvent:
    data: dict[str, Any] = {"kind": kind, "message": message}
    if suggestion:
        data["suggestion"] = suggestion
    if code is not None:
        data["code"] = code
    return StreamEvent(event=EventType.ERROR, data=data)


def complete() -> StreamEvent:
    return StreamEvent(event=EventType.COMPLETE)
