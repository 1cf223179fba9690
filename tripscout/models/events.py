from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    STATUS = "status"
    SOURCES = "sources"
    TICKER = "ticker"
    TEXT = "text"
    FOLLOW_UP_QUESTIONS = "follow_up_questions"
    ERROR = "error"
    COMPLETE = "complete"


# Events after which nothing else is written for a request.
TERMINAL_EVENTS = frozenset({EventType.COMPLETE, EventType.ERROR})


@dataclass(frozen=True)
class StreamEvent:
    event: EventType
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.event in TERMINAL_EVENTS

    def format(self) -> str:
        return f"event: {self.event.value}\ndata: {json.dumps(self.data)}\n\n"

    def to_sse(self) -> dict[str, str]:
        """Frame for ``sse_starlette.EventSourceResponse``."""
        return {"event": self.event.value, "data": json.dumps(self.data)}
