from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from .history import SearchHistory

Flash = Literal["success", "error"]
MessageKind = Literal["info", "error"]


class SessionStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True)
class AppState:
    history: SearchHistory
    status: SessionStatus = SessionStatus.IDLE
    query: str = ""
    input_enabled: bool = True
    pending: int = 0
    flash: Flash | None = None
    message: str | None = None
    message_kind: MessageKind | None = None
    suggestions: list[str] = field(default_factory=list)
    last_source: str | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "status": self.status.value,
            "query": self.query,
            "input_enabled": self.input_enabled,
            "pending": self.pending,
            "flash": self.flash,
            "message": self.message,
            "message_kind": self.message_kind,
            "suggestions": list(self.suggestions),
            "history": self.history.cities,
            "last_source": self.last_source,
        }
