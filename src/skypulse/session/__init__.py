from .history import HistoryStore, MemoryHistoryStore, SearchHistory
from .search import InputError, SearchSession
from .state import AppState, SessionStatus
from .suggestions import suggest

__all__ = [
    "AppState",
    "HistoryStore",
    "InputError",
    "MemoryHistoryStore",
    "SearchHistory",
    "SearchSession",
    "SessionStatus",
    "suggest",
]
