"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (in-memory → Redis, Gemini → fake, etc.)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .history_provider import HistoryProvider
from .session_store import SESSION_ID_PATTERN, SessionStore, is_valid_session_id

__all__ = [
    "HistoryProvider",
    "SESSION_ID_PATTERN",
    "SessionStore",
    "is_valid_session_id",
]
