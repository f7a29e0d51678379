"""Transient user-facing notices."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from nutrimind.domain.models import utc_now


@dataclass(frozen=True)
class Notice:
    """A message for the UI, e.g. a failed background save."""

    message: str
    level: str = "error"
    created_at: datetime = field(default_factory=utc_now)


class NoticeBoard:
    """Bounded queue of notices drained by the UI."""

    def __init__(self, maxlen: int = 50) -> None:
        self._notices: deque[Notice] = deque(maxlen=maxlen)

    def post(self, message: str, level: str = "error") -> Notice:
        notice = Notice(message=message, level=level)
        self._notices.append(notice)
        return notice

    def peek(self) -> list[Notice]:
        return list(self._notices)

    def drain(self) -> list[Notice]:
        """Return and clear all notices."""
        notices = list(self._notices)
        self._notices.clear()
        return notices
