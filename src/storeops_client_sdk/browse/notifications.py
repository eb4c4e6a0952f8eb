from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..ui_errors import UserFacingError


@dataclass
class NotificationCenter:
    """Queue of user-visible notices (the toast area of a list view)."""

    messages: list[dict[str, Any]] = field(default_factory=list)
    max_messages: int = 20

    def push(self, *, level: str, title: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
        payload = {
            "level": level,
            "title": title,
            "message": message,
            "details": details or {},
        }
        self.messages.append(payload)
        if self.max_messages and len(self.messages) > self.max_messages:
            del self.messages[: -self.max_messages]
        return payload

    def push_error(self, error: UserFacingError, *, title: str) -> dict[str, Any]:
        details: dict[str, Any] = {"trace_id": error.trace_id}
        if error.technical_details:
            details["technical"] = error.technical_details
        return self.push(level="error", title=title, message=error.message, details=details)

    def clear(self) -> None:
        self.messages.clear()

    def render(self) -> dict[str, Any]:
        return {"count": len(self.messages), "messages": list(self.messages)}
