"""Action capability: something that delivers a notification payload."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ActionPayload:
    """Notification content handed to an action."""

    message: str
    subject: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionResult:
    success: bool
    message: str
    data: Any = None


class Action(ABC):
    """A notification channel.

    Subclasses implement execute(); override validate() when the action
    needs configuration that can be checked before sending.
    """

    name: str

    @abstractmethod
    async def execute(self, payload: ActionPayload) -> ActionResult:
        """Deliver the payload. Must report failures in the result, not raise."""
        ...

    def validate(self) -> bool:
        return True
