"""Single-slot status banner that hides itself after a delay."""

import asyncio
import logging
from typing import Callable, Literal, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

Severity = Literal["success", "error", "info"]

DEFAULT_DELAY = 2.0


class NotificationState(BaseModel):
    """What the banner currently shows."""

    message: str = Field(default="", description="Banner text")
    severity: Severity = Field(default="info", description="Banner colour")
    visible: bool = Field(default=False, description="Whether the banner is shown")

    model_config = {"frozen": True}

    def shown(self, message: str, severity: Severity) -> "NotificationState":
        return NotificationState(message=message, severity=severity, visible=True)

    def hidden(self) -> "NotificationState":
        return self.model_copy(update={"visible": False})


class NotificationScheduler:
    """Holds at most one notification and hides it after ``delay`` seconds.

    Showing a new message replaces the old one and cancels its pending
    hide, so an older timer can never cut a newer message short.
    """

    def __init__(
        self,
        delay: float = DEFAULT_DELAY,
        on_change: Optional[Callable[[NotificationState], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """Initialize the scheduler.

        Args:
            delay: Seconds a notification stays visible.
            on_change: Called with the new state after every change.
            loop: Event loop for the hide timer. Defaults to the running loop.
        """
        self.delay = delay
        self.on_change = on_change
        self._loop = loop
        self._state = NotificationState()
        self._hide_handle: Optional[asyncio.TimerHandle] = None

    @property
    def state(self) -> NotificationState:
        return self._state

    @property
    def pending(self) -> bool:
        """True while a hide is scheduled."""
        return self._hide_handle is not None

    def show(self, message: str, severity: Severity = "info") -> None:
        """Show a message, replacing whatever is visible.

        Must be called with an event loop running unless one was given
        to the constructor.
        """
        loop = self._loop or asyncio.get_running_loop()
        self._cancel_pending()
        logger.debug("Notification (%s): %s", severity, message)
        self._set(self._state.shown(message, severity))
        self._hide_handle = loop.call_later(self.delay, self._expire)

    def dismiss(self) -> None:
        """Hide the current message now."""
        self._cancel_pending()
        if self._state.visible:
            self._set(self._state.hidden())

    def close(self) -> None:
        """Cancel any pending hide on teardown."""
        self._cancel_pending()

    def _expire(self) -> None:
        self._hide_handle = None
        self._set(self._state.hidden())

    def _cancel_pending(self) -> None:
        if self._hide_handle is not None:
            self._hide_handle.cancel()
            self._hide_handle = None

    def _set(self, state: NotificationState) -> None:
        self._state = state
        if self.on_change is not None:
            self.on_change(state)
