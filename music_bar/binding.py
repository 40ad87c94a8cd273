"""
Source binding / reconciliation loop for music_bar package.

Binds to at most one now-playing controller at a time. While bound, a refresh
is triggered by the controller's metadata/playback events and, as a fallback
for pages that change artwork without firing events, by a fixed-interval poll.

States:
    Unbound - no controller, no subscriptions, no poll task
    Bound   - controller (+ surface), both event subscriptions, a poll task

Dependencies: state, helpers
"""
from __future__ import annotations
import asyncio
from typing import Any, Awaitable, Callable, Iterable, Optional, Set

from . import state
from .helpers import create_tracked_task
from logging_config import get_logger

logger = get_logger(__name__)


class SourceBinding:
    """Attach/detach state machine around an externally owned controller."""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[None]],
        poll_interval: Optional[float] = None,
        events: Optional[Iterable[str]] = None,
    ):
        self._refresh = refresh
        self.poll_interval = poll_interval or state.POLL_INTERVAL
        self.events = tuple(events or state.CONTROLLER_EVENTS)

        self.controller: Any = None
        self.surface: Any = None
        self._poll_task: Optional[asyncio.Task] = None
        # Refreshes started by this binding that have not finished yet
        self._refresh_tasks: Set[asyncio.Task] = set()

    @property
    def is_bound(self) -> bool:
        return self.controller is not None

    @property
    def poll_task(self) -> Optional[asyncio.Task]:
        return self._poll_task

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def attach(self, controller: Any, surface: Any = None) -> None:
        """
        Bind to `controller`. Re-attaching the bound controller is a no-op;
        a different controller replaces the current one.
        """
        if controller is None or controller is self.controller:
            return

        self.detach()
        self.controller = controller
        self.surface = surface
        for event_type in self.events:
            self._subscribe(controller, event_type)

        self._trigger_refresh()
        self._start_polling()
        logger.info(f"Attached controller (surface: {surface is not None})")

    def detach(self) -> None:
        if self.controller is None:
            return

        controller = self.controller
        for event_type in self.events:
            self._unsubscribe(controller, event_type)
        self.controller = None
        self.surface = None
        self._stop_polling()
        self._cancel_refreshes()
        logger.debug("Detached controller")

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def handle_event(self, event: Any = None) -> None:
        """
        Listener registered for every controller event type.

        Events from a controller that has since been replaced are ignored.
        An event without a target is taken to come from the bound controller.
        """
        if not self.is_bound:
            return
        target = getattr(event, "target", None)
        if target is None or target is self.controller:
            self._trigger_refresh()

    def _subscribe(self, controller: Any, event_type: str) -> None:
        try:
            controller.add_event_listener(event_type, self.handle_event)
        except Exception as e:
            logger.warning(f"Failed to add listener: {event_type} ({e})")

    def _unsubscribe(self, controller: Any, event_type: str) -> None:
        try:
            controller.remove_event_listener(event_type, self.handle_event)
        except Exception as e:
            logger.debug(f"Failed to remove listener: {event_type} ({e})")

    # -------------------------------------------------------------------------
    # Refresh scheduling
    # -------------------------------------------------------------------------

    def _trigger_refresh(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Refresh skipped: no running event loop")
            return
        task = create_tracked_task(self._refresh())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)

    def _cancel_refreshes(self) -> None:
        for task in list(self._refresh_tasks):
            task.cancel()
        self._refresh_tasks.clear()

    def _start_polling(self) -> None:
        self._stop_polling()
        try:
            self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())
        except RuntimeError as e:
            logger.warning(f"Fallback polling not started: {e}")

    def _stop_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            if self.controller is not None and self.surface is not None:
                self._trigger_refresh()
