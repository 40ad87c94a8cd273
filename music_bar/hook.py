"""
Host integration for music_bar package.

HostHook decorates the host's setup_media_controller(controller, surface)
hook so every future now-playing source is seen, while the original hook is
still called and can be put back exactly as it was.

ControllerDiscovery polls for the host at a fixed interval until the hook
can be installed. It has no attempt limit (the host may appear at any point
in the page lifecycle) and is a cancellable task so teardown can stop it.

Dependencies: state
"""
from __future__ import annotations
import asyncio
from typing import Any, Callable, Optional

from . import state
from logging_config import get_logger

logger = get_logger(__name__)

_MISSING = object()


class HostHook:
    """Wrapper state for one installed hook: {host, original, installed}."""

    def __init__(self, hook_name: str = None):
        self.hook_name = hook_name or state.SETUP_HOOK_NAME
        self.host: Any = None
        self.original: Optional[Callable] = None
        self.installed = False
        # Whatever the host held under hook_name in its own namespace
        self._own_value: Any = _MISSING

    def install(self, host: Any, on_setup: Callable[[Any, Any], None]) -> bool:
        """
        Wrap host.<hook_name>. Returns True once installed (including when
        already installed), False if the host has no callable hook yet.
        """
        if self.installed:
            return True
        original = getattr(host, self.hook_name, None)
        if not callable(original):
            return False

        try:
            self._own_value = vars(host).get(self.hook_name, _MISSING)
        except TypeError:
            self._own_value = _MISSING

        def setup_media_controller(controller=None, surface=None, *args, **kwargs):
            if controller is not None:
                try:
                    on_setup(controller, surface)
                except Exception as e:
                    logger.warning(f"Attach from host hook failed: {e}")
            return original(controller, surface, *args, **kwargs)

        setup_media_controller.__wrapped__ = original
        setattr(host, self.hook_name, setup_media_controller)

        self.host = host
        self.original = original
        self.installed = True
        return True

    def restore(self) -> None:
        """Put the host's hook back exactly as found."""
        if not self.installed:
            return
        try:
            if self._own_value is _MISSING:
                # The hook came from the host's class; dropping the override re-exposes it
                delattr(self.host, self.hook_name)
            else:
                setattr(self.host, self.hook_name, self._own_value)
        except Exception as e:
            logger.warning(f"Could not restore {self.hook_name}: {e}")
        self.host = None
        self.original = None
        self._own_value = _MISSING
        self.installed = False


class ControllerDiscovery:
    """Fixed-interval retry loop: lookup() the host, hand it to on_found()."""

    def __init__(
        self,
        lookup: Callable[[], Any],
        on_found: Callable[[Any], bool],
        interval: Optional[float] = None,
        warn_every: Optional[int] = None,
    ):
        self._lookup = lookup
        self._on_found = on_found
        self.interval = interval or state.DISCOVERY_INTERVAL
        self.warn_every = warn_every or state.DISCOVERY_WARN_EVERY
        self.attempts = 0
        self.found = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def attempt(self) -> bool:
        """One discovery attempt. True once the host has been taken."""
        self.attempts += 1
        try:
            host = self._lookup()
            self.found = host is not None and bool(self._on_found(host))
        except Exception as e:
            logger.warning(f"Media controller discovery failed: {e}")
            self.found = False

        if not self.found and self.attempts % self.warn_every == 0:
            logger.warning("Waiting for media controller host...")
        return self.found

    def start(self) -> None:
        """Try once right away, then keep retrying in the background."""
        if self.running or self.found:
            return
        if self.attempt():
            return
        try:
            self._task = asyncio.get_running_loop().create_task(self._run())
        except RuntimeError as e:
            logger.warning(f"Media controller discovery not started: {e}")

    def stop(self) -> None:
        """Cancel the retry task and forget any host found, so start() can run again."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self.found = False
        self.attempts = 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self.attempt():
                return
