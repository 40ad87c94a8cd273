"""
Engine lifecycle for music_bar package.

MusicBarAccent wires discovery -> hook -> binding -> pipeline -> sink and owns
their teardown. One engine is reachable through the process-wide handle
named MusicBarAccent; booting a new one destroys the previous one first.

Dependencies: state, helpers, registry, hook, binding, pipeline, sink
"""
from __future__ import annotations
from typing import Any, Callable, Optional

from . import registry, state
from .artwork import ArtworkResolver
from .binding import SourceBinding
from .helpers import find_first
from .hook import ControllerDiscovery, HostHook
from .image import PixelSampler
from .pipeline import RefreshPipeline
from .sink import PublicationSink, StyleSink
from logging_config import get_logger

logger = get_logger(__name__)


class MusicBarAccent:
    """Single engine instance with explicit boot/destroy."""

    def __init__(
        self,
        sink: Optional[PublicationSink] = None,
        host_lookup: Optional[Callable[[], Any]] = None,
        resolver: Optional[ArtworkResolver] = None,
        sampler: Optional[PixelSampler] = None,
        poll_interval: Optional[float] = None,
        discovery_interval: Optional[float] = None,
        handle_name: str = None,
    ):
        self.handle_name = handle_name or state.HANDLE_NAME
        self.sink = sink if sink is not None else StyleSink()
        self.pipeline = RefreshPipeline(self._current_source, self.sink, resolver, sampler)
        self.binding = SourceBinding(self.pipeline.refresh, poll_interval)
        self.hook = HostHook()
        self.discovery = ControllerDiscovery(
            host_lookup or registry.host_lookup(),
            self._patch_host,
            interval=discovery_interval,
        )
        self.booted = False

    def _current_source(self):
        return self.binding.controller, self.binding.surface

    def boot(self) -> "MusicBarAccent":
        """Displace any previous engine, publish the handle, start discovery."""
        if self.booted:
            return self

        previous = registry.get_handle(self.handle_name)
        if previous is not None and previous is not self:
            try:
                previous.destroy()
            except Exception as e:
                logger.warning(f"Previous engine failed to shut down cleanly: {e}")
            registry.remove_handle(self.handle_name, previous)

        mark_running = getattr(self.sink, "mark_running", None)
        if callable(mark_running):
            mark_running(state.VERSION)
        registry.install_handle(self.handle_name, self)
        self.booted = True
        logger.info(f"Booted v{state.VERSION}")

        self.discovery.start()
        return self

    def _patch_host(self, host: Any) -> bool:
        if self.hook.installed:
            return True
        if not self.hook.install(host, self.binding.attach):
            return False

        controller = find_first(host, state.CURRENT_CONTROLLER_KEYS)
        surface = find_first(host, state.CURRENT_SURFACE_KEYS)
        if controller is not None:
            self.binding.attach(controller, surface)

        logger.info(f"Patched {type(host).__name__}.{self.hook.hook_name}")
        return True

    def destroy(self) -> None:
        """Stop everything, restore the host hook, clear the presentation."""
        self.discovery.stop()
        self.binding.detach()
        self.pipeline.invalidate()
        self.hook.restore()
        self.sink.clear()
        self.pipeline.sampler.close()
        registry.remove_handle(self.handle_name, self)
        self.booted = False
        logger.info("Destroyed")


def boot_engine(**kwargs) -> MusicBarAccent:
    """Construct and boot an engine; kwargs go to MusicBarAccent."""
    return MusicBarAccent(**kwargs).boot()


def get_engine(name: str = None) -> Optional[MusicBarAccent]:
    return registry.get_handle(name or state.HANDLE_NAME)
