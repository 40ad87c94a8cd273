"""
Process-wide registry for music_bar package.

Holds the named engine handle (so a newly booted engine can displace an older
one on hot reload) and the named host objects engines discover.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Optional

_handles: Dict[str, Any] = {}
_hosts: Dict[str, Any] = {}

DEFAULT_HOST_NAME = "media_controller"


def get_handle(name: str) -> Optional[Any]:
    return _handles.get(name)


def install_handle(name: str, handle: Any) -> None:
    _handles[name] = handle


def remove_handle(name: str, handle: Any = None) -> None:
    """Remove `name`; when `handle` is given, only if it is still the one installed."""
    if handle is None or _handles.get(name) is handle:
        _handles.pop(name, None)


def register_host(host: Any, name: str = DEFAULT_HOST_NAME) -> None:
    _hosts[name] = host


def unregister_host(name: str = DEFAULT_HOST_NAME) -> None:
    _hosts.pop(name, None)


def get_host(name: str = DEFAULT_HOST_NAME) -> Optional[Any]:
    return _hosts.get(name)


def host_lookup(name: str = DEFAULT_HOST_NAME) -> Callable[[], Optional[Any]]:
    """A zero-argument lookup for ControllerDiscovery."""
    return lambda: _hosts.get(name)
