"""Top-level package for connected components.

Lets a component instance hosted by a single-threaded coordinator own a
background actor and receive that actor's messages as if it were the
coordinator.
"""

from __future__ import annotations

from importlib import metadata

from .core import (
    Component,
    ConnectedComponent,
    ConnectedCoordinator,
    Coordinator,
    PubSub,
    connected_attrs,
    h,
    install,
    live_component,
    noreply,
    ok,
    send_component,
)

try:
    __version__ = metadata.version("connected-components")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


__all__ = [
    "__version__",
    "Component",
    "ConnectedComponent",
    "ConnectedCoordinator",
    "Coordinator",
    "PubSub",
    "connected_attrs",
    "h",
    "install",
    "live_component",
    "noreply",
    "ok",
    "send_component",
]
