"""
Components - stateful UI units mounted by a coordinator.

``Component`` is a plain component: ``update`` merges assigns.

``ConnectedComponent`` additionally owns a background actor and receives
that actor's messages through ``handle_info``, as if it were the
coordinator itself. Subclasses may override:

    on_mount(socket)               once, on the first update; return
                                   ``ok(socket, setup)`` to start an actor
                                   that runs ``setup()`` and then relays
                                   its mailbox, or ``ok(socket)`` for none
    handle_update(assigns, socket) on every update, including the first
    handle_info(message, socket)   for each relayed message; must return
                                   ``noreply(socket)``

Example::

    class Counter(ConnectedComponent):
        def on_mount(self, socket):
            topic = f"{socket.id}_updates"
            return ok(socket, lambda: pubsub.subscribe(topic))

        def handle_info(self, message, socket):
            return noreply(socket.update("count", lambda n: n + 1))

        def render(self, socket):
            return h("div", connected_attrs(socket), f"Count: {socket.assigns['count']}")

The root element must carry ``connected_attrs(socket)``; otherwise its
removal is never observed and the actor runs until the coordinator exits.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .connected import attach_component_actor, get_registry
from .element import ON_REMOVE_ATTR, Element, RemoveBinding
from .logging_utils import get_module_logger
from .messages import DETACH_EVENT, is_handle_info
from .results import CallbackResult, Reply, expect_reply, noreply, ok
from .socket import Socket

CONNECTED_MOUNTED = "__connected_mounted__"
CONNECTED_ATTRS = "connected_attrs"

logger = get_module_logger("Component")


def connected_attrs(socket: Socket, **attrs: Any) -> Dict[str, Any]:
    """Root element attributes: ``attrs`` plus the on-remove binding."""
    return {**socket.assigns.get(CONNECTED_ATTRS, {}), **attrs}


class Component:
    """Plain component; subclasses usually override ``render``."""

    def update(self, assigns: Dict[str, Any], socket: Socket) -> CallbackResult:
        return ok(socket.assign(assigns))

    def handle_event(self, event: str, params: Dict[str, Any], socket: Socket) -> CallbackResult:
        logger.warning("%s: unhandled event %s", type(self).__name__, event)
        return noreply(socket)

    def render(self, socket: Socket) -> Optional[Element]:
        return None


class ConnectedComponent(Component):

    # ------------------------------------------------------------------
    # User callbacks

    def on_mount(self, socket: Socket) -> CallbackResult:
        return ok(socket)

    def handle_update(self, assigns: Dict[str, Any], socket: Socket) -> CallbackResult:
        return ok(socket)

    def handle_info(self, message: Any, socket: Socket) -> CallbackResult:
        return noreply(socket)

    # ------------------------------------------------------------------
    # Update dispatcher

    def update(self, assigns: Dict[str, Any], socket: Socket) -> CallbackResult:
        name = type(self).__name__

        if is_handle_info(assigns):
            result = self.handle_info(assigns["message"], socket)
            return ok(expect_reply(result, Reply.NOREPLY, f"{name}.handle_info").socket)

        if not socket.assigns.get(CONNECTED_MOUNTED):
            socket = self._mount(assigns, socket)

        result = self.handle_update(assigns, socket)
        return ok(expect_reply(result, Reply.OK, f"{name}.handle_update").socket)

    def _mount(self, assigns: Dict[str, Any], socket: Socket) -> Socket:
        registry = get_registry(socket.coordinator)

        socket.assign(assigns)
        socket.assign({
            CONNECTED_MOUNTED: True,
            CONNECTED_ATTRS: {ON_REMOVE_ATTR: RemoveBinding(DETACH_EVENT, socket.myself)},
        })

        result = expect_reply(
            self.on_mount(socket), Reply.OK, f"{type(self).__name__}.on_mount", allow_setup=True
        )
        if result.setup is None:
            logger.warning(
                "%s: setup function not provided, consider using a plain Component",
                type(self).__name__,
            )
            return result.socket

        return attach_component_actor(registry, result.socket, type(self), result.setup)


__all__ = [
    "CONNECTED_MOUNTED",
    "CONNECTED_ATTRS",
    "Component",
    "ConnectedComponent",
    "connected_attrs",
]
