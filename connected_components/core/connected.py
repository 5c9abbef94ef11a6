"""
Interception chain that connects component instances to their actors.

``install(coordinator)`` attaches two coordinator-wide hooks:

    connected_handle_info    ATTACH  -> registry.put(token, descriptor)
                             DETACH  -> registry.delete(token)
                             RELAY   -> send_update(..., HANDLE_INFO payload)
                                        if the token is attached and
                                        still mounted, else drop
                             other   -> CONT

    connected_handle_detach  the reserved detach event -> stop the actor,
                             forget its handle, self-send DETACH
                             other   -> CONT

Both hooks receive the coordinator's CorrelationRegistry explicitly.
"""

from __future__ import annotations

import functools
from typing import Any, Optional

from .actor import spawn
from .coordinator import Coordinator, current_coordinator
from .exceptions import NotInstalledError
from .hooks import HookResult, HookStage
from .identity import ComponentDescriptor, IdentityToken
from .logging_utils import get_module_logger
from .messages import (
    DETACH_EVENT,
    AttachMessage,
    DetachMessage,
    RelayMessage,
    UIEvent,
    handle_info_payload,
)
from .registry import CorrelationRegistry
from .results import SetupFn
from .socket import Socket

logger = get_module_logger("Connected")

REGISTRY_KEY = "__connected_registry__"
INFO_HOOK = "connected_handle_info"
DETACH_HOOK = "connected_handle_detach"


def install(coordinator: Coordinator) -> CorrelationRegistry:
    """Install the interception chain on ``coordinator``. Once per coordinator.

    Raises:
        HookError: If the chain is already installed.
    """
    registry = CorrelationRegistry()
    coordinator.attach_hook(
        INFO_HOOK, HookStage.HANDLE_INFO, functools.partial(connected_handle_info, registry)
    )
    coordinator.attach_hook(
        DETACH_HOOK, HookStage.HANDLE_EVENT, functools.partial(connected_handle_detach, registry)
    )
    coordinator.private[REGISTRY_KEY] = registry
    logger.debug("Installed on %s", coordinator.coordinator_id)
    return registry


def get_registry(coordinator: Coordinator) -> CorrelationRegistry:
    registry = coordinator.private.get(REGISTRY_KEY)
    if registry is None:
        raise NotInstalledError(
            f"coordinator {coordinator.coordinator_id} has no connected hooks; "
            "call install() from its mount() or use ConnectedCoordinator"
        )
    return registry


def connected_handle_info(
    registry: CorrelationRegistry, message: Any, coordinator: Coordinator
) -> HookResult:
    if isinstance(message, AttachMessage):
        registry.put(message.token, message.descriptor)
        return HookResult.HALT

    if isinstance(message, DetachMessage):
        registry.delete(message.token)
        return HookResult.HALT

    if isinstance(message, RelayMessage):
        descriptor = registry.get(message.token)
        if descriptor is None:
            logger.debug("Relay for detached %s dropped: %r", message.token, message.payload)
            return HookResult.HALT
        # The instance may be gone while its DETACH is still queued; a
        # redeclared (type, id) has a new token and must not receive it.
        instance = coordinator.get_instance(message.token)
        if instance is None or instance.descriptor != descriptor:
            logger.debug("Relay for removed %s dropped: %r", message.token, message.payload)
            return HookResult.HALT
        coordinator.send_update(
            descriptor.component_type,
            handle_info_payload(descriptor.component_id, message.payload),
        )
        return HookResult.HALT

    return HookResult.CONT


def connected_handle_detach(
    registry: CorrelationRegistry, event: UIEvent, coordinator: Coordinator
) -> HookResult:
    if event.name != DETACH_EVENT or event.target is None:
        return HookResult.CONT
    detach_component_actor(registry, coordinator, event.target)
    return HookResult.HALT


def attach_component_actor(
    registry: CorrelationRegistry,
    socket: Socket,
    component_type: type,
    setup: SetupFn,
) -> Socket:
    """Queue ATTACH for the instance behind ``socket`` and start its actor.

    ATTACH is queued before the actor task exists, so it reaches the
    coordinator ahead of any relay from that actor.
    """
    coordinator = socket.coordinator
    token = socket.myself
    descriptor = ComponentDescriptor(component_type, socket.id)

    coordinator.send(AttachMessage(token, descriptor))
    handle = spawn(
        coordinator,
        token,
        setup,
        mailbox_size=coordinator.settings.actor_mailbox_size,
    )
    registry.put_actor(token, handle)
    logger.debug("Spawned actor for %s (%s)", descriptor, token)
    return socket


def detach_component_actor(
    registry: CorrelationRegistry, coordinator: Coordinator, token: IdentityToken
) -> None:
    handle = registry.delete_actor(token)
    if handle is not None:
        handle.stop()
    coordinator.send(DetachMessage(token))


def send_component(
    token: IdentityToken,
    message: Any,
    *,
    registry: Optional[CorrelationRegistry] = None,
) -> Any:
    """Send ``message`` straight into the actor mailbox of ``token``.

    Useful for child-to-parent messaging: a child holding its parent's
    token (``socket.assigns["parent"]``) can reach the parent's
    ``handle_info`` without going through the coordinator's own handlers.
    The registry defaults to the one of the current coordinator.

    Returns ``message``; an unknown or detached token is logged and ignored.
    """
    if registry is None:
        coordinator = current_coordinator()
        if coordinator is not None:
            registry = coordinator.private.get(REGISTRY_KEY)

    handle = registry.get_actor(token) if registry is not None else None
    if handle is None:
        logger.warning("No actor found for target component %s", token)
        return message

    handle.send(message)
    return message


class ConnectedCoordinator(Coordinator):
    """Coordinator that installs the interception chain when it mounts.

    Subclasses overriding ``mount`` must call ``super().mount()``.
    """

    def mount(self) -> None:
        install(self)

    def terminate(self) -> None:
        registry = self.private.get(REGISTRY_KEY)
        if registry is None:
            return
        for handle in registry.clear():
            handle.stop()

    @property
    def registry(self) -> CorrelationRegistry:
        return get_registry(self)


__all__ = [
    "REGISTRY_KEY",
    "INFO_HOOK",
    "DETACH_HOOK",
    "install",
    "get_registry",
    "connected_handle_info",
    "connected_handle_detach",
    "attach_component_actor",
    "detach_component_actor",
    "send_component",
    "ConnectedCoordinator",
]
