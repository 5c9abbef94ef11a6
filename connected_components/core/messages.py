"""
Message shapes exchanged between coordinators, actors and the UI layer.

Coordinator mailbox:
    AttachMessage / DetachMessage - self-sent control messages that mutate
        the correlation registry inside the coordinator loop.
    RelayMessage - an actor forwarding one of its inbound messages.
    ActorExit - a linked actor terminated with an error.
    UIEvent - a UI-originated event (clicks, the reserved detach event).

Actor mailbox:
    STOP - the only cancellation signal; anything else is relayed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .identity import ComponentDescriptor, IdentityToken

# Key marking a send_update payload as a relayed message.
CONNECTED_TAG = "__connected_tag__"
HANDLE_INFO = "handle_info"

# Reserved UI event fired by the on-remove binding of a connected component.
DETACH_EVENT = "connected:detach"


@dataclass(frozen=True)
class AttachMessage:
    token: IdentityToken
    descriptor: ComponentDescriptor


@dataclass(frozen=True)
class DetachMessage:
    token: IdentityToken


@dataclass(frozen=True)
class RelayMessage:
    token: IdentityToken
    payload: Any


@dataclass(frozen=True)
class ActorExit:
    token: IdentityToken
    error: BaseException


@dataclass(frozen=True)
class UIEvent:
    name: str
    params: Dict[str, Any] = field(default_factory=dict)
    target: Optional[IdentityToken] = None


class _StopSignal:
    __slots__ = ()

    def __repr__(self) -> str:
        return "STOP"


STOP = _StopSignal()


def handle_info_payload(component_id: str, message: Any) -> Dict[str, Any]:
    """Build the send_update payload that delivers ``message`` to a component."""
    return {CONNECTED_TAG: HANDLE_INFO, "id": component_id, "message": message}


def is_handle_info(assigns: Mapping[str, Any]) -> bool:
    return assigns.get(CONNECTED_TAG) == HANDLE_INFO


__all__ = [
    "CONNECTED_TAG",
    "HANDLE_INFO",
    "DETACH_EVENT",
    "AttachMessage",
    "DetachMessage",
    "RelayMessage",
    "ActorExit",
    "UIEvent",
    "STOP",
    "handle_info_payload",
    "is_handle_info",
]
