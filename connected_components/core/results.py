"""Return values of component lifecycle callbacks.

Callbacks answer with ``ok(socket)``, ``ok(socket, setup)`` or
``noreply(socket)``. The dispatcher validates the shape with
``expect_reply`` and raises CallbackContractError on anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

from .exceptions import CallbackContractError

if TYPE_CHECKING:
    from .socket import Socket

SetupFn = Callable[[], Union[None, Awaitable[None]]]


class Reply(Enum):
    OK = "ok"
    NOREPLY = "noreply"


@dataclass(frozen=True)
class CallbackResult:
    reply: Reply
    socket: "Socket"
    setup: Optional[SetupFn] = None


def ok(socket: "Socket", setup: Optional[SetupFn] = None) -> CallbackResult:
    if setup is not None and not callable(setup):
        raise TypeError(f"setup must be callable, got {setup!r}")
    return CallbackResult(Reply.OK, socket, setup)


def noreply(socket: "Socket") -> CallbackResult:
    return CallbackResult(Reply.NOREPLY, socket)


def expect_reply(
    result: Any,
    reply: Reply,
    callback: str,
    *,
    allow_setup: bool = False,
) -> CallbackResult:
    """Return ``result`` if it has the expected shape, else raise."""
    valid = (
        isinstance(result, CallbackResult)
        and result.reply is reply
        and result.socket is not None
        and (allow_setup or result.setup is None)
    )
    if not valid:
        expected = f"{reply.value}(socket)"
        if allow_setup:
            expected = f"{reply.value}(socket) or {reply.value}(socket, setup)"
        raise CallbackContractError(callback, expected, result)
    return result


__all__ = ["Reply", "CallbackResult", "SetupFn", "ok", "noreply", "expect_reply"]
