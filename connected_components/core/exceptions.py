"""Exception types raised by the connected component runtime."""

from __future__ import annotations

from typing import Any, Optional


class ConnectedComponentError(Exception):
    """Base class for every error raised by this package."""


class CallbackContractError(ConnectedComponentError, TypeError):
    """A user lifecycle callback returned a value of the wrong shape.

    This is a programming error in the component, so it is never swallowed:
    it propagates out of ``Coordinator.run()`` and ends the coordinator.
    """

    def __init__(self, callback: str, expected: str, received: Any):
        self.callback = callback
        self.expected = expected
        self.received = received
        super().__init__(
            f"{callback} must return `{expected}`, received: {received!r}"
        )


class NotInstalledError(ConnectedComponentError):
    """A connected component was mounted on a coordinator without the hooks."""


class HookError(ConnectedComponentError):
    """Invalid hook registration or a hook returned an unknown result."""


class DuplicateComponentError(ConnectedComponentError):
    """Two component declarations share the same type and id in one render."""


class LinkedActorError(ConnectedComponentError):
    """A linked background actor failed, taking its coordinator down with it."""

    def __init__(self, token: Any, error: Optional[BaseException] = None):
        self.token = token
        self.error = error
        reason = f"{type(error).__name__}: {error}" if error is not None else "unknown error"
        super().__init__(f"linked actor {token} exited abnormally ({reason})")


__all__ = [
    "ConnectedComponentError",
    "CallbackContractError",
    "NotInstalledError",
    "HookError",
    "DuplicateComponentError",
    "LinkedActorError",
]
