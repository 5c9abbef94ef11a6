"""
Actor Lifecycle - the background task owned by one component instance.

An actor runs its setup callback once, then relays every message that
arrives in its mailbox to the owning coordinator as a RelayMessage tagged
with the instance's identity token, until it receives STOP.

Actors are linked to their coordinator: an actor that dies with an
exception is reported to the coordinator, which then exits as well, and a
coordinator that exits stops all of its linked actors.
"""

from __future__ import annotations

import asyncio
import inspect
from contextvars import ContextVar
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from .asyncio_utils import create_logged_task
from .identity import IdentityToken
from .logging_utils import get_instance_logger
from .messages import STOP, ActorExit, RelayMessage
from .results import SetupFn

if TYPE_CHECKING:
    from .coordinator import Coordinator


_current_actor: ContextVar[Optional["ActorHandle"]] = ContextVar(
    "connected_current_actor", default=None
)


def current_actor() -> Optional["ActorHandle"]:
    """The actor whose task is running, or None outside any actor."""
    return _current_actor.get()


class ActorState(Enum):
    STARTING = "starting"   # Task created, setup not finished
    RUNNING = "running"     # Relaying mailbox messages
    STOPPED = "stopped"     # Received STOP or was cancelled
    FAILED = "failed"       # Setup or relay raised


class ActorHandle:
    """Address of a running actor; the only way to talk to it."""

    def __init__(self, coordinator: "Coordinator", token: IdentityToken, *, mailbox_size: int = 0):
        self.token = token
        self.coordinator = coordinator
        self.mailbox: asyncio.Queue = asyncio.Queue(maxsize=max(0, mailbox_size))
        self.state = ActorState.STARTING
        self.task: Optional[asyncio.Task] = None
        self.logger = get_instance_logger("Actor", token)
        self._stop_requested = False

    @property
    def is_alive(self) -> bool:
        return self.task is not None and not self.task.done()

    def send(self, message: Any) -> bool:
        """Queue ``message`` for relaying. Never blocks.

        Returns:
            True if the message was queued, False if the actor is stopping,
            dead, or its bounded mailbox is full.
        """
        if self._stop_requested or not self.is_alive:
            self.logger.debug("Dropping %r: actor is not running", message)
            return False
        try:
            self.mailbox.put_nowait(message)
        except asyncio.QueueFull:
            self.logger.warning(
                "Mailbox full (%d), dropping %r", self.mailbox.maxsize, message
            )
            return False
        return True

    def stop(self) -> None:
        """Ask the actor to exit. Unacknowledged; returns immediately."""
        if self._stop_requested or not self.is_alive:
            return
        self._stop_requested = True
        try:
            self.mailbox.put_nowait(STOP)
        except asyncio.QueueFull:
            self.logger.warning("Mailbox full while stopping, cancelling task")
            self.task.cancel()

    async def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Wait for the task to finish; True if it did within ``timeout``."""
        if self.task is None:
            return True
        if not self.task.done():
            await asyncio.wait({self.task}, timeout=timeout)
        return self.task.done()

    async def _run(self, setup: SetupFn) -> None:
        _current_actor.set(self)
        try:
            result = setup()
            if inspect.isawaitable(result):
                await result
            self.state = ActorState.RUNNING
            self.logger.debug("Setup complete, relaying to %s", self.coordinator.coordinator_id)

            while True:
                message = await self.mailbox.get()
                if message is STOP:
                    break
                self.coordinator.send(RelayMessage(self.token, message))
        except asyncio.CancelledError:
            self.state = ActorState.STOPPED
            raise
        except Exception:
            self.state = ActorState.FAILED
            raise

        self.state = ActorState.STOPPED
        self.logger.debug("Stopped")

    def _on_done(self, task: asyncio.Task) -> None:
        self.coordinator.unlink(self)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.coordinator.notify_exit(ActorExit(self.token, error))

    def __repr__(self) -> str:
        return f"ActorHandle({self.token}, state={self.state.value})"


def spawn(
    coordinator: "Coordinator",
    token: IdentityToken,
    setup: SetupFn,
    *,
    mailbox_size: int = 0,
) -> ActorHandle:
    """Start an actor for ``token`` linked to ``coordinator``.

    Fire-and-forget: the task is scheduled but does not run until the caller
    yields to the event loop, so anything the caller sends to the
    coordinator before returning is queued ahead of the actor's first relay.

    Setup failures are not handled here; they end the actor (and, through
    the link, its coordinator).
    """
    if not callable(setup):
        raise TypeError(f"setup must be callable, got {setup!r}")

    handle = ActorHandle(coordinator, token, mailbox_size=mailbox_size)
    handle.task = create_logged_task(
        handle._run(setup),
        logger=handle.logger,
        context=f"actor {token}",
    )
    handle.task.add_done_callback(handle._on_done)
    coordinator.link(handle)
    return handle


__all__ = ["ActorHandle", "ActorState", "current_actor", "spawn"]
