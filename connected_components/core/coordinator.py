"""
Coordinator - the single-threaded host for component instances.

A coordinator owns one mailbox and processes it one message at a time in
``run()``. Two kinds of input arrive there:

    UI events (``push_event``)      -> HANDLE_EVENT hooks, then the targeted
                                       component's handle_event (or the
                                       coordinator's own)
    anything else (``send``)        -> HANDLE_INFO hooks, then handle_info

After each message the coordinator re-renders: it walks the tree returned
by ``render()``, mounts newly declared components (allocating identity
tokens), calls ``update`` on components whose declared assigns changed,
and removes instances that are no longer declared. Removal fires the
on-remove bindings carried by the instance's root element.

Subclasses override ``mount``, ``render``, ``handle_info`` and
``handle_event``.
"""

from __future__ import annotations

import asyncio
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Set, Union

from .asyncio_utils import cancel_and_wait, create_logged_task
from .element import Element, LiveComponent
from .exceptions import DuplicateComponentError, LinkedActorError
from .hooks import HookChain, HookFn, HookResult, HookStage
from .identity import ComponentDescriptor, IdentityToken, TokenAllocator
from .logging_utils import get_module_logger
from .messages import STOP, ActorExit, UIEvent
from .results import Reply, expect_reply
from .settings import CoordinatorSettings
from .socket import Socket

if TYPE_CHECKING:
    from .actor import ActorHandle


_current_coordinator: ContextVar[Optional["Coordinator"]] = ContextVar(
    "connected_current_coordinator", default=None
)


def current_coordinator() -> Optional["Coordinator"]:
    """The coordinator whose loop (or one of whose actors) is running."""
    return _current_coordinator.get()


@dataclass
class ComponentInstance:
    """One mounted component: its address, class instance and state."""
    token: IdentityToken
    descriptor: ComponentDescriptor
    component: Any
    socket: Socket
    declared_assigns: Optional[Dict[str, Any]] = None
    root: Optional[Element] = None


class Coordinator:

    def __init__(
        self,
        coordinator_id: Optional[str] = None,
        settings: Optional[CoordinatorSettings] = None,
    ):
        self.coordinator_id = coordinator_id or f"coord-{uuid.uuid4().hex[:8]}"
        self.settings = settings or CoordinatorSettings()
        self.logger = get_module_logger(f"Coordinator.{self.coordinator_id}")

        self.assigns: Dict[str, Any] = {}
        self.private: Dict[str, Any] = {}
        self.mailbox: asyncio.Queue = asyncio.Queue()
        self.tree: Optional[Element] = None

        self._hooks: Dict[HookStage, HookChain] = {stage: HookChain(stage) for stage in HookStage}
        self._tokens = TokenAllocator(self.coordinator_id)
        self._instances: Dict[IdentityToken, ComponentInstance] = {}
        self._by_descriptor: Dict[ComponentDescriptor, IdentityToken] = {}
        self._links: Dict[IdentityToken, "ActorHandle"] = {}
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Overridable callbacks

    def mount(self) -> None:
        """Called once when the loop starts, before the first render."""

    def render(self) -> Optional[Element]:
        return None

    def handle_info(self, message: Any) -> None:
        self.logger.warning("Unhandled message: %r", message)

    def handle_event(self, event: str, params: Dict[str, Any]) -> None:
        self.logger.warning("Unhandled event %s: %r", event, params)

    def terminate(self) -> None:
        """Called once when the loop exits, before linked actors are stopped."""

    # ------------------------------------------------------------------
    # State

    def assign(self, mapping: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Coordinator":
        if mapping:
            self.assigns.update(mapping)
        self.assigns.update(kwargs)
        return self

    # ------------------------------------------------------------------
    # Hooks

    def attach_hook(self, name: str, stage: Union[HookStage, str], fn: HookFn) -> None:
        self._hooks[HookStage(stage)].attach(name, fn)

    def detach_hook(self, name: str, stage: Union[HookStage, str]) -> bool:
        return self._hooks[HookStage(stage)].detach(name)

    def has_hook(self, name: str, stage: Union[HookStage, str]) -> bool:
        return name in self._hooks[HookStage(stage)]

    # ------------------------------------------------------------------
    # Mailbox

    @property
    def is_alive(self) -> bool:
        return self._task is not None and not self._task.done()

    def send(self, message: Any) -> None:
        """Queue ``message`` for the loop. Never blocks."""
        if self._closed:
            self.logger.debug("Coordinator closed, dropping %r", message)
            return
        self.mailbox.put_nowait(message)

    def push_event(
        self,
        name: str,
        params: Optional[Dict[str, Any]] = None,
        target: Optional[IdentityToken] = None,
    ) -> None:
        self.send(UIEvent(name, dict(params or {}), target))

    # ------------------------------------------------------------------
    # Links

    def link(self, handle: "ActorHandle") -> None:
        self._links[handle.token] = handle

    def unlink(self, handle: "ActorHandle") -> None:
        if self._links.get(handle.token) is handle:
            del self._links[handle.token]

    def notify_exit(self, exit_message: ActorExit) -> None:
        self.send(exit_message)

    def linked_actors(self) -> List["ActorHandle"]:
        return list(self._links.values())

    # ------------------------------------------------------------------
    # Lifecycle

    def start(self) -> asyncio.Task:
        if self._task is not None:
            raise RuntimeError(f"Coordinator {self.coordinator_id} already started")
        self._task = create_logged_task(
            self.run(),
            logger=self.logger,
            context=f"coordinator {self.coordinator_id}",
        )
        return self._task

    async def run(self) -> None:
        if self._task is None:
            self._task = asyncio.current_task()
        _current_coordinator.set(self)
        self.logger.info("Coordinator started")

        try:
            self.mount()
            self.render_tree()

            while True:
                message = await self.mailbox.get()
                try:
                    if message is STOP:
                        break
                    self.dispatch(message)
                finally:
                    self.mailbox.task_done()
        finally:
            self._closed = True
            try:
                self.terminate()
            finally:
                await self._terminate_links()
            self.logger.info("Coordinator stopped")

    async def stop(self) -> None:
        """Ask the loop to exit after the messages already queued."""
        if self._task is None:
            return
        if not self._task.done():
            self.mailbox.put_nowait(STOP)
        await asyncio.wait({self._task})

    async def wait_idle(self, rounds: int = 10) -> None:
        """Yield until actors and the mailbox have settled.

        Meant for tests and scripted runs; returns early if the loop exits.
        """
        for _ in range(rounds):
            await asyncio.sleep(0)
            if not self.is_alive:
                return
            joiner = asyncio.ensure_future(self.mailbox.join())
            await asyncio.wait({joiner, self._task}, return_when=asyncio.FIRST_COMPLETED)
            joiner.cancel()

    async def _terminate_links(self) -> None:
        handles = self.linked_actors()
        if not handles:
            return

        self.logger.debug("Stopping %d linked actors", len(handles))
        for handle in handles:
            handle.stop()

        tasks = {handle.task for handle in handles if handle.task is not None}
        _, pending = await asyncio.wait(tasks, timeout=self.settings.actor_stop_timeout)
        if pending:
            self.logger.warning("Cancelling %d actors that did not stop in time", len(pending))
            await cancel_and_wait(pending)

    # ------------------------------------------------------------------
    # Dispatch

    def dispatch(self, message: Any) -> None:
        if isinstance(message, ActorExit):
            self.logger.error("Linked actor %s failed: %r", message.token, message.error)
            raise LinkedActorError(message.token, message.error) from message.error

        if isinstance(message, UIEvent):
            self._dispatch_event(message)
        elif self._hooks[HookStage.HANDLE_INFO].run(message, self) is HookResult.CONT:
            self.handle_info(message)

        self.render_tree()

    def _dispatch_event(self, event: UIEvent) -> None:
        if self._hooks[HookStage.HANDLE_EVENT].run(event, self) is HookResult.HALT:
            return

        if event.target is None:
            self.handle_event(event.name, event.params)
            return

        instance = self._instances.get(event.target)
        if instance is None:
            self.logger.warning("Event %s for unknown component %s ignored", event.name, event.target)
            return

        result = instance.component.handle_event(event.name, event.params, instance.socket)
        checked = expect_reply(
            result, Reply.NOREPLY, f"{instance.descriptor.component_type.__name__}.handle_event"
        )
        instance.socket = checked.socket

    # ------------------------------------------------------------------
    # Component instances

    def send_update(self, component_type: type, payload: Mapping[str, Any]) -> bool:
        """Run ``update(payload, socket)`` on the instance named by payload["id"].

        Returns False (and drops the update) if no such instance is mounted,
        which happens legitimately for updates racing a removal.
        """
        descriptor = ComponentDescriptor(component_type, payload.get("id"))
        token = self._by_descriptor.get(descriptor)
        if token is None:
            self.logger.debug("send_update to %s ignored: not mounted", descriptor)
            return False
        self._update_instance(self._instances[token], payload)
        return True

    def instances(self) -> List[ComponentInstance]:
        return list(self._instances.values())

    def get_instance(self, token: IdentityToken) -> Optional[ComponentInstance]:
        return self._instances.get(token)

    def find(self, component_id: str, component_type: Optional[type] = None) -> Optional[ComponentInstance]:
        for instance in self._instances.values():
            if instance.descriptor.component_id != component_id:
                continue
            if component_type is None or instance.descriptor.component_type is component_type:
                return instance
        return None

    def _update_instance(self, instance: ComponentInstance, assigns: Mapping[str, Any]) -> None:
        result = instance.component.update(dict(assigns), instance.socket)
        checked = expect_reply(
            result, Reply.OK, f"{instance.descriptor.component_type.__name__}.update"
        )
        instance.socket = checked.socket

    # ------------------------------------------------------------------
    # Rendering

    def render_tree(self) -> None:
        seen: Set[IdentityToken] = set()
        self.tree = self.render()
        if self.tree is not None:
            self._walk(self.tree, seen)

        for token in [token for token in self._instances if token not in seen]:
            self._remove_instance(token)

    def _walk(self, node: Element, seen: Set[IdentityToken]) -> None:
        for declaration in node.iter_live_components():
            instance = self._reconcile(declaration)
            if instance.token in seen:
                raise DuplicateComponentError(
                    f"{instance.descriptor} declared more than once in one render"
                )
            seen.add(instance.token)

            instance.root = instance.component.render(instance.socket)
            if instance.root is not None:
                self._walk(instance.root, seen)

    def _reconcile(self, declaration: LiveComponent) -> ComponentInstance:
        descriptor = ComponentDescriptor(declaration.component_type, declaration.id)
        assigns = {**declaration.assigns, "id": declaration.id}

        token = self._by_descriptor.get(descriptor)
        if token is None:
            token = self._tokens.next_token()
            instance = ComponentInstance(
                token=token,
                descriptor=descriptor,
                component=declaration.component_type(),
                socket=Socket(self, myself=token),
            )
            self._instances[token] = instance
            self._by_descriptor[descriptor] = token
            self.logger.debug("Mounted %s as %s", descriptor, token)
        else:
            instance = self._instances[token]

        if instance.declared_assigns != assigns:
            instance.declared_assigns = assigns
            self._update_instance(instance, assigns)
        return instance

    def _remove_instance(self, token: IdentityToken) -> None:
        instance = self._instances.pop(token)
        self._by_descriptor.pop(instance.descriptor, None)
        self.logger.debug("Removed %s (%s)", instance.descriptor, token)

        if instance.root is None:
            return
        for binding in instance.root.on_remove_bindings():
            self.push_event(binding.event, {"cid": str(binding.target)}, binding.target)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.coordinator_id!r}, instances={len(self._instances)})"


__all__ = ["Coordinator", "ComponentInstance", "current_coordinator"]
