"""Demo components: two tabs fed by PubSub topics and a nested counter."""

from __future__ import annotations

from abc import ABC, abstractmethod

from connected_components.core import (
    ConnectedComponent,
    h,
    live_component,
    noreply,
    ok,
    send_component,
)
from connected_components.core.component import connected_attrs
from connected_components.core.logging_utils import get_module_logger

logger = get_module_logger("DemoComponents")

INC = "inc"


class _CounterComponent(ConnectedComponent, ABC):
    """Shared counter behaviour; subclasses pick the topic to follow."""

    @abstractmethod
    def topic(self, socket) -> str:
        ...

    def on_mount(self, socket):
        pubsub = socket.assigns["pubsub"]
        topic = self.topic(socket)

        def process_setup():
            pubsub.subscribe(topic)

        return ok(socket, process_setup)

    def handle_event(self, event, params, socket):
        if event == "inc":
            return noreply(socket.update("count", lambda count: count + 1))
        if event == "inc_send":
            send_component(socket.myself, INC)
            return noreply(socket)
        return super().handle_event(event, params, socket)

    def handle_info(self, message, socket):
        if message == INC:
            return noreply(socket.update("count", lambda count: count + 1))
        logger.info("%s ignored message %r", socket.id, message)
        return noreply(socket)


class TabComponent(_CounterComponent):

    def topic(self, socket) -> str:
        return f"{socket.id}_updates"

    def render(self, socket):
        assigns = socket.assigns
        return h(
            "div",
            connected_attrs(socket, **{"class": "tab"}),
            h("p", {}, f"This is {assigns['id']}. Count: {assigns['count']}"),
            live_component(
                NestedComponent,
                f"{assigns['id']}_nested",
                parent=socket.myself,
                count=0,
                pubsub=assigns["pubsub"],
            ),
        )


class NestedComponent(_CounterComponent):

    def topic(self, socket) -> str:
        return "nested_updates"

    def handle_update(self, assigns, socket):
        return ok(socket.assign(parent=assigns["parent"]))

    def handle_event(self, event, params, socket):
        if event == "inc_parent":
            send_component(socket.assigns["parent"], INC)
            return noreply(socket)
        return super().handle_event(event, params, socket)

    def render(self, socket):
        assigns = socket.assigns
        return h(
            "div",
            connected_attrs(socket, **{"class": "nested"}),
            h("p", {}, f"This is {assigns['id']}. Count: {assigns['count']}"),
        )


__all__ = ["TabComponent", "NestedComponent", "INC"]
