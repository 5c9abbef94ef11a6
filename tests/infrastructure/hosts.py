"""Small coordinators and components shared by the core unit tests."""

from connected_components.core import (
    ConnectedComponent,
    ConnectedCoordinator,
    h,
    live_component,
    noreply,
    ok,
)
from connected_components.core.component import connected_attrs


class Host(ConnectedCoordinator):
    """Declares one ``component_type`` instance per id in ``assigns["ids"]``."""

    def __init__(self, component_type, ids=("c",), **kwargs):
        kwargs.setdefault("coordinator_id", "test")
        super().__init__(**kwargs)
        self.component_type = component_type
        self.initial_ids = list(ids)

    def mount(self):
        super().mount()
        self.assign(ids=self.initial_ids, extra=0)

    def render(self):
        return h(
            "main",
            {},
            *[
                live_component(self.component_type, cid, count=0, extra=self.assigns["extra"])
                for cid in self.assigns["ids"]
            ],
        )

    def handle_event(self, event, params):
        self.assign(params)


class Counter(ConnectedComponent):
    """Counts "inc" messages relayed from its actor."""

    def __init__(self):
        self.mounts = 0
        self.updates = 0
        self.setups = 0

    def on_mount(self, socket):
        self.mounts += 1

        def setup():
            self.setups += 1

        return ok(socket, setup)

    def handle_update(self, assigns, socket):
        self.updates += 1
        return ok(socket.assign(extra=assigns["extra"]))

    def handle_info(self, message, socket):
        if message == "inc":
            return noreply(socket.update("count", lambda count: count + 1))
        return noreply(socket)

    def render(self, socket):
        return h("div", connected_attrs(socket), f"Count: {socket.assigns['count']}")
