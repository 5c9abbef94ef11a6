"""Unit tests for the Coordinator loop, dispatch and render reconciliation."""

import asyncio
import logging

import pytest

from connected_components.core import (
    CallbackContractError,
    Component,
    Coordinator,
    CoordinatorSettings,
    DuplicateComponentError,
    HookResult,
    HookStage,
    LinkedActorError,
    RemoveBinding,
    current_coordinator,
    h,
    live_component,
    noreply,
    ok,
    spawn,
)
from connected_components.core.identity import IdentityToken
from connected_components.core.messages import ActorExit, UIEvent


class Recorder(Component):
    """Plain component that records every update it receives."""

    def __init__(self):
        self.updates = []
        self.events = []

    def update(self, assigns, socket):
        self.updates.append(dict(assigns))
        return super().update(assigns, socket)

    def handle_event(self, event, params, socket):
        self.events.append((event, params))
        if event == "bad":
            return ok(socket)
        return noreply(socket)

    def render(self, socket):
        return h("div", {"on_remove": RemoveBinding("removed", socket.myself)})


class Page(Coordinator):

    def __init__(self, **kwargs):
        kwargs.setdefault("coordinator_id", "test")
        super().__init__(**kwargs)
        self.infos = []
        self.events = []
        self.seen_coordinator = None

    def mount(self):
        self.assign(items=["a"], label="x")

    def render(self):
        return h(
            "main",
            {},
            *[live_component(Recorder, item, label=self.assigns["label"]) for item in self.assigns["items"]],
        )

    def handle_info(self, message):
        self.seen_coordinator = current_coordinator()
        self.infos.append(message)

    def handle_event(self, event, params):
        if event == "set":
            self.assign(params)
        else:
            self.events.append((event, params))


class TestCoordinatorLifecycle:

    @pytest.mark.asyncio
    async def test_mount_and_first_render(self, running):
        page = Page()
        async with running(page):
            assert page.is_alive
            instances = page.instances()
            assert len(instances) == 1
            assert str(instances[0].token) == "test:1"
            assert instances[0].socket.assigns["id"] == "a"
            assert instances[0].socket.assigns["myself"] == instances[0].token
        assert not page.is_alive

    @pytest.mark.asyncio
    async def test_start_twice_raises(self, running):
        page = Page()
        async with running(page):
            with pytest.raises(RuntimeError):
                page.start()

    @pytest.mark.asyncio
    async def test_send_after_stop_is_dropped(self, running):
        page = Page()
        async with running(page):
            pass
        page.send("late")
        assert page.mailbox.empty()

    @pytest.mark.asyncio
    async def test_default_id(self):
        assert Coordinator().coordinator_id.startswith("coord-")


class TestCoordinatorDispatch:

    @pytest.mark.asyncio
    async def test_handle_info(self, running):
        page = Page()
        async with running(page):
            page.send("hello")
            await page.wait_idle()
            assert page.infos == ["hello"]
            assert page.seen_coordinator is page

    @pytest.mark.asyncio
    async def test_default_handle_info_warns(self, running, caplog):
        coordinator = Coordinator("plain")
        with caplog.at_level(logging.WARNING, logger="connected_components"):
            async with running(coordinator):
                coordinator.send("stray")
                await coordinator.wait_idle()
        assert "Unhandled message" in caplog.text

    @pytest.mark.asyncio
    async def test_info_hook_halts(self, running):
        page = Page()
        page.attach_hook("eat", HookStage.HANDLE_INFO, lambda message, coordinator: HookResult.HALT)
        async with running(page):
            page.send("hello")
            await page.wait_idle()
            assert page.infos == []
        assert page.has_hook("eat", "handle_info")

    @pytest.mark.asyncio
    async def test_untargeted_event_reaches_coordinator(self, running):
        page = Page()
        async with running(page):
            page.push_event("click", {"x": 1})
            await page.wait_idle()
            assert page.events == [("click", {"x": 1})]

    @pytest.mark.asyncio
    async def test_targeted_event_reaches_component(self, running):
        page = Page()
        async with running(page):
            instance = page.find("a")
            page.push_event("click", {"x": 1}, target=instance.token)
            await page.wait_idle()
            assert instance.component.events == [("click", {"x": 1})]
            assert page.events == []

    @pytest.mark.asyncio
    async def test_event_for_unknown_target_is_ignored(self, running, caplog):
        page = Page()
        with caplog.at_level(logging.WARNING, logger="connected_components"):
            async with running(page) as task:
                page.push_event("click", {}, target=IdentityToken("test", 99))
                await page.wait_idle()
                assert not task.done()
        assert "unknown component" in caplog.text

    @pytest.mark.asyncio
    async def test_event_hook_sees_event_first(self, running):
        page = Page()
        seen = []

        def hook(event, coordinator):
            seen.append(event)
            return HookResult.HALT

        page.attach_hook("spy", HookStage.HANDLE_EVENT, hook)
        async with running(page):
            page.push_event("click", {"x": 1})
            await page.wait_idle()
        assert seen == [UIEvent("click", {"x": 1})]
        assert page.events == []

    @pytest.mark.asyncio
    async def test_bad_event_reply_ends_coordinator(self, running):
        page = Page()
        async with running(page) as task:
            page.push_event("bad", {}, target=page.find("a").token)
            await page.wait_idle()
        assert isinstance(task.exception(), CallbackContractError)

    @pytest.mark.asyncio
    async def test_actor_exit_ends_coordinator(self, running):
        page = Page()
        token = IdentityToken("test", 7)
        async with running(page) as task:
            page.notify_exit(ActorExit(token, ValueError("boom")))
            await page.wait_idle()
        error = task.exception()
        assert isinstance(error, LinkedActorError)
        assert error.token == token
        assert isinstance(error.error, ValueError)


class TestCoordinatorRendering:

    @pytest.mark.asyncio
    async def test_update_only_when_assigns_change(self, running):
        page = Page()
        async with running(page):
            component = page.find("a").component
            assert component.updates == [{"label": "x", "id": "a"}]

            page.send("unrelated")
            await page.wait_idle()
            assert len(component.updates) == 1

            page.push_event("set", {"label": "y"})
            await page.wait_idle()
            assert component.updates[-1] == {"label": "y", "id": "a"}
            assert page.find("a").socket.assigns["label"] == "y"

    @pytest.mark.asyncio
    async def test_removed_instance_fires_on_remove(self, running):
        page = Page()
        removed = []

        def hook(event, coordinator):
            if event.name == "removed":
                removed.append(event)
                return HookResult.HALT
            return HookResult.CONT

        page.attach_hook("removed", HookStage.HANDLE_EVENT, hook)
        async with running(page):
            token = page.find("a").token
            page.push_event("set", {"items": ["b"]})
            await page.wait_idle()

            assert page.get_instance(token) is None
            assert page.find("b") is not None
            assert removed == [UIEvent("removed", {"cid": str(token)}, token)]

    @pytest.mark.asyncio
    async def test_redeclared_component_gets_new_token(self, running):
        page = Page()
        async with running(page):
            first = page.find("a").token
            page.push_event("set", {"items": []})
            page.push_event("set", {"items": ["a"]})
            await page.wait_idle()
            assert page.find("a").token != first

    @pytest.mark.asyncio
    async def test_duplicate_declaration_fails(self, running):
        page = Page()
        async with running(page) as task:
            page.push_event("set", {"items": ["a", "a"]})
            await page.wait_idle()
        assert isinstance(task.exception(), DuplicateComponentError)

    @pytest.mark.asyncio
    async def test_send_update(self, running):
        page = Page()
        async with running(page):
            assert page.send_update(Recorder, {"id": "a", "extra": 1}) is True
            assert page.find("a").socket.assigns["extra"] == 1
            assert page.send_update(Recorder, {"id": "missing"}) is False


class TestCoordinatorLinks:

    @pytest.mark.asyncio
    async def test_stop_terminates_linked_actors(self, running):
        page = Page()
        async with running(page):
            handle = spawn(page, IdentityToken("test", 50), lambda: None)
            await page.wait_idle()
            assert page.linked_actors() == [handle]
        assert handle.is_alive is False
        assert page.linked_actors() == []

    @pytest.mark.asyncio
    async def test_stuck_actors_are_cancelled(self, running):
        page = Page(settings=CoordinatorSettings(actor_stop_timeout=0.05))

        async def never_ready():
            await asyncio.Event().wait()

        async with running(page):
            handle = spawn(page, IdentityToken("test", 51), never_ready)
            await page.wait_idle()
        assert handle.task.cancelled()

    @pytest.mark.asyncio
    async def test_terminate_runs_before_actors_stop(self, running):
        seen = []

        class Closing(Page):
            def terminate(self):
                seen.extend((handle, handle.is_alive) for handle in self.linked_actors())

        page = Closing()
        async with running(page):
            handle = spawn(page, IdentityToken("test", 52), lambda: None)
            await page.wait_idle()
        assert seen == [(handle, True)]
        assert handle.is_alive is False
