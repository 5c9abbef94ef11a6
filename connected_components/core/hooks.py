"""
Hook chains - ordered interceptors on a coordinator's entry points.

A coordinator runs every inbound mailbox message through its HANDLE_INFO
chain and every UI event through its HANDLE_EVENT chain before its own
handlers see them. Each hook answers HALT ("handled, stop here") or CONT
("not mine, continue"); only when every hook continues does the message
reach the coordinator (or the targeted component).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List

from .exceptions import HookError
from .logging_utils import get_module_logger

if TYPE_CHECKING:
    from .coordinator import Coordinator


class HookResult(Enum):
    CONT = "cont"
    HALT = "halt"


class HookStage(Enum):
    HANDLE_INFO = "handle_info"
    HANDLE_EVENT = "handle_event"


HookFn = Callable[[Any, "Coordinator"], HookResult]


class HookChain:
    """Named hooks for one stage, run in attachment order."""

    def __init__(self, stage: HookStage):
        self.stage = stage
        self.logger = get_module_logger(f"HookChain.{stage.value}")
        self._hooks: Dict[str, HookFn] = {}

    def attach(self, name: str, fn: HookFn) -> None:
        if name in self._hooks:
            raise HookError(f"hook {name!r} is already attached to {self.stage.value}")
        if not callable(fn):
            raise HookError(f"hook {name!r} is not callable: {fn!r}")
        self._hooks[name] = fn
        self.logger.debug("Attached hook %s", name)

    def detach(self, name: str) -> bool:
        removed = self._hooks.pop(name, None) is not None
        if removed:
            self.logger.debug("Detached hook %s", name)
        return removed

    def names(self) -> List[str]:
        return list(self._hooks)

    def __contains__(self, name: object) -> bool:
        return name in self._hooks

    def __len__(self) -> int:
        return len(self._hooks)

    def run(self, value: Any, coordinator: "Coordinator") -> HookResult:
        # Copy: a hook may detach itself (or another hook) while running.
        for name, fn in list(self._hooks.items()):
            result = fn(value, coordinator)
            if result is HookResult.HALT:
                return HookResult.HALT
            if result is not HookResult.CONT:
                raise HookError(
                    f"hook {name!r} on {self.stage.value} must return HookResult, got {result!r}"
                )
        return HookResult.CONT


__all__ = ["HookResult", "HookStage", "HookFn", "HookChain"]
