"""
Identity - addresses for live component instances.

Every component instance mounted by a coordinator gets an IdentityToken,
its "address" for the coordinator's lifetime. Tokens follow the format
"<coordinator_id>:<cid>" (e.g. "demo:3") and are never reused: a component
that is removed and declared again gets a fresh token.

A ComponentDescriptor names which component class and which logical id a
token currently refers to.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import NamedTuple


@dataclass(frozen=True, order=True)
class IdentityToken:
    """Opaque, hashable address of one live component instance."""
    coordinator_id: str
    cid: int

    def __str__(self) -> str:
        return f"{self.coordinator_id}:{self.cid}"


class ComponentDescriptor(NamedTuple):
    """Which component class and logical id an identity token refers to."""
    component_type: type
    component_id: str

    def __str__(self) -> str:
        return f"{self.component_type.__name__}#{self.component_id}"


class TokenAllocator:
    """Hands out identity tokens for one coordinator.

    Component ids are chosen by the application and can repeat over time
    (a tab removed and shown again keeps its id), so tokens come from a
    monotonic counter instead.
    """

    def __init__(self, coordinator_id: str):
        if not coordinator_id or ":" in coordinator_id:
            raise ValueError(f"Invalid coordinator id: {coordinator_id!r}")
        self._coordinator_id = coordinator_id
        self._counter = itertools.count(1)

    @property
    def coordinator_id(self) -> str:
        return self._coordinator_id

    def next_token(self) -> IdentityToken:
        return IdentityToken(self._coordinator_id, next(self._counter))


def parse_token(text: str) -> IdentityToken:
    """Parse the ``str()`` form of a token.

    Examples:
        demo:3 -> IdentityToken("demo", 3)

    Raises:
        ValueError: If ``text`` is not "<coordinator_id>:<cid>".
    """
    coordinator_id, sep, cid = text.strip().rpartition(":")
    if not sep or not coordinator_id or not cid.isdigit():
        raise ValueError(f"Not an identity token: {text!r}")
    return IdentityToken(coordinator_id, int(cid))


__all__ = ["IdentityToken", "ComponentDescriptor", "TokenAllocator", "parse_token"]
