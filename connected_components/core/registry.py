"""
Correlation Registry - which component instance owns which actor.

Two maps keyed by identity token, both owned by a single coordinator and
only touched from its loop:

    token -> ComponentDescriptor   written by ATTACH, removed by DETACH
    token -> ActorHandle           stored at spawn, removed on detach

Relays are routed by the descriptor map, so a relay whose token has no
descriptor (not attached yet, or already detached) is dropped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

from .identity import ComponentDescriptor, IdentityToken
from .logging_utils import get_module_logger

if TYPE_CHECKING:
    from .actor import ActorHandle


class CorrelationRegistry:

    def __init__(self):
        self.logger = get_module_logger("CorrelationRegistry")
        self._descriptors: Dict[IdentityToken, ComponentDescriptor] = {}
        self._actors: Dict[IdentityToken, "ActorHandle"] = {}

    # ------------------------------------------------------------------
    # Descriptors

    def put(self, token: IdentityToken, descriptor: ComponentDescriptor) -> None:
        previous = self._descriptors.get(token)
        if previous is not None and previous != descriptor:
            self.logger.warning(
                "Token %s re-attached as %s (was %s)", token, descriptor, previous
            )
        self._descriptors[token] = descriptor
        self.logger.debug("Attached %s -> %s", token, descriptor)

    def get(self, token: IdentityToken) -> Optional[ComponentDescriptor]:
        return self._descriptors.get(token)

    def delete(self, token: IdentityToken) -> Optional[ComponentDescriptor]:
        descriptor = self._descriptors.pop(token, None)
        if descriptor is not None:
            self.logger.debug("Detached %s (%s)", token, descriptor)
        return descriptor

    # ------------------------------------------------------------------
    # Actor handles

    def put_actor(self, token: IdentityToken, handle: "ActorHandle") -> None:
        self._actors[token] = handle

    def get_actor(self, token: IdentityToken) -> Optional["ActorHandle"]:
        return self._actors.get(token)

    def delete_actor(self, token: IdentityToken) -> Optional["ActorHandle"]:
        return self._actors.pop(token, None)

    # ------------------------------------------------------------------
    # Inspection

    def tokens(self) -> List[IdentityToken]:
        return list(self._descriptors)

    def actors(self) -> Dict[IdentityToken, "ActorHandle"]:
        return dict(self._actors)

    def clear(self) -> List["ActorHandle"]:
        """Drop every entry, returning the actor handles that were registered."""
        handles = list(self._actors.values())
        self._descriptors.clear()
        self._actors.clear()
        return handles

    def __contains__(self, token: object) -> bool:
        return token in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __repr__(self) -> str:
        return f"CorrelationRegistry(attached={len(self._descriptors)}, actors={len(self._actors)})"


__all__ = ["CorrelationRegistry"]
