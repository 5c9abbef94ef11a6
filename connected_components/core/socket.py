"""Per-instance component state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from .identity import IdentityToken

if TYPE_CHECKING:
    from .coordinator import Coordinator


class Socket:
    """State container handed to component callbacks.

    ``assigns`` holds component-visible state; ``myself`` is the instance's
    identity token (also available as ``assigns["myself"]``).
    """

    def __init__(self, coordinator: "Coordinator", myself: Optional[IdentityToken] = None):
        self.coordinator = coordinator
        self.myself = myself
        self.assigns: Dict[str, Any] = {}
        if myself is not None:
            self.assigns["myself"] = myself

    @property
    def id(self) -> Optional[str]:
        return self.assigns.get("id")

    def assign(self, mapping: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Socket":
        if mapping:
            self.assigns.update(mapping)
        self.assigns.update(kwargs)
        return self

    def update(self, key: str, fn: Callable[[Any], Any]) -> "Socket":
        """Replace ``assigns[key]`` with ``fn(assigns[key])``."""
        self.assigns[key] = fn(self.assigns[key])
        return self

    def __repr__(self) -> str:
        return f"Socket(myself={self.myself}, assigns={sorted(self.assigns)})"


__all__ = ["Socket"]
