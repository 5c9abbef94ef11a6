"""Lightweight render tree produced by coordinators and components.

Nothing here produces markup. The coordinator only needs to find the
component declarations inside a tree and the on-remove bindings carried by
a component's root element.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

from .identity import IdentityToken

ON_REMOVE_ATTR = "on_remove"


@dataclass(frozen=True)
class RemoveBinding:
    """Push ``event`` targeted at ``target`` when the element is removed."""
    event: str
    target: IdentityToken


@dataclass
class LiveComponent:
    """Declaration of a stateful component instance inside a render tree."""
    component_type: type
    id: str
    assigns: Dict[str, Any] = field(default_factory=dict)


Node = Union["Element", LiveComponent, str]


@dataclass
class Element:
    tag: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    children: List[Node] = field(default_factory=list)

    def on_remove_bindings(self) -> List[RemoveBinding]:
        value = self.attrs.get(ON_REMOVE_ATTR)
        if value is None:
            return []
        if isinstance(value, RemoveBinding):
            return [value]
        return [binding for binding in value if isinstance(binding, RemoveBinding)]

    def iter_live_components(self) -> Iterator[LiveComponent]:
        """Yield component declarations in document order.

        Does not descend into a declared component; its subtree is whatever
        that component renders.
        """
        for child in self.children:
            if isinstance(child, LiveComponent):
                yield child
            elif isinstance(child, Element):
                yield from child.iter_live_components()

    def text(self) -> str:
        parts = []
        for child in self.children:
            if isinstance(child, str):
                parts.append(child)
            elif isinstance(child, Element):
                parts.append(child.text())
        return "".join(parts)


def h(tag: str, attrs: Optional[Dict[str, Any]] = None, *children: Node) -> Element:
    """Shorthand element constructor: ``h("div", {"class": "card"}, "text")``."""
    return Element(tag, dict(attrs or {}), list(children))


def live_component(component_type: type, id: str, **assigns: Any) -> LiveComponent:
    return LiveComponent(component_type, id, assigns)


__all__ = [
    "ON_REMOVE_ATTR",
    "RemoveBinding",
    "LiveComponent",
    "Element",
    "Node",
    "h",
    "live_component",
]
