"""Renderer and popup collaborator interfaces, plus an in-memory primitive tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Protocol

from tui_gantt.bar import Rect
from tui_gantt.models import Task


@dataclass(eq=False)
class Primitive:
    """A visual element handle: kind (rect, text, path, ...) plus attributes."""

    kind: str
    attrs: dict[str, Any] = field(default_factory=dict)
    parent: Primitive | None = field(default=None, repr=False)
    children: list[Primitive] = field(default_factory=list, repr=False)

    def _num(self, name: str) -> float:
        try:
            return float(self.attrs.get(name, 0) or 0)
        except (TypeError, ValueError):
            return 0.0

    @property
    def x(self) -> float:
        return self._num("x")

    @property
    def y(self) -> float:
        return self._num("y")

    @property
    def width(self) -> float:
        return self._num("width")

    @property
    def height(self) -> float:
        return self._num("height")

    @property
    def end_x(self) -> float:
        return self.x + self.width

    @property
    def classes(self) -> list[str]:
        return str(self.attrs.get("class", "")).split()

    def set(self, **attrs: Any) -> None:
        self.attrs.update(attrs)

    def walk(self) -> Iterator[Primitive]:
        yield self
        for child in self.children:
            yield from child.walk()


class Renderer(Protocol):
    def create(self, kind: str, attributes: dict[str, Any], parent: Primitive | None = None) -> Primitive:
        ...

    def animate(self, primitive: Primitive, attribute: str, start: float, end: float) -> None:
        ...

    def clear(self) -> None:
        ...


class Popup(Protocol):
    def show(self, target: Rect, title: str, subtitle: str | None, task: Task) -> None:
        ...

    def hide(self) -> None:
        ...


class PrimitiveTree:
    """Renderer that keeps primitives in memory; animations jump to their end value."""

    def __init__(self) -> None:
        self.roots: list[Primitive] = []
        self.animations: list[tuple[Primitive, str, float, float]] = []

    def create(self, kind: str, attributes: dict[str, Any], parent: Primitive | None = None) -> Primitive:
        primitive = Primitive(kind, dict(attributes), parent)
        if parent is None:
            self.roots.append(primitive)
        else:
            parent.children.append(primitive)
        return primitive

    def animate(self, primitive: Primitive, attribute: str, start: float, end: float) -> None:
        self.animations.append((primitive, attribute, start, end))
        primitive.attrs[attribute] = end

    def clear(self) -> None:
        self.roots.clear()
        self.animations.clear()

    def walk(self) -> Iterator[Primitive]:
        for root in self.roots:
            yield from root.walk()

    def find_all(self, css_class: str) -> list[Primitive]:
        return [p for p in self.walk() if css_class in p.classes]

    def find_bar_group(self, task_id: str) -> Primitive | None:
        for p in self.find_all("bar-wrapper"):
            if p.attrs.get("data-id") == task_id:
                return p
        return None
