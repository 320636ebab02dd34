"""Data classes for descendant chart entities."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Person:
    id: int
    headings: list[str] = field(default_factory=list)
    details: list[str] = field(default_factory=list)
    families: list[Family] = field(default_factory=list)


@dataclass
class Family:
    other: Person | None = None  # partner, None when unstated
    details: list[str] = field(default_factory=list)  # e.g. marriage date and place
    children: list[Person] = field(default_factory=list)


@dataclass
class Chart:
    root: Person | None = None
    title: str = ""
    notes: list[str] = field(default_factory=list)

    def persons(self):
        """Yield every person once, in creation (pre-order) order, partners included."""
        if self.root is None:
            return
        seen = set()
        stack = [self.root]
        while stack:
            p = stack.pop()
            if id(p) in seen:
                continue
            seen.add(id(p))
            yield p
            pending = []
            for fam in p.families:
                if fam.other is not None:
                    pending.append(fam.other)
                pending.extend(fam.children)
            stack.extend(reversed(pending))

    def depth(self) -> int:
        """Number of generations below and including the root."""

        def walk(p: Person, d: int) -> int:
            deepest = d
            for fam in p.families:
                if fam.other is not None:
                    deepest = max(deepest, walk(fam.other, d))
                for c in fam.children:
                    deepest = max(deepest, walk(c, d + 1))
            return deepest

        if self.root is None:
            return 0
        return walk(self.root, 1)


@dataclass
class TextStyle:
    font_size: int
    line_height: int
    color: str = "#000000"


@dataclass
class TextElement:
    text: str
    style: TextStyle


@dataclass
class TextSection:
    lines: list[str] = field(default_factory=list)
    style: TextStyle | None = None
