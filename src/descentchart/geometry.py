"""Positioned text boxes, connector lines and text measurement."""

from __future__ import annotations

from dataclasses import dataclass, field

from descentchart.models import TextSection, TextStyle


# Base font size the width table was measured at
BASE_FONT_SIZE = 16

# Rough advance widths at 16px for ASCII. Real widths depend on the font;
# these are estimates and anything missing counts as the font size
# before scaling.
CHAR_WIDTHS = {
    " ": 5,
    "!": 6,
    '"': 7,
    "#": 13,
    "$": 10,
    "%": 15,
    "&": 14,
    "'": 4,
    "(": 6,
    ")": 6,
    "*": 8,
    "+": 13,
    ",": 5,
    "-": 5,
    ".": 5,
    "/": 5,
    "0": 10,
    "1": 10,
    "2": 10,
    "3": 10,
    "4": 10,
    "5": 10,
    "6": 10,
    "7": 10,
    "8": 10,
    "9": 10,
    ":": 5,
    ";": 5,
    "<": 13,
    "=": 13,
    ">": 13,
    "?": 9,
    "@": 16,
    "A": 12,
    "B": 12,
    "C": 12,
    "D": 13,
    "E": 12,
    "F": 11,
    "G": 13,
    "H": 14,
    "I": 6,
    "J": 6,
    "K": 12,
    "L": 11,
    "M": 16,
    "N": 14,
    "O": 13,
    "P": 11,
    "Q": 13,
    "R": 12,
    "S": 11,
    "T": 11,
    "U": 13,
    "V": 12,
    "W": 16,
    "X": 11,
    "Y": 12,
    "Z": 11,
    "[": 6,
    "\\": 5,
    "]": 6,
    "^": 13,
    "_": 8,
    "`": 8,
    "a": 10,
    "b": 10,
    "c": 9,
    "d": 10,
    "e": 9,
    "f": 6,
    "g": 10,
    "h": 10,
    "i": 5,
    "j": 5,
    "k": 10,
    "l": 5,
    "m": 16,
    "n": 10,
    "o": 10,
    "p": 10,
    "q": 10,
    "r": 8,
    "s": 8,
    "t": 6,
    "u": 10,
    "v": 9,
    "w": 14,
    "x": 9,
    "y": 9,
    "z": 8,
    "{": 10,
    "|": 5,
    "}": 10,
    "~": 13,
}


def text_width(text: str, font_size: int) -> int:
    """Estimate the rendered width of text at the given font size."""
    w = sum(CHAR_WIDTHS.get(ch, font_size) for ch in text)
    if font_size == BASE_FONT_SIZE:
        return w
    return int(w * font_size / BASE_FONT_SIZE + 0.5)


def wrap_text(texts: list[str], max_width: int, font_size: int) -> list[str]:
    """
    Greedily wrap each text so no line reaches max_width.

    Texts that already fit are kept as they are. A single word wider than
    max_width is emitted on its own line rather than split.
    """
    wrapped: list[str] = []
    for text in texts:
        if text_width(text, font_size) <= max_width:
            wrapped.append(text)
            continue

        words = text.split()
        if not words:
            wrapped.append("")
            continue

        line = ""
        for word in words:
            candidate = f"{line} {word}" if line else word
            if text_width(candidate, font_size) >= max_width:
                if not line:
                    wrapped.append(candidate)
                    line = ""
                else:
                    wrapped.append(line)
                    line = word
                continue
            line = candidate
        if line:
            wrapped.append(line)
    return wrapped


def title_dimensions(
    title: str, notes: list[str], title_style: TextStyle, note_style: TextStyle
) -> tuple[int, int]:
    """Return (height, width) of the title and notes block."""
    height = 0
    width = 0
    if title:
        height += title_style.line_height
        width = text_width(title, title_style.font_size)
    for note in notes:
        height += note_style.line_height
        width = max(width, text_width(note, note_style.font_size))
    return height, width


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass
class Connector:
    points: list[Point] = field(default_factory=list)


@dataclass(eq=False)
class Blurb:
    """
    A text box for a person or a relationship marker.

    Positive ids are people, negative ids are the marker keyed by the
    partner's id. Horizontal position is either absolute (left_pos) or
    relative to the left neighbour (left_pad + left_shift), chosen by
    absolute_positioning. Width and height are fixed at creation.
    """

    id: int
    heading: TextSection
    detail: TextSection
    width: int = 0
    height: int = 0
    row: int = 0
    col: int = 0
    top_pos: int = 0
    left_pos: int = 0
    left_pad: int = 0
    left_shift: int = 0
    top_hook_offset: int = 0  # where a dropped line meets the top edge, from the left
    centre_text: bool = False
    no_shift: bool = False
    absolute_positioning: bool = False

    left_neighbour: Blurb | None = None
    parent: Blurb | None = None
    anchor: Blurb | None = None  # blurb in the row above owning this subtree
    first_child: Blurb | None = None
    last_child: Blurb | None = None
    left_stop: Blurb | None = None
    right_stop: Blurb | None = None

    keep_with: list[Blurb] = field(default_factory=list)
    keep_right_of: list[Blurb] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Blurb(id={self.id}, row={self.row}, col={self.col})"

    def x(self) -> int:
        """Horizontal centre."""
        if self.absolute_positioning:
            return self.left_pos + self.width // 2

        # walk left to the start of the relative run, then resolve rightwards
        chain = []
        b = self
        while b is not None and not b.absolute_positioning:
            chain.append(b)
            b = b.left_neighbour
        right = b.right() if b is not None else 0
        for b in reversed(chain):
            x = right + b.left_pad + b.left_shift + b.width // 2
            right = x + b.width // 2
        return x

    def y(self) -> int:
        """Vertical centre."""
        return self.top_pos + self.height // 2

    def left(self) -> int:
        if self.absolute_positioning:
            return self.left_pos
        return self.x() - self.width // 2

    def right(self) -> int:
        if self.absolute_positioning:
            return self.left_pos + self.width
        return self.x() + self.width // 2

    def bottom(self) -> int:
        return self.top_pos + self.height

    def top_hook_x(self) -> int:
        return self.left() + self.top_hook_offset

    def keep_with_each_other(self, other: Blurb):
        self.keep_with.append(other)
        other.keep_with.append(self)
