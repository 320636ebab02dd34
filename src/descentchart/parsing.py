"""Descendant list parsing."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from pathlib import Path
import re

from descentchart.models import Chart, Family, Person


logger = logging.getLogger(__name__)

# indent, then a generation number or a spouse marker, an optional dot, then text
LINE_RE = re.compile(r"^(\s*)(\d+|sp|\+)\.?\s*(.+)$")

SPOUSE_MARKERS = ("sp", "+")

# Event abbreviations that end the name part of an entry
EVENT_TOKENS = ("b.", "m.", "d.", "b:", "m:", "d:")

# Semicolons separate detail lines unless escaped with a backslash
DETAIL_SEPARATOR_RE = re.compile(r"(?<!\\);")


class StructuralParseError(ValueError):
    """A descendant list whose structure cannot be turned into a chart."""

    def __init__(self, lineno: int, cause: str):
        super().__init__(f"line {lineno}: {cause}")
        self.lineno = lineno
        self.cause = cause


@dataclass
class _Entry:
    lineno: int
    indent: int
    generation: int  # 0 for spouse entries
    is_spouse: bool
    text: str


def split_name(text: str) -> tuple[str, str]:
    """
    Split entry text into (name, detail) at the first detail delimiter.

    The delimiter is an opening parenthesis or a whitespace separated token
    starting with one of the event abbreviations, whichever comes first:
    - "A. Brown (1819-1901)"            -> ("A. Brown", "(1819-1901)")
    - "A. Brown(b. 1819)"               -> ("A. Brown", "(b. 1819)")
    - "Henry Johnson  b: Abt. 1806"     -> ("Henry Johnson", "b: Abt. 1806")
    - "b. 24 May 1819"                  -> ("", "b. 24 May 1819")
    """
    cut = text.find("(")
    if cut == -1:
        cut = len(text)

    for match in re.finditer(r"\S+", text):
        if match.start() >= cut:
            break
        if match.group().startswith(EVENT_TOKENS):
            cut = match.start()
            break

    return text[:cut].strip(), text[cut:].strip()


def matching_paren(text: str) -> int | None:
    """Index of the parenthesis closing the one at text[0], or None if unbalanced."""
    depth = 0
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
    return None


def split_detail_lines(detail: str) -> list[str]:
    """Split detail text into trimmed lines on unescaped semicolons."""
    lines = []
    for part in DETAIL_SEPARATOR_RE.split(detail):
        part = part.replace(r"\;", ";").strip()
        if part:
            lines.append(part)
    return lines


def parse_details(text: str) -> list[str]:
    """
    Turn the text of one entry into its detail lines, name first.

    Handles forms like:
    - "A. Brown (1819-1901; carpenter)"      -> ["A. Brown", "1819-1901", "carpenter"]
    - "A. Brown (1819-1901 (carpenter))"     -> ["A. Brown", "1819-1901 (carpenter)"]
    - "A. Brown (1819-1901 (carpenter)"      -> ["A. Brown", "(1819-1901 (carpenter)"]
    - "A. Brown b. 1819; d. 1901"            -> ["A. Brown", "b. 1819", "d. 1901"]
    - "(b. 24 May 1819)"                     -> ["b. 24 May 1819"]

    Text after a balanced parenthesised detail is dropped. An unbalanced
    parenthesis is kept verbatim along with everything after it.
    """
    name, detail = split_name(text.strip())

    if detail.startswith("("):
        close = matching_paren(detail)
        if close is not None:
            detail = detail[1:close]

    lines = split_detail_lines(detail)
    name = name.replace(r"\;", ";")
    if name:
        return [name, *lines]
    return lines


def _read_entries(lines: Iterable[str]) -> list[_Entry]:
    """Group raw lines into entries, joining continuation lines."""
    entries: list[_Entry] = []
    current: _Entry | None = None

    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip()
        if not line:
            continue

        match = LINE_RE.match(line)
        if match is None:
            if current is None:
                raise StructuralParseError(lineno, "malformed entry")
            current.text += " " + line.strip()
            continue

        indent, prefix, text = match.groups()
        if prefix in SPOUSE_MARKERS:
            generation = 0
            is_spouse = True
        else:
            generation = int(prefix)
            is_spouse = False
            if generation < 1:
                raise StructuralParseError(
                    lineno, f"malformed generation number {prefix!r}"
                )

        current = _Entry(
            lineno=lineno,
            indent=len(indent),
            generation=generation,
            is_spouse=is_spouse,
            text=text.strip(),
        )
        entries.append(current)

    return entries


def parse_lines(lines: Iterable[str], title: str = "", notes: Iterable[str] = ()) -> Chart:
    """
    Parse a descendant list into a chart.

    Each entry starts with a generation number (1 for the root ancestor, 2
    for their children and so on) or a spouse marker ("sp" or "+"), followed
    by the person's name and details. A spouse belongs to the nearest open
    person with equal or lesser indentation and starts a new family for
    them; numbered children join the last family of their parent. Lines
    without a prefix continue the previous entry.

    Ids are assigned 1, 2, 3... in the order entries are read.
    """
    chart = Chart(title=title, notes=list(notes))
    entries = _read_entries(lines)

    # open entries, one per active generation
    stack: list[tuple[_Entry, Person]] = []

    for n, e in enumerate(entries, start=1):
        person = Person(id=n, details=parse_details(e.text))

        if not stack:
            if e.is_spouse:
                raise StructuralParseError(e.lineno, "spouse encountered before first person")
            if e.generation != 1:
                raise StructuralParseError(
                    e.lineno, "first person must have generation number 1"
                )
            chart.root = person
            stack.append((e, person))
            continue

        if e.is_spouse:
            while stack[-1][0].indent > e.indent:
                stack.pop()
                if not stack:
                    raise StructuralParseError(e.lineno, "no person at this indent for spouse")
            stack[-1][1].families.append(Family(other=person))
            continue

        while stack[-1][0].generation >= e.generation:
            stack.pop()
            if not stack:
                raise StructuralParseError(e.lineno, "invalid person generation number")

        top, parent = stack[-1]
        if e.generation != top.generation + 1:
            raise StructuralParseError(
                e.lineno,
                f"expected generation {top.generation + 1}, got {e.generation}",
            )

        if not parent.families:
            parent.families.append(Family())
        parent.families[-1].children.append(person)
        stack.append((e, person))

    logger.info("Parsed %d persons", len(entries))
    return chart


def parse_chart(source: str | Iterable[str], title: str = "", notes: Iterable[str] = ()) -> Chart:
    """Parse a descendant list given as one string or as an iterable of lines."""
    if isinstance(source, str):
        source = source.splitlines()
    return parse_lines(source, title=title, notes=notes)


def parse_file(filepath: Path, title: str = "", notes: Iterable[str] = ()) -> Chart:
    """Parse a UTF-8 descendant list file."""
    with open(filepath, encoding="utf-8") as f:
        return parse_lines(f, title=title, notes=notes)
