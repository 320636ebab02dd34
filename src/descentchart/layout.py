"""Descendant chart layout: rows of blurbs and their placement constraints."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
import logging
import random

from descentchart.arrange import AnnealingArranger, Arranger, SpreadingArranger
from descentchart.geometry import Blurb, Connector, text_width, wrap_text
from descentchart.models import Chart, Person, TextElement, TextSection, TextStyle


logger = logging.getLogger(__name__)

ARRANGERS = ("spreading", "annealing")


class LayoutPreconditionError(ValueError):
    """The chart or options cannot be laid out."""


@dataclass
class LayoutOptions:
    debug: bool = False  # log every blurb position while arranging
    iterations: int = 30000  # annealing steps, ignored by the spreading arranger
    arranger: str = "spreading"
    seed: int | None = None
    keep_with_grandparent: bool = False

    hspace: int = 16  # horizontal space between blurbs of one family
    line_width: int = 2
    margin: int = 16
    family_drop: int = 48  # parent to the line joining the children
    child_drop: int = 16  # joining line down to each child
    line_gap: int = 8  # between a connecting line and any text

    title_style: TextStyle = field(default_factory=lambda: TextStyle(40, 42))
    note_style: TextStyle = field(default_factory=lambda: TextStyle(20, 22))
    heading_style: TextStyle = field(default_factory=lambda: TextStyle(20, 22))
    detail_style: TextStyle = field(default_factory=lambda: TextStyle(16, 18))

    detail_wrap_width: int = 18 * 16

    @property
    def generation_drop(self) -> int:
        """Vertical distance between the bottom of one row and the top of the next."""
        return self.line_width + 2 * self.line_gap + self.child_drop + self.family_drop

    @classmethod
    def from_dict(cls, data: dict) -> LayoutOptions:
        """Build options from a mapping such as a parsed JSON options file."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown layout options: {', '.join(sorted(unknown))}")

        opts = cls()
        for key, value in data.items():
            if key.endswith("_style"):
                style = getattr(opts, key)
                value = TextStyle(
                    font_size=value.get("font_size", style.font_size),
                    line_height=value.get("line_height", style.line_height),
                    color=value.get("color", style.color),
                )
            setattr(opts, key, value)
        return opts


class DescendantLayout:
    """
    Geometry for a descendant chart.

    Blurbs are kept by signed id and by row. All back-references between
    blurbs point inside this layout, so every call to layout_chart gets a
    fresh, independent set.
    """

    def __init__(self, title: str, notes: list[str], options: LayoutOptions):
        self.options = options
        self.width = 0
        self.height = 0
        self.arena: dict[int, Blurb] = {}
        self.rows: list[list[Blurb]] = []
        self.connectors: list[Connector] = []
        self._title = title
        self._notes = list(notes)

    @property
    def margin(self) -> int:
        return self.options.margin

    @property
    def debug(self) -> bool:
        return self.options.debug

    @property
    def title(self) -> TextElement:
        return TextElement(text=self._title, style=self.options.title_style)

    @property
    def notes(self) -> list[TextElement]:
        return [TextElement(text=n, style=self.options.note_style) for n in self._notes]

    @property
    def blurbs(self) -> list[Blurb]:
        """All blurbs, row by row from the top."""
        return [b for bs in self.rows for b in bs]

    def add_person(
        self,
        p: Person,
        row: int,
        parent: Blurb | None = None,
        anchor: Blurb | None = None,
    ) -> Blurb:
        """Add a person, their partners and all their descendants, returning the person's blurb."""
        b = self.new_blurb(p.id, p.headings, p.details, row, parent, anchor)

        prev_rightmost = None  # rightmost blurb of the previous family with children
        prev_last_child = None

        for fi, fam in enumerate(p.families, start=1):
            label = f"= ({fi})" if len(p.families) > 1 else "="

            rel = sp = None
            if fam.other is not None:
                rel = self.new_blurb(-fam.other.id, [], [label, *fam.details], row, None, b.anchor)
                rel.centre_text = True
                b.keep_with_each_other(rel)

                sp = self.add_person(fam.other, row, None, b.anchor)
                sp.no_shift = True
                sp.keep_with_each_other(rel)
                centre, rightmost = rel, sp
            else:
                centre, rightmost = b, b

            if fam.children and prev_last_child is not None:
                # keeps descent lines of successive families from crossing
                centre.keep_right_of.append(prev_last_child)

            prev_child = None
            for ci, child in enumerate(fam.children):
                c = self.add_person(child, row + 1, centre, centre)
                if b.first_child is None:
                    b.first_child = c
                b.last_child = c

                c.keep_with_each_other(centre)
                if rel is not None and ci == 0 and len(fam.children) > 1:
                    rel.keep_right_of.append(c)
                if prev_child is not None:
                    c.keep_with.append(prev_child)
                prev_child = c

                if self.options.keep_with_grandparent and parent is not None:
                    c.keep_with_each_other(parent)

                if b.left_stop is None:
                    b.left_stop = c
                b.right_stop = c
                if sp is not None and sp.left_stop is None:
                    sp.left_stop = c
                if rel is not None and rel.left_stop is None:
                    rel.left_stop = c

                if prev_rightmost is not None:
                    c.keep_right_of.append(prev_rightmost)

            if fam.children:
                prev_last_child = prev_child
                prev_rightmost = rightmost

        return b

    def new_blurb(
        self,
        id: int,
        headings: list[str],
        texts: list[str],
        row: int,
        parent: Blurb | None,
        anchor: Blurb | None,
    ) -> Blurb:
        """Create a sized blurb and append it to its row."""
        if id in self.arena:
            raise LayoutPreconditionError(f"Duplicate blurb id {id}; person ids must be unique")

        opts = self.options
        texts = wrap_text(texts, opts.detail_wrap_width, opts.detail_style.font_size)
        if headings:
            heading_lines = list(headings)
        else:
            heading_lines = texts[:1] or [""]
            texts = texts[1:]

        b = Blurb(
            id=id,
            heading=TextSection(lines=heading_lines, style=opts.heading_style),
            detail=TextSection(lines=texts, style=opts.detail_style),
            row=row,
            parent=parent,
            anchor=anchor,
            top_hook_offset=opts.hspace * 2,
        )
        b.height = (
            opts.heading_style.line_height * len(heading_lines)
            + opts.detail_style.line_height * len(texts)
        )
        b.width = max(
            [text_width(line, opts.heading_style.font_size) for line in heading_lines]
            + [text_width(line, opts.detail_style.font_size) for line in texts]
        )

        while len(self.rows) <= row:
            self.rows.append([])
        b.col = len(self.rows[row])
        self.rows[row].append(b)
        self.arena[id] = b
        return b

    def to_dict(self) -> dict:
        """Plain data view of the geometry, suitable for JSON."""
        return {
            "width": self.width,
            "height": self.height,
            "margin": self.margin,
            "title": asdict(self.title),
            "notes": [asdict(n) for n in self.notes],
            "blurbs": [
                {
                    "id": b.id,
                    "row": b.row,
                    "left": b.left(),
                    "top": b.top_pos,
                    "width": b.width,
                    "height": b.height,
                    "centre_text": b.centre_text,
                    "heading": asdict(b.heading),
                    "detail": asdict(b.detail),
                }
                for b in self.blurbs
            ],
            "connectors": [
                {"points": [[p.x, p.y] for p in c.points]} for c in self.connectors
            ],
        }


def get_arranger(options: LayoutOptions) -> Arranger:
    """Return the arrangement strategy named by the options."""
    if options.arranger == "spreading":
        return SpreadingArranger()
    if options.arranger == "annealing":
        return AnnealingArranger(random.Random(options.seed))
    raise LayoutPreconditionError(
        f"Unknown arranger {options.arranger!r}, expected one of {', '.join(ARRANGERS)}"
    )


def layout_chart(chart: Chart, options: LayoutOptions | None = None) -> DescendantLayout:
    """Lay out a descendant chart, root at the top and one row per generation."""
    if chart.root is None:
        raise LayoutPreconditionError("Chart has no root person")
    if options is None:
        options = LayoutOptions()

    arranger = get_arranger(options)

    lay = DescendantLayout(chart.title, chart.notes, options)
    lay.add_person(chart.root, 0)
    arranger.arrange(lay)

    logger.info(
        "Laid out %d blurbs in %d rows (%dx%d) using %s arranger",
        len(lay.arena),
        len(lay.rows),
        lay.width,
        lay.height,
        options.arranger,
    )
    return lay
