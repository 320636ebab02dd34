"""Arrangement strategies that position the blurbs of a descendant layout."""

from __future__ import annotations

from collections import Counter
import logging
import math
import random
from typing import TYPE_CHECKING

import networkx as nx

from descentchart.geometry import Blurb, Connector, Point, title_dimensions
from descentchart.graph import build_constraint_graph

if TYPE_CHECKING:
    from descentchart.layout import DescendantLayout


logger = logging.getLogger(__name__)

# Number of perturbations tried before a stuck blurb is skipped for an iteration
MAX_PROPOSALS = 100

# Weight of a KeepRightOf violation relative to a KeepWith distance
KEEP_RIGHT_OF_WEIGHT = 10

# Passes of the rough parent-over-children alignment before annealing
ALIGN_PASSES = 3


class Arranger:
    """Positions every blurb of a layout and builds its connectors."""

    def arrange(self, lay: DescendantLayout):
        raise NotImplementedError


def family_gap(b: Blurb, prev: Blurb, hspace: int) -> int:
    """Horizontal gap before b, wider between blurbs with different parents."""
    if b.parent is not prev.parent:
        # extra space between families
        return hspace * 3
    return hspace


def place_rows(lay: DescendantLayout, absolute: bool):
    """Stack rows top to bottom and link each blurb to its left neighbour."""
    top = 0
    for bs in lay.rows:
        row_height = 0
        for i, b in enumerate(bs):
            b.absolute_positioning = absolute
            b.top_pos = top
            if i > 0:
                b.left_neighbour = bs[i - 1]
            row_height = max(row_height, b.height)
        top += row_height + lay.options.generation_drop


def centre_blurbs(lay: DescendantLayout):
    """Translate all blurbs so the drawing, with margin and title block, starts at (0, 0)."""
    opts = lay.options
    blurbs = lay.blurbs

    if lay.debug:
        for b in blurbs:
            logger.debug(
                "blurb %d position l=%d r=%d t=%d b=%d",
                b.id,
                b.left(),
                b.right(),
                b.top_pos,
                b.bottom(),
            )

    min_x = min(b.left() for b in blurbs) - opts.margin
    max_x = max(b.right() for b in blurbs) + opts.margin
    min_y = min(b.top_pos for b in blurbs) - opts.margin
    max_y = max(b.bottom() for b in blurbs) + opts.margin

    title_height, title_width = title_dimensions(
        lay.title.text, [n.text for n in lay.notes], opts.title_style, opts.note_style
    )
    min_y -= title_height

    for b in blurbs:
        if b.absolute_positioning:
            b.left_pos -= min_x
        elif b.left_neighbour is None:
            b.left_pad -= min_x
        b.top_pos -= min_y

    lay.width = max(max_x - min_x, title_width + 2 * opts.margin)
    lay.height = max_y - min_y


def build_connectors(lay: DescendantLayout):
    """Join every child to its parent, top-down."""
    opts = lay.options
    children = Counter(b.parent.id for b in lay.blurbs if b.parent is not None)

    lay.connectors = []
    for b in lay.blurbs:
        parent = b.parent
        if parent is None:
            continue

        hook_x = b.top_hook_x()
        start_y = b.top_pos - opts.line_gap
        end_y = parent.bottom() + opts.line_gap

        if children[parent.id] == 1 and parent.left() <= hook_x <= parent.right():
            # only child hanging straight below its parent
            points = [Point(hook_x, start_y), Point(hook_x, end_y)]
        else:
            drop_y = start_y - opts.child_drop
            points = [
                # start just above blurb
                Point(hook_x, start_y),
                # move up by child drop
                Point(hook_x, drop_y),
                # move horizontally to centre of parent
                Point(parent.x(), drop_y),
                # move up to parent
                Point(parent.x(), end_y),
            ]
        lay.connectors.append(Connector(points=points))


class SpreadingArranger(Arranger):
    """
    Deterministic arrangement.

    The deepest row is spread evenly, then each row above is placed with
    parents centred over their children, pushing subtrees right where a
    parent would otherwise overlap its left neighbour.
    """

    def arrange(self, lay: DescendantLayout):
        place_rows(lay, absolute=True)
        hspace = lay.options.hspace

        # spread blurbs in last row evenly
        left = 0
        bs = lay.rows[-1]
        for i, b in enumerate(bs):
            if i > 0:
                left += family_gap(b, bs[i - 1], hspace)
            b.left_pos = left
            left += b.width

        # work up from bottom row spreading out blurbs so subtrees don't overlap
        for row in range(len(lay.rows) - 2, -1, -1):
            bs = lay.rows[row]
            min_left = 0
            for i, b in enumerate(bs):
                if i > 0:
                    min_left += family_gap(b, bs[i - 1], hspace)
                if b.first_child is not None:
                    span = b.last_child.right() - b.first_child.left()
                    x = b.first_child.left() + span // 2 - b.width // 2
                    if x < min_left:
                        self.shift_subtrees(lay, row + 1, b.first_child.col, min_left - x)
                    else:
                        min_left = x
                b.left_pos = min_left
                min_left += b.width

        self.close_gaps(lay)
        centre_blurbs(lay)
        build_connectors(lay)

    def shift_subtrees(self, lay: DescendantLayout, row: int, start: int, shift: int):
        """Shift blurbs of a row from index start onward, and everything below them."""
        moving = set(lay.rows[row][start:])
        while moving:
            for b in moving:
                b.left_pos += shift
            row += 1
            if row >= len(lay.rows):
                break
            moving = {b for b in lay.rows[row] if b.anchor in moving}

    def close_gaps(self, lay: DescendantLayout):
        """Pull childless siblings rightward towards the next sibling."""
        hspace = lay.options.hspace
        for bs in lay.rows:
            for i in range(len(bs) - 1, 0, -1):
                prev, b = bs[i - 1], bs[i]
                if (
                    prev.first_child is None
                    and b.parent is not None
                    and b.parent is prev.parent
                    and b.left() - prev.right() > hspace
                ):
                    prev.left_pos = b.left() - hspace - prev.width


class AnnealingArranger(Arranger):
    """
    Stochastic arrangement by simulated annealing.

    Blurbs are positioned relative to their left neighbour and each carries
    a shift that is randomly perturbed. Changes that lower the fitness are
    kept; worse ones are kept with a probability that falls as the
    temperature drops.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng if rng is not None else random.Random()

    def arrange(self, lay: DescendantLayout):
        self.align(lay)
        self.reflow(lay)
        centre_blurbs(lay)
        build_connectors(lay)

    def align(self, lay: DescendantLayout):
        """Initial relative placement with parents roughly over their children."""
        place_rows(lay, absolute=False)
        hspace = lay.options.hspace

        for bs in lay.rows:
            for i, b in enumerate(bs):
                b.left_shift = 0
                b.left_pad = 0
                if i == 0:
                    continue
                prev = bs[i - 1]
                b.left_pad = hspace
                # add a little more padding if neighbours have parents that are different
                if b.id > 0 and (b.parent is not None or prev.parent is not None) and b.parent is not prev.parent:
                    b.left_pad += hspace * 2
                    if prev.parent is not None:
                        b.keep_right_of.append(prev.parent)

        for _ in range(ALIGN_PASSES):
            for bs in reversed(lay.rows):
                for b in bs:
                    if not b.no_shift and b.left_stop is not None and b.left_stop.x() > b.x():
                        b.left_shift += b.left_stop.x() - b.x()
                    if b.right_stop is not None and b.x() > b.right_stop.x():
                        b.right_stop.left_shift += b.x() - b.right_stop.x()

    def propose(self, b: Blurb, hspace: int) -> int | None:
        """Pick a shift for b that respects its stops, or None if none was found."""
        x = b.x()
        for _ in range(MAX_PROPOSALS):
            delta = int((0.5 - self.rng.random() * self.rng.random()) * hspace)
            if delta == 0 or b.left_shift + delta < 0:
                continue
            if b.left_stop is not None:
                stop = b.left_stop.x()
                if x > stop and x + delta < stop:
                    continue
            if b.right_stop is not None:
                stop = b.right_stop.x()
                if x < stop and x + delta > stop:
                    continue
            return delta
        return None

    def reflow(self, lay: DescendantLayout):
        """
        Optimise blurb shifts for the configured number of iterations.

        A move is undone outright if it puts any blurb on the wrong side of
        a left or right stop it was respecting before the move. Shifting one
        blurb also carries its right neighbours, so this is checked across
        the whole layout rather than for the moved blurb alone.
        """
        iterations = lay.options.iterations
        shiftable = [b for b in lay.blurbs if not b.no_shift]
        if iterations <= 0 or not shiftable:
            return

        graph = build_constraint_graph(lay.blurbs)
        temp = float(iterations) * 10
        spans = row_spans(lay)
        current = self.fitness(lay, graph, spans)
        violations = stop_violations(lay.blurbs, spans)
        accepted = 0

        for i in range(iterations):
            b = self.rng.choice(shiftable)
            delta = self.propose(b, lay.options.hspace)
            if delta is None:
                continue

            saved = b.left_shift
            b.left_shift += delta
            spans = row_spans(lay)
            moved_violations = stop_violations(lay.blurbs, spans)
            if not moved_violations <= violations:
                b.left_shift = saved
                continue
            after = self.fitness(lay, graph, spans)

            # keep this change if the new fitness is lower
            diff = after - current
            if diff <= 0:
                current = after
                violations = moved_violations
                accepted += 1
                continue

            # otherwise there is an ever decreasing chance of keeping a worse fitness
            t = temp / (i + 1)
            if self.rng.random() <= math.exp(-diff / t):
                current = after
                violations = moved_violations
                accepted += 1
            else:
                b.left_shift = saved

        logger.info("Annealing accepted %d of %d moves, fitness %d", accepted, iterations, current)

    def fitness(
        self,
        lay: DescendantLayout,
        graph: nx.MultiDiGraph | None = None,
        spans: dict[int, tuple[int, int, int]] | None = None,
    ) -> int:
        """Total constraint cost of the current positions, lower is better."""
        if graph is None:
            graph = build_constraint_graph(lay.blurbs)
        if spans is None:
            spans = row_spans(lay)

        total = 0
        for u, v, kind in graph.edges(data="kind"):
            if kind == "keep_with":
                total += (spans[u][1] - spans[v][1]) ** 2
            else:
                # u should sit entirely right of v
                overlap = spans[v][2] - spans[u][0]
                if overlap > 0:
                    total += KEEP_RIGHT_OF_WEIGHT * overlap**2
        return total


def row_spans(lay: DescendantLayout) -> dict[int, tuple[int, int, int]]:
    """(left, centre, right) of every blurb, computed one row at a time."""
    spans = {}
    for bs in lay.rows:
        prev_right = 0
        for b in bs:
            half = b.width // 2
            if b.absolute_positioning:
                left, x, right = b.left_pos, b.left_pos + half, b.left_pos + b.width
            else:
                base = prev_right if b.left_neighbour is not None else 0
                x = base + b.left_pad + b.left_shift + half
                left, right = x - half, x + half
            spans[b.id] = (left, x, right)
            prev_right = right
    return spans


def stop_violations(
    blurbs: list[Blurb], spans: dict[int, tuple[int, int, int]]
) -> set[tuple[int, str]]:
    """(id, "left" or "right") for every blurb whose centre is past one of its stops."""
    found = set()
    for b in blurbs:
        x = spans[b.id][1]
        if b.left_stop is not None and x < spans[b.left_stop.id][1]:
            found.add((b.id, "left"))
        if b.right_stop is not None and x > spans[b.right_stop.id][1]:
            found.add((b.id, "right"))
    return found
