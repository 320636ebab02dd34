"""Visualization functions for descendant charts and layouts."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
import pydot

from descentchart.graph import build_union_layout_graph
from descentchart.models import Chart


def chart_to_dot(chart: Chart) -> pydot.Dot:
    """
    Convert a chart to a Graphviz graph using the union-node model.

    - Ancestors appear above descendants
    - Partners are aligned on the same rank as the person they married
    - Children hang from their family's union node
    """
    H = build_union_layout_graph(chart)

    # Create pydot graph with hierarchical settings
    P = pydot.Dot(graph_type="digraph")
    P.set("rankdir", "TB")  # Top-to-bottom (ancestors at top)
    P.set("splines", "ortho")  # Orthogonal edges for cleaner tree look
    P.set("nodesep", "0.4")  # Horizontal spacing between nodes
    P.set("ranksep", "0.6")  # Vertical spacing between ranks

    # Track spouse pairs with their family nodes for rank=same subgraphs
    spouse_pairs: list[tuple] = []

    for node, data in H.nodes(data=True):
        if data.get("node_type") == "family":
            # Family nodes are small points
            P.add_node(
                pydot.Node(
                    str(node),
                    shape="point",
                    width="0.1",
                    height="0.1",
                    label="",
                )
            )
            spouses = data.get("spouses", ())
            if len(spouses) == 2:
                spouse_pairs.append((spouses[0], spouses[1], node))
        else:
            label = "\\n".join(data.get("details") or [data.get("person_name", "")])
            P.add_node(
                pydot.Node(
                    str(node),
                    label=f'"{_escape(label)}"',
                    shape="box",
                    style="rounded",
                    fontsize="10",
                )
            )

    for u, v, data in H.edges(data=True):
        if data.get("edge_type") == "spouse_to_family":
            # Spouse to family node: no arrow
            P.add_edge(pydot.Edge(str(u), str(v), dir="none", color="darkgray"))
        else:
            # Family node to child: arrow pointing down
            P.add_edge(pydot.Edge(str(u), str(v), color="darkgray"))

    # Add rank=same subgraphs to align spouse pairs and family nodes horizontally
    for i, (a, b, fam) in enumerate(spouse_pairs):
        sg = pydot.Subgraph(f"couple_{i}", rank="same")
        sg.add_node(pydot.Node(str(a)))
        sg.add_node(pydot.Node(str(fam)))
        sg.add_node(pydot.Node(str(b)))
        P.add_subgraph(sg)

    return P


def _escape(label: str) -> str:
    return label.replace('"', '\\"')


def write_dot(chart: Chart, output_path: Path):
    """
    Write the chart's Graphviz graph.

    A .dot or .gv path gets the DOT source; png, svg and pdf are rendered
    by Graphviz, which must be installed for those formats.
    """
    P = chart_to_dot(chart)
    ext = output_path.suffix.lower().lstrip(".")
    if ext in ("png", "svg", "pdf"):
        P.write(str(output_path), format=ext)
    else:
        P.write(str(output_path), format="raw")
    print(f"Graph saved to {output_path}")


def plot_layout(lay, output_path: Path | None = None):
    """
    Draw a computed layout with matplotlib for a quick visual check.

    Blurbs are drawn as text at their resolved boxes (with the box outline in
    debug mode) and connectors as polylines. The y axis is flipped so the
    root is at the top, as in the final chart.
    """
    fig, ax = plt.subplots(figsize=(max(lay.width, 1) / 100, max(lay.height, 1) / 100))
    ax.set_xlim(0, lay.width)
    ax.set_ylim(lay.height, 0)
    ax.set_aspect("equal")
    ax.axis("off")

    y = lay.margin
    if lay.title.text:
        y += lay.title.style.line_height
        ax.text(lay.margin, y, lay.title.text, fontsize=lay.title.style.font_size * 0.75, va="baseline")
    for note in lay.notes:
        y += note.style.line_height
        ax.text(lay.margin, y, note.text, fontsize=note.style.font_size * 0.75, va="baseline")

    for b in lay.blurbs:
        if lay.debug:
            ax.add_patch(Rectangle((b.left(), b.top_pos), b.width, b.height, facecolor="#eeeeee"))

        x = b.x() if b.centre_text else b.left()
        ha = "center" if b.centre_text else "left"
        ty = b.top_pos
        for section in (b.heading, b.detail):
            for line in section.lines:
                ax.text(
                    x,
                    ty,
                    line,
                    ha=ha,
                    va="top",
                    fontsize=section.style.font_size * 0.75,  # px to pt
                    color=section.style.color,
                )
                ty += section.style.line_height

    for c in lay.connectors:
        ax.plot([p.x for p in c.points], [p.y for p in c.points], color="black", linewidth=1)

    if output_path:
        fig.savefig(output_path, dpi=100, bbox_inches="tight")
        plt.close(fig)
        print(f"Layout preview saved to {output_path}")
    else:
        plt.show()
