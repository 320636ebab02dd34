"""NetworkX graph building for charts and layouts."""

from __future__ import annotations

import networkx as nx

from descentchart.models import Chart, Person


def person_label(p: Person) -> str:
    """First heading line, or first detail line, of a person."""
    lines = p.headings or p.details
    return lines[0] if lines else ""


def build_graph(chart: Chart) -> nx.DiGraph:
    """
    Build a directed relationship graph from a chart.

    Nodes are person ids. Edges carry relationship_type SPOUSE_OF (from a
    person to the partner of one of their families) or PARENT_OF (from a
    person, and the family partner if any, to each child).
    """
    G = nx.DiGraph()

    for p in chart.persons():
        # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
        G.add_node(p.id, person_name=person_label(p), details=list(p.details))

    for p in chart.persons():
        for fam in p.families:
            if fam.other is not None:
                G.add_edge(p.id, fam.other.id, relationship_type="SPOUSE_OF")
            for child in fam.children:
                G.add_edge(p.id, child.id, relationship_type="PARENT_OF")
                if fam.other is not None:
                    G.add_edge(fam.other.id, child.id, relationship_type="PARENT_OF")

    return G


def build_descent_graph(chart: Chart) -> nx.DiGraph:
    """
    Build the ownership graph of a chart: each person points at the partners
    and children listed under them. For a well-formed chart this is a tree
    rooted at the chart's root.
    """
    G = nx.DiGraph()
    seen: set[int] = set()
    stack = [chart.root] if chart.root is not None else []
    while stack:
        p = stack.pop()
        G.add_node(p.id)
        if id(p) in seen:
            continue
        seen.add(id(p))
        for fam in p.families:
            owned = ([fam.other] if fam.other is not None else []) + fam.children
            for q in owned:
                G.add_edge(p.id, q.id)
                stack.append(q)
    return G


def build_union_layout_graph(chart: Chart) -> nx.DiGraph:
    """
    Build a layout graph using the union-node model for better family tree visualization.

    Every family becomes a "family node" (union node) that connects the
    person and their partner to the family's children:
    - Partners naturally sit on the same generation
    - All children hang from the union node, so siblings align
    - A family without a stated partner still gets its own union node

    Args:
        chart: The chart to convert

    Returns:
        A new graph with family nodes suitable for hierarchical layout
    """
    H = nx.DiGraph()

    for p in chart.persons():
        H.add_node(p.id, node_type="person", person_name=person_label(p), details=list(p.details))

    for p in chart.persons():
        for k, fam in enumerate(p.families, start=1):
            fam_id = f"FAM_{p.id}_{k}"
            spouses = (p.id,) if fam.other is None else (p.id, fam.other.id)
            # Family node is a small connector point
            H.add_node(fam_id, node_type="family", spouses=spouses, details=list(fam.details))
            for s in spouses:
                H.add_edge(s, fam_id, edge_type="spouse_to_family")
            for child in fam.children:
                # Child hangs from family node
                H.add_edge(fam_id, child.id, edge_type="family_to_child")

    return H


def build_constraint_graph(blurbs) -> nx.MultiDiGraph:
    """
    Build the placement constraint graph of a set of blurbs.

    One node per blurb id (with the blurb itself as the 'blurb' attribute)
    and one edge per constraint, from the constrained blurb to its partner,
    with kind "keep_with" or "keep_right_of".
    """
    G = nx.MultiDiGraph()
    for b in blurbs:
        G.add_node(b.id, blurb=b)
    for b in blurbs:
        for kw in b.keep_with:
            G.add_edge(b.id, kw.id, kind="keep_with")
        for kr in b.keep_right_of:
            G.add_edge(b.id, kr.id, kind="keep_right_of")
    return G
