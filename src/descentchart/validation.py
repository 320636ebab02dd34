"""Chart validation for descendant charts."""

from __future__ import annotations

from collections import Counter
import re

import networkx as nx

from descentchart.graph import build_descent_graph, build_graph, person_label
from descentchart.models import Chart, Person


# "1819-1901", "(1819-1901)" or an open-ended "1819-"
LIFESPAN_RE = re.compile(r"^\(?(\d{4})\s*-\s*(\d{4})?\)?$")

# An event abbreviation and its text, up to the next event or the end of the line
EVENT_RE = re.compile(r"(?:^|\s)([bd])[.:]\s*(.*?)(?=\s[bmd][.:]|$)")

YEAR_RE = re.compile(r"\b(\d{4})\b")


def extract_years(p: Person) -> tuple[int | None, int | None]:
    """
    Extract birth and death years from a person's detail lines.

    Handles lines like:
    - "1819-1901"
    - "b. 24 May 1819, London, England."
    - "b: Abt. 1806 in Kilford, Ireland. d: 17 Sep 1861 in Swindon"
    - "b. 1843-11-01 - St. David's, d. before 1871"
    """
    birth: int | None = None
    death: int | None = None

    for line in p.details:
        match = LIFESPAN_RE.match(line.strip())
        if match:
            birth = birth or int(match.group(1))
            if match.group(2):
                death = death or int(match.group(2))
            continue

        for event in EVENT_RE.finditer(line):
            year = YEAR_RE.search(event.group(2))
            if year is None:
                continue
            if event.group(1) == "b" and birth is None:
                birth = int(year.group(1))
            elif event.group(1) == "d" and death is None:
                death = int(year.group(1))

    return birth, death


def validate_chart(chart: Chart) -> list[str]:
    """
    Validate a descendant chart for:
    - A structure that is not a tree (shared or cyclic people)
    - Duplicate or out of order ids
    - Impossible ages (child born before parent)
    - Date ordering issues

    Returns a list of warning messages.
    """
    warnings: list[str] = []

    if chart.root is None:
        return ["Chart has no root person"]

    if chart.root.id != 1:
        warnings.append(f"Root person has id {chart.root.id}, expected 1")

    persons = list(chart.persons())

    counts = Counter(p.id for p in persons)
    for pid, n in sorted(counts.items()):
        if n > 1:
            warnings.append(f"Duplicate id {pid} used by {n} people")

    ids = [p.id for p in persons]
    if len(counts) == len(ids) and ids != sorted(ids):
        warnings.append("Ids are not increasing in chart order")

    # Check the people form a tree
    descent = build_descent_graph(chart)
    if not nx.is_arborescence(descent):
        try:
            cycle = nx.find_cycle(descent, source=chart.root.id, orientation="original")
            cycle_nodes = [edge[0] for edge in cycle]
            warnings.append(f"Cycle detected in descent: {cycle_nodes}")
        except nx.NetworkXNoCycle:
            shared = [n for n, d in descent.in_degree() if d > 1]
            warnings.append(f"People listed in more than one place: {sorted(shared)}")

    G = build_graph(chart)
    years = {p.id: extract_years(p) for p in persons}

    # Check for impossible ages (child born before parent)
    for parent, child, data in G.edges(data=True):
        if data.get("relationship_type") != "PARENT_OF":
            continue

        parent_birth = years.get(parent, (None, None))[0]
        child_birth = years.get(child, (None, None))[0]

        if parent_birth and child_birth:
            if child_birth < parent_birth:
                warnings.append(
                    f"Impossible: {G.nodes[child]['person_name']} born before parent "
                    f"{G.nodes[parent]['person_name']}"
                )
            elif child_birth - parent_birth < 12:
                warnings.append(
                    f"Suspicious: {G.nodes[parent]['person_name']} was less than 12 years "
                    f"old when {G.nodes[child]['person_name']} was born"
                )

    # Check death before birth
    for p in persons:
        birth, death = years[p.id]
        if birth and death and death < birth:
            warnings.append(f"Impossible: {person_label(p)} died before being born")

    return warnings
