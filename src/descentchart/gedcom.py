"""GEDCOM import of descendant charts."""

from __future__ import annotations

import itertools
import logging
from pathlib import Path

from ged4py import GedcomReader

from descentchart.models import Chart, Family, Person


logger = logging.getLogger(__name__)


class GedcomImportError(ValueError):
    """The GEDCOM file has no usable root individual."""


def extract_name(indi) -> str:
    """Extract the full name from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return "Unknown"

    name_value = name_rec.value

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_value, tuple):
        parts = [p for p in name_value if p]
        return " ".join(parts) if parts else "Unknown"

    # Fallback: string format "Given /Surname/"
    return " ".join(str(name_value).replace("/", " ").split()) or "Unknown"


def extract_event_details(rec, tag: str) -> tuple[str | None, str | None]:
    """Extract date and place from an event tag (BIRT, DEAT, MARR, etc.)."""
    event = rec.sub_tag(tag)
    if event is None:
        return (None, None)

    date_rec = event.sub_tag("DATE")
    place_rec = event.sub_tag("PLAC")

    # Convert date value to string (ged4py may return DateValue objects)
    date_val = None
    if date_rec and date_rec.value:
        date_val = str(date_rec.value)

    place_val = None
    if place_rec and place_rec.value:
        place_val = str(place_rec.value)

    return (date_val, place_val)


def event_line(rec, tag: str, abbrev: str) -> str | None:
    """Format an event as a detail line such as "b. 24 MAY 1819, London"."""
    date, place = extract_event_details(rec, tag)
    parts = [p for p in (date, place) if p]
    if not parts:
        return None
    return f"{abbrev} {', '.join(parts)}"


def person_details(indi) -> list[str]:
    details = [extract_name(indi)]
    for tag, abbrev in (("BIRT", "b."), ("DEAT", "d.")):
        line = event_line(indi, tag, abbrev)
        if line:
            details.append(line)
    return details


def find_individual(reader: GedcomReader, root_xref: str | None):
    """Find the root individual by xref id (with or without @ signs), or the first individual."""
    wanted = root_xref.strip("@") if root_xref else None
    for rec in reader.records0("INDI"):
        if wanted is None or (rec.xref_id or "").strip("@") == wanted:
            return rec
    return None


def build_chart(reader: GedcomReader, root_xref: str | None = None, title: str = "") -> Chart:
    """
    Build a descendant chart from parsed GEDCOM data.

    Starts at the given individual (or the first one in the file) and
    follows their FAMS families: the other spouse becomes the family
    partner and CHIL records become the children, in file order. Each
    individual is placed once; later appearances (pedigree collapse) are
    listed without their families.
    """
    root = find_individual(reader, root_xref)
    if root is None:
        if root_xref is None:
            raise GedcomImportError("GEDCOM file contains no individuals")
        raise GedcomImportError(f"Individual {root_xref} not found")

    ids = itertools.count(1)
    placed: set[str] = set()

    def add(indi) -> Person:
        p = Person(id=next(ids), details=person_details(indi))
        if indi.xref_id in placed:
            logger.warning("Individual %s appears more than once; descendants shown once", indi.xref_id)
            return p
        placed.add(indi.xref_id)

        for fam in indi.sub_tags("FAMS"):
            other = None
            for tag in ("HUSB", "WIFE"):
                spouse = fam.sub_tag(tag)
                if spouse is not None and spouse.xref_id != indi.xref_id:
                    other = spouse
            marriage = event_line(fam, "MARR", "m.")
            family = Family(details=[marriage] if marriage else [])
            if other is not None:
                # partners are shown without their own families
                family.other = Person(id=next(ids), details=person_details(other))
            for child in fam.sub_tags("CHIL"):
                family.children.append(add(child))
            p.families.append(family)
        return p

    chart = Chart(root=add(root), title=title)
    logger.info("Imported %d persons from GEDCOM", sum(1 for _ in chart.persons()))
    return chart


def parse_gedcom(filepath: Path, root_xref: str | None = None, title: str = "") -> Chart:
    """Read a GEDCOM file and build a descendant chart from it."""
    with GedcomReader(str(filepath)) as reader:
        return build_chart(reader, root_xref=root_xref, title=title)
