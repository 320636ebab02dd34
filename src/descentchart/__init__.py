"""Descendant charts from indented genealogy lists."""

from descentchart.layout import DescendantLayout, LayoutOptions, layout_chart
from descentchart.models import Chart, Family, Person
from descentchart.parsing import StructuralParseError, parse_chart

__all__ = [
    "Chart",
    "DescendantLayout",
    "Family",
    "LayoutOptions",
    "Person",
    "StructuralParseError",
    "layout_chart",
    "parse_chart",
]
