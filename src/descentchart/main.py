"""
1) Parse a descendant list (or a GEDCOM file) into a chart.
2) Validate the chart for structural problems and impossible dates.
3) Lay the chart out as rows of blurbs joined by connectors.
4) Write the layout geometry as JSON.
5) Optionally write a Graphviz graph of the chart and a preview image of the layout.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from descentchart.gedcom import GedcomImportError, parse_gedcom
from descentchart.layout import ARRANGERS, LayoutOptions, LayoutPreconditionError, layout_chart
from descentchart.parsing import StructuralParseError, parse_file
from descentchart.validation import validate_chart


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lay out a descendant chart.")
    parser.add_argument("input", type=Path, help="Descendant list text file, or a .ged GEDCOM file.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("layout.json"),
        help="Path to output layout JSON file (default: layout.json).",
    )
    parser.add_argument("--title", default="", help="Chart title.")
    parser.add_argument("--note", action="append", default=[], help="Chart note, may be repeated.")
    parser.add_argument("--root", help="GEDCOM xref id of the root individual (default: first).")
    parser.add_argument("--options", type=Path, help="JSON file of layout options.")
    parser.add_argument("--arranger", choices=ARRANGERS, help="Arrangement strategy.")
    parser.add_argument("--iterations", type=int, help="Annealing iterations.")
    parser.add_argument("--seed", type=int, help="Random seed for the annealing arranger.")
    parser.add_argument(
        "--keep-with-grandparent",
        action="store_true",
        help="Encourage children to stay near their grandparents.",
    )
    parser.add_argument("--dot", type=Path, help="Also write a Graphviz graph of the chart.")
    parser.add_argument("--preview", type=Path, help="Also save a preview image of the layout.")
    parser.add_argument("--debug", action="store_true", help="Log blurb positions.")
    return parser


def load_options(args: argparse.Namespace) -> LayoutOptions:
    """Layout options from the options file, overridden by command line flags."""
    if args.options:
        options = LayoutOptions.from_dict(json.loads(args.options.read_text(encoding="utf-8")))
    else:
        options = LayoutOptions()

    if args.arranger:
        options.arranger = args.arranger
    if args.iterations is not None:
        options.iterations = args.iterations
    if args.seed is not None:
        options.seed = args.seed
    if args.keep_with_grandparent:
        options.keep_with_grandparent = True
    if args.debug:
        options.debug = True
    return options


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        options = load_options(args)
    except (OSError, ValueError) as e:
        print(f"Error reading layout options: {e}", file=sys.stderr)
        return 1

    print(f"Parsing: {args.input}")
    try:
        if args.input.suffix.lower() == ".ged":
            chart = parse_gedcom(args.input, root_xref=args.root, title=args.title)
            chart.notes = list(args.note)
        else:
            chart = parse_file(args.input, title=args.title, notes=args.note)
    except (StructuralParseError, GedcomImportError, OSError) as e:
        print(f"Error parsing input: {e}", file=sys.stderr)
        return 1

    print("Validating chart...")
    warnings = validate_chart(chart)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:  # Show first 10 warnings
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    print(f"Laying out chart with the {options.arranger} arranger...")
    try:
        lay = layout_chart(chart, options)
    except LayoutPreconditionError as e:
        print(f"Error laying out chart: {e}", file=sys.stderr)
        return 1
    print(
        f"  Layout is {lay.width} x {lay.height} with {len(lay.blurbs)} blurbs "
        f"and {len(lay.connectors)} connectors"
    )

    args.output.write_text(json.dumps(lay.to_dict(), indent=2), encoding="utf-8")
    print(f"Layout saved to {args.output}")

    if args.dot:
        from descentchart.plotting import write_dot

        write_dot(chart, args.dot)

    if args.preview:
        from descentchart.plotting import plot_layout

        plot_layout(lay, args.preview)

    print("Done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
