"""CLI entry point for the Sankey renderer."""

import argparse
import json
import logging
import sys
from pathlib import Path

from jmu_sankey.config import DATASETS, load_config
from jmu_sankey.errors import SankeyError
from jmu_sankey.pipeline import FORMATS, build_diagram, load_sources, render_diagram

logger = logging.getLogger(__name__)


def _add_common(parser: argparse.ArgumentParser) -> None:
    # SUPPRESS keeps an omitted subcommand option from clobbering the top-level one
    parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS,
                        help="Debug logging")
    parser.add_argument("--config", type=Path, default=argparse.SUPPRESS,
                        help="Path to config.yaml")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="JMU Sankey diagram renderer")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    # render command
    render_parser = sub.add_parser("render", help="Lay out and draw the diagram")
    render_parser.add_argument(
        "--dataset", choices=DATASETS, default=None,
        help="Which dataset to draw (defaults to data.dataset in config)",
    )
    render_parser.add_argument("--format", choices=FORMATS, default="html", help="Output format")
    render_parser.add_argument("--output", type=Path, default=None, help="Output file path")
    _add_common(render_parser)

    # inspect command
    inspect_parser = sub.add_parser("inspect", help="Print the adapted nodes and links as JSON")
    inspect_parser.add_argument("--dataset", choices=DATASETS, default=None)
    _add_common(inspect_parser)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)

        if args.command == "render":
            result = render_diagram(
                config, dataset=args.dataset, fmt=args.format, output_path=args.output,
            )
            print(result)

        elif args.command == "inspect":
            generic, jmu = load_sources(config)
            diagram = build_diagram(args.dataset or config.data.dataset, generic, jmu)
            print(json.dumps(diagram.model_dump(), indent=2, ensure_ascii=False))

        else:
            parser.print_help()
    except SankeyError as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
