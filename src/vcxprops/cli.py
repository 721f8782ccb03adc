"""
Command-line front end: evaluate a project and print its properties.

    vcxprops Project.vcxproj
    vcxprops Project.vcxproj -c "Release|x64" -p SolutionDir=C:\\src\\ -f yaml
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional, Tuple

from vcxprops import __version__
from vcxprops.errors import PropertiesFileError, VcxpropsError
from vcxprops.project_reader import read_project
from vcxprops.serialization import (
    context_to_json,
    context_to_yaml,
    properties_from_yaml,
    properties_to_json,
    properties_to_lines,
    properties_to_yaml,
)

logger = logging.getLogger(__name__)


def _parse_assignment(text: str) -> Tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    return name, value


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vcxprops",
        description="Evaluate the build properties of a Visual Studio project for one configuration",
    )
    parser.add_argument("project", help="Path to the .vcxproj/.props/.targets file")
    parser.add_argument(
        "-c", "--configuration",
        help='Configuration to select, e.g. "Release|x64" (default: first one declared)',
    )
    parser.add_argument(
        "-p", "--property", dest="properties", action="append", default=[],
        type=_parse_assignment, metavar="NAME=VALUE",
        help="Initial property value (repeatable)",
    )
    parser.add_argument(
        "--properties-file", metavar="FILE",
        help="YAML mapping of initial property values",
    )
    parser.add_argument(
        "-f", "--format", choices=["lines", "json", "yaml"], default="lines",
        help="Output format (default: lines)",
    )
    parser.add_argument(
        "--details", action="store_true",
        help="With json/yaml, also emit the active configuration and diagnostics",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _initial_properties(args: argparse.Namespace) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    if args.properties_file:
        with open(args.properties_file, "r", encoding="utf-8") as f:
            text = f.read()
        try:
            properties.update(properties_from_yaml(text))
        except PropertiesFileError as e:
            e.filename = args.properties_file
            raise
    properties.update(dict(args.properties))
    return properties


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)

    try:
        ctx = read_project(
            args.project,
            properties=_initial_properties(args),
            configuration=args.configuration,
        )
    except (VcxpropsError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    logger.info("Active configuration: %s", ctx.active_configuration)

    if args.format == "lines":
        output = "\n".join(properties_to_lines(ctx.properties))
    elif args.format == "json":
        output = context_to_json(ctx) if args.details else properties_to_json(ctx.properties)
    else:
        output = context_to_yaml(ctx) if args.details else properties_to_yaml(ctx.properties)

    print(output.rstrip("\n"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
