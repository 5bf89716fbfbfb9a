#!/usr/bin/env python3
"""
Command-line interface for ztp.

Provides commands to list and render the templates of a template directory.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ztp.config import Config
from ztp.errors import TemplateError
from ztp.output import OutputManager, Verbosity, get_output, set_output, setup_logging
from ztp.template import Template, new_template

logger = logging.getLogger(__name__)


def load_template(templates_dir: Optional[str] = None, subdir: Optional[str] = None) -> Template:
    """
    Build the template set from a directory.

    Args:
        templates_dir: Directory containing the templates (defaults to
                       ZTP_TEMPLATES_DIR or ./templates)
        subdir: Optional subdirectory to load templates from (defaults to
                ZTP_TEMPLATES_SUBDIR)

    Returns:
        The template set
    """
    root = Path(templates_dir) if templates_dir else Config.templates_dir()
    subdir = subdir or Config.templates_subdir()
    output = get_output()
    output.verbose(f"Loading templates from {root}" + (f" (directory {subdir})" if subdir else ""))
    return (
        new_template()
        .set_logger(logging.getLogger("ztp"))
        .set_fs(root)
        .set_dir(subdir)
        .build()
    )


def parse_set_values(values: Optional[List[str]]) -> Dict[str, Any]:
    """
    Parse KEY=VALUE pairs given with --set.

    Values are parsed as YAML scalars, so 'replicas=3' gives an integer and
    'enabled=true' a boolean. Dotted keys create nested dictionaries.

    Raises:
        ValueError: If a pair doesn't contain '='
    """
    result: Dict[str, Any] = {}
    for item in values or []:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid --set value '{item}', expected KEY=VALUE")
        value = yaml.safe_load(raw) if raw else ""
        target = result
        parts = key.split(".")
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[parts[-1]] = value
    return result


def merge_values(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_values(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_data(data_file: Optional[str] = None, set_values: Optional[List[str]] = None) -> Any:
    """
    Load the input data for templates from a YAML or JSON file.

    Args:
        data_file: Path to the data file, or None for no file
        set_values: KEY=VALUE pairs overriding values of the file

    Returns:
        The input data

    Raises:
        FileNotFoundError: If the data file doesn't exist
        ValueError: If the data file can't be parsed
    """
    data: Any = None
    if data_file:
        path = Path(data_file)
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {path}")
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse data file {path}: {e}") from e

    overrides = parse_set_values(set_values)
    if overrides:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("--set can only be used when the data is a mapping")
        data = merge_values(data, overrides)
    return data


def render_all(template: Template, output_dir: Path, data: Any = None) -> List[str]:
    """
    Render every template whose name doesn't start with '_' into a directory.

    Names starting with '_' (in any path component) are partials meant to be
    included or executed by other templates.

    Returns:
        Names of the rendered templates
    """
    rendered = []
    for name in template.names():
        if any(part.startswith("_") for part in name.split("/")):
            continue
        content = template.render(name, data)
        target = output_dir / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info(f"Rendered template '{name}' to {target}")
        rendered.append(name)
    return rendered


def _handle_error(e: Exception) -> None:
    output = get_output()
    if isinstance(e, TemplateError):
        output.error(f"Error: {e}", suggestion="Set ZTP_DEBUG=1 to log the text of each template")
    else:
        output.error(f"Error: {e}")
    sys.exit(1)


def cmd_list(args: argparse.Namespace) -> None:
    """Handle the list subcommand."""
    output = get_output()
    try:
        template = load_template(args.templates, args.dir)
        names = template.names()
        if output.verbosity == Verbosity.QUIET:
            for name in names:
                print(name)
        else:
            output.table("Templates", ["Name"], [[name] for name in names])
    except (TemplateError, FileNotFoundError, ValueError) as e:
        _handle_error(e)


def cmd_render(args: argparse.Namespace) -> None:
    """Handle the render subcommand."""
    output = get_output()
    try:
        template = load_template(args.templates, args.dir)
        data = load_data(args.data, args.set)
        if args.output:
            output_path = Path(args.output).resolve()
            output_path.parent.mkdir(parents=True, exist_ok=True)
            content = template.render(args.name, data)
            output_path.write_bytes(content)
            output.success(f"Rendered template '{args.name}' to {output_path}")
        else:
            template.execute(sys.stdout.buffer, args.name, data)
            sys.stdout.flush()
    except (TemplateError, FileNotFoundError, ValueError) as e:
        _handle_error(e)


def cmd_render_all(args: argparse.Namespace) -> None:
    """Handle the render-all subcommand."""
    output = get_output()
    try:
        template = load_template(args.templates, args.dir)
        data = load_data(args.data, args.set)
        output_dir = Path(args.output_dir).resolve()
        rendered = render_all(template, output_dir, data)
        for name in rendered:
            output.verbose(f"Rendered {name}")
        output.success(f"Rendered {len(rendered)} templates to {output_dir}")
    except (TemplateError, FileNotFoundError, ValueError) as e:
        _handle_error(e)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--templates",
        help="Directory containing the templates (defaults to ./templates or ZTP_TEMPLATES_DIR env var)",
    )
    parser.add_argument(
        "--dir",
        help="Load templates only from this subdirectory (defaults to ZTP_TEMPLATES_SUBDIR env var)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only show errors and final results",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show detailed output including template directories and names",
    )


def _add_data_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--data",
        help="YAML or JSON file with the input data of the templates",
    )
    parser.add_argument(
        "--set",
        action="append",
        metavar="KEY=VALUE",
        help="Set an input value, can be repeated (dotted keys create nested values)",
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the ztp CLI."""
    parser = argparse.ArgumentParser(
        description="ztp - Render cluster manifests from a directory of templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ztp list --templates examples/assisted-manifests/templates
  ztp render manifest.json --templates examples/assisted-manifests/templates --data values.yaml
  ztp render cluster.yaml --set cluster.name=spoke-1 --output out/cluster.yaml
  ztp render-all --output-dir manifests --data values.yaml

Templates are Jinja2 templates named after their path relative to the templates
directory. The input data is available as the 'data' variable, and the
functions base64, execute and json can be used in every template.
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands", required=True)

    list_parser = subparsers.add_parser("list", help="List the names of the templates")
    _add_common_arguments(list_parser)
    list_parser.set_defaults(func=cmd_list)

    render_parser = subparsers.add_parser("render", help="Render one template")
    render_parser.add_argument("name", help="Name of the template, relative to the templates directory")
    render_parser.add_argument(
        "--output",
        help="Output file (defaults to stdout)",
    )
    _add_common_arguments(render_parser)
    _add_data_arguments(render_parser)
    render_parser.set_defaults(func=cmd_render)

    render_all_parser = subparsers.add_parser(
        "render-all",
        help="Render all templates except partials (names starting with '_') to a directory",
    )
    render_all_parser.add_argument(
        "--output-dir",
        required=True,
        help="Output directory for the rendered files",
    )
    _add_common_arguments(render_all_parser)
    _add_data_arguments(render_all_parser)
    render_all_parser.set_defaults(func=cmd_render_all)

    args = parser.parse_args(argv)

    # Set up verbosity
    if getattr(args, "quiet", False):
        verbosity = Verbosity.QUIET
    elif getattr(args, "verbose", False):
        verbosity = Verbosity.VERBOSE
    else:
        verbosity = Verbosity.NORMAL

    set_output(OutputManager(verbosity=verbosity))
    setup_logging(verbose=verbosity == Verbosity.VERBOSE, debug=Config.debug())

    # Call the appropriate command handler
    args.func(args)


if __name__ == "__main__":
    main()
