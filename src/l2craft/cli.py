#!/usr/bin/env python3
"""l2craft command line interface.

Usage:
    l2craft parse CONFIG [--json]
    l2craft analyze CONFIG [--json | --lint | --domains]
    l2craft change BASE CHANGE [--json | --summary]

Files may be given as ``-`` to read standard input.

Environment variables:
    L2CRAFT_CONFIG=path        Settings file (see l2craft.config.settings)
    L2CRAFT_LOG_LEVEL=DEBUG    Console log level
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config.settings import SettingsError, load_settings
from .config_engine import ConfigEngine, ValidationError, summarize_plan
from .config_engine.schema import Block, Node
from .utils.logging_config import global_stats, setup_logging

logger = logging.getLogger(__name__)


def read_text(path: str) -> str:
    """Read a file, or standard input for ``-``."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def format_tree(nodes: tuple[Node, ...], depth: int = 0) -> list[str]:
    """Indented outline of a node tree, blocks marked with ``+``."""
    lines = []
    for node in nodes:
        pad = "  " * depth
        if isinstance(node, Block):
            lines.append(f"{pad}+ {node.name}  (line {node.line})")
            lines.extend(format_tree(node.children, depth + 1))
        else:
            lines.append(f"{pad}- {node.text}  (line {node.line})")
    return lines


def cmd_parse(engine: ConfigEngine, args: argparse.Namespace) -> int:
    nodes = engine.parse_config(read_text(args.config))
    if args.json:
        print(json.dumps([n.to_dict() for n in nodes], indent=2))
    else:
        print("\n".join(format_tree(nodes)))
    return 0


def cmd_analyze(engine: ConfigEngine, args: argparse.Namespace) -> int:
    result = engine.analyze_config(read_text(args.config))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif args.lint:
        print(result.lint_output or "No lint findings", end="" if result.lint_output else "\n")
    elif args.domains:
        for domain in result.domains:
            members = ", ".join(domain.members + domain.routed) or "-"
            print(f"VLAN{domain.vlan_tag:<6} {domain.description or '':30s} {members}")
    else:
        print(result.simplified_config)
    return 0


def cmd_change(engine: ConfigEngine, args: argparse.Namespace) -> int:
    base_text = read_text(args.base)
    change_text = read_text(args.change)

    if args.summary:
        try:
            plan = engine.plan(base_text, change_text)
        except ValidationError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(summarize_plan(plan))
        return 0

    if args.json:
        result = engine.apply(base_text, change_text)
        print(json.dumps(result.to_dict(), indent=2))
        return 0 if result.success else 1

    try:
        result = engine.generate_change_config(base_text, change_text)
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if result.change_output:
        print(result.change_output)
    else:
        logger.info("No changes needed")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="l2craft",
        description="Analyze IOS-XR L2 configuration and generate change commands",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Simplified switch-style view of a running config
    l2craft analyze running.cfg

    # Lint findings only
    l2craft analyze running.cfg --lint

    # Commands applying a change input
    l2craft change running.cfg change.txt

    # Parse tree as JSON
    l2craft parse running.cfg --json
""",
    )
    parser.add_argument(
        "--settings",
        type=str,
        help="Settings file (default: L2CRAFT_CONFIG or ./l2craft.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print stage timings to stderr",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Parse configuration into a node tree")
    p_parse.add_argument("config", help="Configuration file or -")
    p_parse.add_argument("--json", action="store_true", help="Output JSON")
    p_parse.set_defaults(func=cmd_parse)

    p_analyze = sub.add_parser("analyze", help="Simplified view and lint of a base config")
    p_analyze.add_argument("config", help="Base configuration file or -")
    output = p_analyze.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Output JSON")
    output.add_argument("--lint", action="store_true", help="Only print lint findings")
    output.add_argument("--domains", action="store_true", help="Only list bridge-domains")
    p_analyze.set_defaults(func=cmd_analyze)

    p_change = sub.add_parser("change", help="Generate commands applying a change input")
    p_change.add_argument("base", help="Base configuration file or -")
    p_change.add_argument("change", help="Change input file or -")
    output = p_change.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Output JSON result")
    output.add_argument("--summary", action="store_true", help="Print a plan summary instead")
    p_change.set_defaults(func=cmd_change)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except SettingsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging("DEBUG" if args.verbose else "WARNING", settings.log_file)

    engine = ConfigEngine(settings)
    global_stats.enabled = args.stats

    try:
        code = args.func(engine, args)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        global_stats.enabled = False

    if args.stats:
        print(global_stats.summary(), file=sys.stderr)
        global_stats.clear()

    return code


if __name__ == "__main__":
    sys.exit(main())
