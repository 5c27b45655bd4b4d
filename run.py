#!/usr/bin/env python3
"""
Permstore - command-line access to a seeded container

Usage:
    python run.py --seed seed.yaml entries              # Print readable snapshot
    python run.py --seed seed.yaml read app:name        # Read one path
    python run.py --seed seed.yaml write app:port 8080  # Write, then print snapshot
    python run.py --default-policy r entries            # Override default policy
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any

import yaml
from dotenv import load_dotenv

from permstore.config import get_validated_config, load_config, set_config_value
from permstore.loader import build_container, load_container
from permstore.store import AccessDenied, Container, ContainerOwnershipError, Permission

logger = logging.getLogger("permstore.run")

# Exit status when a permission check fails
EXIT_ACCESS_DENIED: int = 2


def configure_logging(verbose: bool = False) -> None:
    """Configure the root logger from the logging section of the config."""
    config = get_validated_config()
    level = logging.DEBUG if verbose else logging.getLevelName(config.logging.level)
    logging.basicConfig(level=level, format=config.logging.format, force=True)


def parse_value(raw: str) -> Any:
    """Parse a CLI value as YAML so numbers, booleans and mappings work.

    Values YAML would turn into something JSON cannot hold (dates,
    timestamps) are kept as the raw string.
    """
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return raw
    return value


def policy_arg(raw: str) -> Permission:
    """argparse type for --default-policy."""
    try:
        return Permission.parse(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def to_json(value: Any) -> str:
    if isinstance(value, Container):
        value = value.entries()
    return json.dumps(value, indent=2, sort_keys=False)


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Read and write a permission-checked container"
    )
    parser.add_argument(
        "--config",
        default=os.environ.get("PERMSTORE_CONFIG"),
        help="Path to config file (default: $PERMSTORE_CONFIG or config/config.yaml)",
    )
    parser.add_argument("--seed", help="YAML/JSON seed file for the root container")
    parser.add_argument(
        "--default-policy",
        type=policy_arg,
        help="Override store.default_policy (r, w, rw, none)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    read_cmd = commands.add_parser("read", help="Print the value at a path")
    read_cmd.add_argument("path")

    write_cmd = commands.add_parser("write", help="Write a value and print the snapshot")
    write_cmd.add_argument("path")
    write_cmd.add_argument("value", help="Parsed as YAML (42, true, '{a: 1}')")

    commands.add_parser("entries", help="Print the readable snapshot")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    args: argparse.Namespace = build_parser().parse_args(argv)

    load_config(args.config)
    if args.default_policy:
        set_config_value("store.default_policy", args.default_policy.value)
    configure_logging(args.verbose)
    logger.debug(f"Running '{args.command}' command")

    try:
        if args.seed:
            container = load_container(args.seed, default_policy=args.default_policy)
        else:
            container = build_container({})

        if args.command == "read":
            print(to_json(container.read(args.path)))
        elif args.command == "write":
            container.write(args.path, parse_value(args.value))
            print(to_json(container.entries()))
        else:
            print(to_json(container.entries()))
    except AccessDenied as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ACCESS_DENIED
    except ContainerOwnershipError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
