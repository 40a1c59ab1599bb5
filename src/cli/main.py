"""Partons CLI entry points.
This module exposes registry listing, cache, config, and fetch commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import PartonsConfig, load_sources
from ingest.registry_sdk import PartonsClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="partons", description="Partons registry CLI")
    parser.add_argument("--data-root", help="Override PARTONS_DATA_ROOT for this command")
    parser.add_argument("--config", help="Use this partons.toml instead of discovering one")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_list_command(subparsers)
    _add_cache_command(subparsers)
    _add_configs_command(subparsers)
    _add_fetch_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Partons CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    client = _build_client(args.data_root, args.config)
    if args.command == "list":
        return _run_list_command(client, args)
    if args.command == "cache":
        return _run_cache_command(client, args)
    if args.command == "configs":
        return _run_configs_command(client)
    if args.command == "fetch":
        return _run_fetch_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None, config_file: str | None) -> PartonsClient:
    """Build SDK client with optional data-root and config overrides.

    Args:
        data_root: Optional override path.
        config_file: Optional configuration file path.

    Returns:
        Configured SDK client.
    """
    config = PartonsConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    if config_file:
        config_path = Path(config_file).expanduser().resolve()
        config = replace(config, config_path=config_path, sources=load_sources(config_path))
    return PartonsClient(config)


def _run_list_command(client: PartonsClient, args: argparse.Namespace) -> int:
    """Handle list command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    if args.scope == "remote":
        for header in client.index(args.source):
            print(f"{header.id}\t{header.name}\t{header.member_count}")
        return 0
    for set_name in client.cached_sets(args.source):
        print(set_name)
    return 0


def _run_cache_command(client: PartonsClient, args: argparse.Namespace) -> int:
    """Handle cache command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    print(f"data_root={client.config.data_root}")
    for source_config in client.sources():
        if args.source and source_config.name != args.source:
            continue
        cache = client.source(source_config.name).cache
        cached = cache.sets() if cache.root.is_dir() else []
        print(f"{source_config.name}\t{cache.root}\t{len(cached)}")
    return 0


def _run_configs_command(client: PartonsClient) -> int:
    """Handle configs command.

    Args:
        client: SDK client.

    Returns:
        Exit code.
    """
    payload = {
        "config_path": str(client.config.config_path) if client.config.config_path else None,
        "sources": [
            {
                "name": source_config.name,
                "url": source_config.url,
                "index": source_config.index,
                "format": source_config.format.value,
                "patterns": {
                    "info": source_config.patterns.info,
                    "grids": source_config.patterns.grids,
                },
            }
            for source_config in client.sources()
        ],
    }
    print(json.dumps(payload, indent=2))
    return 0


def _run_fetch_command(client: PartonsClient, args: argparse.Namespace) -> int:
    """Handle fetch command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    parton_set = client.set(args.set_pattern, args.source)
    info = parton_set.info()
    print(f"set={parton_set.header.identifier()}")
    print(f"description={info.description}")
    print(f"authors={info.authors}")
    if args.member is None:
        members = parton_set.members()
    else:
        members = [parton_set.member(args.member)]
    print(f"members={len(members)}")
    print(f"values={sum(member.value_count() for member in members)}")
    return 0


def _add_list_command(subparsers: Any) -> None:
    """Register list subcommand."""
    parser = subparsers.add_parser("list", help="List cached or remote sets")
    parser.add_argument(
        "scope",
        nargs="?",
        default="local",
        choices=("local", "remote"),
        help="List cached sets (default) or the remote index",
    )
    parser.add_argument("--source", help="Registry name; defaults to the first configured one")


def _add_cache_command(subparsers: Any) -> None:
    """Register cache subcommand."""
    parser = subparsers.add_parser("cache", help="Show cache locations and contents")
    parser.add_argument(
        "action",
        nargs="?",
        default="info",
        choices=("info",),
        help="Cache operation",
    )
    parser.add_argument("--source", help="Only report this registry")


def _add_configs_command(subparsers: Any) -> None:
    """Register configs subcommand."""
    parser = subparsers.add_parser("configs", help="Show the loaded registry configuration")
    parser.add_argument(
        "action",
        nargs="?",
        default="list",
        choices=("list",),
        help="Configuration operation",
    )


def _add_fetch_command(subparsers: Any) -> None:
    """Register fetch subcommand."""
    parser = subparsers.add_parser("fetch", help="Fetch and convert a set into the cache")
    parser.add_argument("set_pattern", help="Set name or full-match regular expression")
    parser.add_argument("--member", type=int, help="Only fetch this member")
    parser.add_argument("--source", help="Registry name; defaults to the first configured one")
