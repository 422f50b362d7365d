#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
"""
Command-line interface for doc-inventories
"""
from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from pathlib import Path

import argcomplete
import requests

from ._version import __version__
from .config import Config
from .errors import InventoryError
from .inventory import Inventory
from .io import convert
from .item import dispname, show_full, spec, split_key, uri
from .metadata import set_file_metadata
from .mimetypes import register_extension

# Errors reported to the user instead of a traceback
USER_ERRORS = (InventoryError, OSError, requests.RequestException)


def _load(source: str, config: Config, mime: str | None = None, root_url: str | None = None) -> Inventory:
    return Inventory.load(
        source,
        mime=mime,
        root_url=root_url,
        timeout=config.timeout,
        retries=config.retries,
        wait_time=config.wait_time,
    )


def show_command(source: str, config: Config, full: bool = False, mime: str = None, root_url: str = None) -> int:
    """Print the inventory loaded from ``source``."""
    try:
        inventory = _load(source, config, mime=mime, root_url=root_url)
    except USER_ERRORS as e:
        print(f"❌ Cannot load {source}: {e}", file=sys.stderr)
        return 1
    print(inventory.show_full() if full else str(inventory))
    return 0


def find_command(
    source: str, key: str, config: Config, include_hidden: bool = True, show_uri: bool = False
) -> int:
    """Look up a single item by name or spec and print it."""
    try:
        domain, role, name = split_key(key)
        inventory = _load(source, config)
    except USER_ERRORS as e:
        print(f"❌ Cannot load {source}: {e}", file=sys.stderr)
        return 1
    item = inventory.find(name, domain=domain, role=role, include_hidden=include_hidden)
    if item is None:
        print(f"❌ No item {key!r} in {source}", file=sys.stderr)
        return 1
    if show_uri:
        print(uri(item, root_url=inventory.root_url))
    else:
        print(show_full(item))
    return 0


def search_command(
    source: str, pattern: str, config: Config, regex: bool = False, include_hidden: bool = True, as_json: bool = False
) -> int:
    """Print all items matching ``pattern``, most important first."""
    try:
        inventory = _load(source, config)
    except USER_ERRORS as e:
        print(f"❌ Cannot load {source}: {e}", file=sys.stderr)
        return 1
    if regex:
        try:
            pattern = re.compile(pattern)
        except re.error as e:
            print(f"❌ Invalid regular expression {pattern!r}: {e}", file=sys.stderr)
            return 1
    results = inventory.search(pattern, include_hidden=include_hidden)
    if as_json:
        data = [
            {
                "spec": spec(item),
                "uri": uri(item, root_url=inventory.root_url),
                "dispname": dispname(item),
                "priority": item.priority,
            }
            for item in results
        ]
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return 0
    for item in results:
        print(f"{spec(item)}  {uri(item, root_url=inventory.root_url)}")
    print(f"\n{len(results)} item(s) found", file=sys.stderr)
    return 0


def convert_command(
    file_in: str, file_out: Path, config: Config, project: str = None, version: str = None
) -> int:
    """Convert an inventory file into the format given by the extension of ``file_out``."""
    try:
        inventory = convert(
            file_in,
            file_out,
            timeout=config.timeout,
            retries=config.retries,
            wait_time=config.wait_time,
            project=project,
            version=version,
        )
    except USER_ERRORS as e:
        print(f"❌ Cannot convert {file_in}: {e}", file=sys.stderr)
        return 1
    print(f"✅ Wrote {len(inventory)} items to {file_out}")
    return 0


def set_metadata_command(filename: Path, project: str = None, version: str = None, mime: str = None) -> int:
    """Change project and/or version of an inventory file in place."""
    if project is None and version is None:
        print("❌ Nothing to do: give --project and/or --project-version", file=sys.stderr)
        return 1
    try:
        set_file_metadata(filename, mime=mime, project=project, version=version)
    except USER_ERRORS as e:
        print(f"❌ Cannot update {filename}: {e}", file=sys.stderr)
        return 1
    print(f"✅ Updated {filename}")
    return 0


def config_command(config: Config, show: bool = False, show_path: bool = False) -> int:
    """Show configuration information."""
    if show_path:
        if config.path:
            print(config.path)
        else:
            print("No configuration file found")
        return 0

    if config.path:
        print(f"# Configuration loaded from: {config.path}")
    else:
        print("# No configuration file found, showing defaults")
    print()
    print(json.dumps(config.data, indent=2))
    return 0


def _setup_logging(config: Config, verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s: %(name)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser_cli = argparse.ArgumentParser(
        prog="doc-inventories",
        description="doc-inventories - Inspect and convert documentation inventories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show an online inventory
  doc-inventories show https://docs.python.org/3/objects.inv

  # Find the documentation of a single object
  doc-inventories find https://docs.python.org/3/objects.inv ":py:function:`len`" --uri

  # Search for items
  doc-inventories search objects.inv "Tutorial"

  # Convert objects.inv to the TOML format
  doc-inventories convert objects.inv inventory.toml

  # Change the version recorded in an inventory file
  doc-inventories set-metadata objects.inv --project-version 1.2.0
        """
    )
    parser_cli.add_argument(
        '--version', '-V',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    parser_cli.add_argument('--config', '-c', type=Path, help='Explicit configuration file')
    parser_cli.add_argument('--verbose', '-v', action='count', default=0, help='More log output (repeatable)')
    parser_cli.add_argument('--quiet', '-q', action='store_true', help='Only log errors')

    subparsers = parser_cli.add_subparsers(dest='command', help='Command to run')

    # Show command
    show_parser = subparsers.add_parser('show', help='Show an inventory')
    show_parser.add_argument('source', help='Inventory file or URL')
    show_parser.add_argument('--full', action='store_true', help='List all items')
    show_parser.add_argument('--mime', type=str, help='MIME type (default: from file extension)')
    show_parser.add_argument('--root-url', type=str, help='Root URL for item uris')

    # Find command
    find_parser = subparsers.add_parser('find', help='Find a single item by name or spec')
    find_parser.add_argument('source', help='Inventory file or URL')
    find_parser.add_argument('key', help='Item name or spec, e.g. ":py:function:`len`"')
    find_parser.add_argument('--no-hidden', action='store_true', help='Ignore items with negative priority')
    find_parser.add_argument('--uri', action='store_true', help='Print only the full uri of the item')

    # Search command
    search_parser = subparsers.add_parser('search', help='Search an inventory')
    search_parser.add_argument('source', help='Inventory file or URL')
    search_parser.add_argument('pattern', help='Text to search for')
    search_parser.add_argument('--regex', '-r', action='store_true', help='Treat pattern as regular expression')
    search_parser.add_argument('--no-hidden', action='store_true', help='Omit items with negative priority')
    search_parser.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # Convert command
    convert_parser = subparsers.add_parser('convert', help='Convert between inventory formats')
    convert_parser.add_argument('input', help='Input file or URL')
    convert_parser.add_argument('output', type=Path, help='Output file (format from extension)')
    convert_parser.add_argument('--project', type=str, help='Project name to write')
    convert_parser.add_argument('--project-version', type=str, help='Project version to write')

    # Set-metadata command
    metadata_parser = subparsers.add_parser('set-metadata', help='Change project/version of an inventory file')
    metadata_parser.add_argument('file', type=Path, help='Inventory file to modify in place')
    metadata_parser.add_argument('--project', type=str, help='New project name')
    metadata_parser.add_argument('--project-version', type=str, help='New project version')
    metadata_parser.add_argument('--mime', type=str, help='MIME type (default: from file extension)')

    # Config command
    config_parser = subparsers.add_parser('config', help='Show configuration')
    config_parser.add_argument('--show', action='store_true', help='Show merged configuration')
    config_parser.add_argument('--path', action='store_true', help='Show config file path')

    return parser_cli


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser_cli = build_parser()

    # Enable shell tab completion
    argcomplete.autocomplete(parser_cli)

    args = parser_cli.parse_args(argv)

    config = Config(args.config)
    _setup_logging(config, args.verbose, args.quiet)
    for ext, mime in config.mime_types.items():
        try:
            register_extension(ext, mime)
        except InventoryError as e:
            print(f"❌ Invalid mime_types entry in configuration: {e}", file=sys.stderr)
            return 1

    if args.command == 'show':
        return show_command(args.source, config, full=args.full, mime=args.mime, root_url=args.root_url)
    elif args.command == 'find':
        return find_command(args.source, args.key, config, include_hidden=not args.no_hidden, show_uri=args.uri)
    elif args.command == 'search':
        return search_command(
            args.source, args.pattern, config,
            regex=args.regex, include_hidden=not args.no_hidden, as_json=args.json,
        )
    elif args.command == 'convert':
        return convert_command(
            args.input, args.output, config, project=args.project, version=args.project_version
        )
    elif args.command == 'set-metadata':
        return set_metadata_command(args.file, project=args.project, version=args.project_version, mime=args.mime)
    elif args.command == 'config':
        return config_command(config, show=args.show, show_path=args.path)
    else:
        parser_cli.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
