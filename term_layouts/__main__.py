"""Entry point for python -m term_layouts.

Supports both TUI mode (default) and CLI subcommands for headless operation.

Usage:
    # Launch TUI
    python -m term_layouts

    # CLI commands (headless)
    python -m term_layouts list
    python -m term_layouts show "Dev Layout" --json
    python -m term_layouts save "Dev Layout" --group together
    python -m term_layouts rename "Dev Layout" "Backend"
    python -m term_layouts delete "Backend"
    python -m term_layouts apply "Dev Layout" --close-existing
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from term_layouts.config import get_store_dir, load_merged_config
from term_layouts.exceptions import LayoutNotFoundError, TermLayoutsError
from term_layouts.logging_config import get_logger, log_exception, setup_logging
from term_layouts.models import AppConfig, TerminalLayout, layout_to_dict
from term_layouts.partitioner import GroupingStrategy, group_separately, group_together
from term_layouts.ports import TerminalHost
from term_layouts.replay import LayoutReplayer
from term_layouts.repository import LayoutRepository
from term_layouts.storage import JsonFileStore
from term_layouts.workflows import create_named_layout, rename_layout_to

logger = get_logger("cli")


def _setup_logging(args: argparse.Namespace) -> None:
    """Configure logging based on command-line arguments."""
    if args.debug:
        setup_logging(level="DEBUG", log_to_console=True, log_to_file=True)
    else:
        setup_logging(
            level=args.log_level,
            log_to_console=False,
            log_to_file=not args.no_log_file,
        )


def _print_json(data: Any) -> None:
    """Print data as JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))


def _print_table(rows: list[dict[str, Any]], columns: list[str]) -> None:
    """Print data as a simple table."""
    if not rows:
        print("No results.")
        return

    widths = {col: len(col) for col in columns}
    for row in rows:
        for col in columns:
            widths[col] = max(widths[col], len(str(row.get(col, ""))))

    header = "  ".join(col.ljust(widths[col]) for col in columns)
    print(header)
    print("-" * len(header))
    for row in rows:
        print("  ".join(str(row.get(col, "")).ljust(widths[col]) for col in columns))


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


# =============================================================================
# Wiring
# =============================================================================


def _load_config(args: argparse.Namespace) -> AppConfig:
    config = load_merged_config(args.workspace)
    if args.store_dir:
        config.settings.store_dir = args.store_dir
    return config


def _open_repository(config: AppConfig) -> LayoutRepository:
    return LayoutRepository(JsonFileStore(get_store_dir(config)))


async def _connect_host() -> TerminalHost:
    """Connect to iTerm2 and return the terminal host.

    Raises:
        ItermConnectionError: If iTerm2 is unreachable.
    """
    from term_layouts.iterm import ItermController, ItermTerminalHost

    controller = ItermController()
    await controller.connect()
    return ItermTerminalHost(controller)


def _resolve(repository: LayoutRepository, ref: str) -> TerminalLayout:
    layout = repository.resolve(ref)
    if layout is None:
        raise LayoutNotFoundError(ref)
    return layout


def _layout_row(layout: TerminalLayout) -> dict[str, Any]:
    return {
        "ID": layout.id[:8],
        "Name": layout.name,
        "Terminals": layout.terminal_count,
        "Groups": layout.group_count,
        "Description": layout.description or "-",
    }


# =============================================================================
# CLI Command Handlers
# =============================================================================


async def cmd_list(args: argparse.Namespace) -> int:
    """Handle list command."""
    repository = _open_repository(_load_config(args))
    layouts = repository.get_all()

    if args.json:
        _print_json([layout_to_dict(layout) for layout in layouts])
        return 0

    if not layouts:
        print("No layouts saved.")
        return 0

    _print_table(
        [_layout_row(layout) for layout in layouts],
        ["ID", "Name", "Terminals", "Groups", "Description"],
    )
    return 0


async def cmd_show(args: argparse.Namespace) -> int:
    """Handle show command."""
    layout = _resolve(_open_repository(_load_config(args)), args.layout)

    if args.json:
        _print_json(layout_to_dict(layout))
        return 0

    print(f"{layout.name} ({layout.id})")
    if layout.description:
        print(f"  {layout.description}")
    print(f"  {layout.summary}")
    for group in layout.groups:
        print(f"\nGroup {group.id}:")
        _print_table(
            [
                {
                    "Name": spec.name,
                    "Directory": spec.cwd or "-",
                    "Command": spec.command or "-",
                    "Profile": spec.profile_name or "-",
                }
                for spec in group.terminals
            ],
            ["Name", "Directory", "Command", "Profile"],
        )
    return 0


async def cmd_save(args: argparse.Namespace) -> int:
    """Handle save command: capture the open terminals as a new layout."""
    config = _load_config(args)
    repository = _open_repository(config)
    host = await _connect_host()

    specs = await LayoutReplayer(host, config.settings).capture_current_terminals()
    strategy = GroupingStrategy(args.group)
    groups = group_together(specs) if strategy is GroupingStrategy.TOGETHER else group_separately(specs)

    layout = create_named_layout(repository, args.name, groups, args.description)

    if args.json:
        _print_json(layout_to_dict(layout))
    else:
        print(f'Layout "{layout.name}" saved! {layout.summary}.')
    return 0


async def cmd_rename(args: argparse.Namespace) -> int:
    """Handle rename command."""
    repository = _open_repository(_load_config(args))
    layout = _resolve(repository, args.layout)
    updated = rename_layout_to(repository, layout.id, args.new_name)
    print(f'Name updated to "{updated.name}"')
    return 0


async def cmd_delete(args: argparse.Namespace) -> int:
    """Handle delete command."""
    repository = _open_repository(_load_config(args))
    layout = _resolve(repository, args.layout)
    if not repository.delete(layout.id):
        return _error("Failed to delete layout.")
    print(f'Layout "{layout.name}" deleted.')
    return 0


async def cmd_apply(args: argparse.Namespace) -> int:
    """Handle apply command."""
    config = _load_config(args)
    layout = _resolve(_open_repository(config), args.layout)
    host = await _connect_host()

    result = await LayoutReplayer(host, config.settings).apply_layout(
        layout,
        close_existing=args.close_existing,
    )
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    print(result.message)
    return 0


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "save": cmd_save,
    "rename": cmd_rename,
    "delete": cmd_delete,
    "apply": cmd_apply,
}


async def _run_command(args: argparse.Namespace) -> int:
    """Run a subcommand, turning domain errors into exit code 1."""
    try:
        return await COMMANDS[args.command](args)
    except TermLayoutsError as e:
        log_exception(logger, e, f"{args.command} failed", include_traceback=args.debug)
        return _error(e.message)


def _run_async(coro: Any) -> int:
    """Run an async coroutine and return exit code."""
    return asyncio.run(coro)


# =============================================================================
# Argument Parser Setup
# =============================================================================


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )


def _create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="term-layouts",
        description="Save and restore split-terminal layouts in iTerm2",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Layouts are referenced by id or by name.

Examples:
  # Launch the TUI application
  term-layouts

  # List saved layouts
  term-layouts list

  # Recreate a layout, closing the terminals already open
  term-layouts apply "Dev Layout" --close-existing
""",
    )

    # Global arguments
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to console",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set log level (default: INFO)",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Disable logging to file",
    )
    parser.add_argument(
        "--store-dir",
        help="Directory holding the layout store (default: ~/.config/term-layouts)",
    )
    parser.add_argument(
        "--workspace",
        help="Workspace root for relative working directories and local config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List saved layouts")
    _add_common_args(list_parser)

    show_parser = subparsers.add_parser("show", help="Show the groups of a layout")
    show_parser.add_argument("layout", help="Layout id or name")
    _add_common_args(show_parser)

    save_parser = subparsers.add_parser("save", help="Save the open terminals as a layout")
    save_parser.add_argument("name", help="Name of the new layout")
    save_parser.add_argument(
        "--group",
        choices=[GroupingStrategy.SEPARATE.value, GroupingStrategy.TOGETHER.value],
        default=GroupingStrategy.SEPARATE.value,
        help="Open every terminal separately or split them all together (default: separate)",
    )
    save_parser.add_argument("--description", help="Optional description")
    _add_common_args(save_parser)

    rename_parser = subparsers.add_parser("rename", help="Rename a layout")
    rename_parser.add_argument("layout", help="Layout id or name")
    rename_parser.add_argument("new_name", help="New layout name")

    delete_parser = subparsers.add_parser("delete", help="Delete a layout")
    delete_parser.add_argument("layout", help="Layout id or name")

    apply_parser = subparsers.add_parser("apply", help="Recreate a layout in iTerm2")
    apply_parser.add_argument("layout", help="Layout id or name")
    apply_parser.add_argument(
        "--close-existing",
        action="store_true",
        help="Close every open terminal first",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for term-layouts."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    _setup_logging(args)

    if args.command in COMMANDS:
        return _run_async(_run_command(args))

    # No subcommand - launch TUI
    from term_layouts.app import TermLayoutsApp

    try:
        config = _load_config(args)
    except TermLayoutsError as e:
        log_exception(logger, e, "Failed to load config")
        return _error(e.message)
    TermLayoutsApp(config, workspace=args.workspace).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
