"""
modsync - Command line and interactive menu

Thin presentation layer over ModuleReconciler.  Every command here maps
onto exactly one reconciler operation and only renders its result.

    python main.py                      # interactive menu
    python main.py check
    python main.py download module_01 module_02
    python main.py update --all
    python main.py execute module_01
    python main.py status --json

# ---- Changelog ----
# [2026-10-19] Initial creation.
#   What: argparse CLI (menu, check, download, update, execute, status)
#         with Rich tables and rich.prompt selection.
#   How:  Empty candidate lists are a normal "nothing to do" result.
#         Exit code is 1 only when a non-interactive download/update had
#         a failed item or an execution failed.
# -------------------
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config_schema import ModSyncConfig, load_and_validate
from modsync.models import (
    ExecutionOutcome,
    ExecutionResult,
    ModuleCheck,
    ModuleState,
    ModuleStatus,
    OperationResult,
    is_module_name,
)
from modsync.reconciler import ModuleReconciler

logger = logging.getLogger("modsync")

MENU_DOWNLOAD_INTERACTIVE = "Download modules interactively"
MENU_DOWNLOAD_ONE = "Download a specific module"
MENU_CHECK = "Check modules"
MENU_EXECUTE = "Execute a module"
MENU_UPDATE = "Update modules"
MENU_EXIT = "Exit"

MENU_ACTIONS = [
    MENU_DOWNLOAD_INTERACTIVE,
    MENU_DOWNLOAD_ONE,
    MENU_CHECK,
    MENU_EXECUTE,
    MENU_UPDATE,
    MENU_EXIT,
]

STATE_COLORS = {
    ModuleState.CURRENT: "green",
    ModuleState.STALE: "yellow",
    ModuleState.NOT_DOWNLOADED: "cyan",
    ModuleState.LOCAL_ONLY: "magenta",
    ModuleState.UNKNOWN: "red",
}


def build_reconciler(config: ModSyncConfig) -> ModuleReconciler:
    return ModuleReconciler.from_config(config)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _print_check(console: Console, check: ModuleCheck) -> None:
    console.print("[bold]Downloaded modules:[/]")
    for name in check.downloaded:
        console.print(f"  - {name}")
    if not check.downloaded:
        console.print("  (none)")

    console.print("\n[bold]Not downloaded modules:[/]")
    for name in check.not_downloaded:
        console.print(f"  - {name}")
    if not check.not_downloaded:
        console.print("  (none)")


def _print_results(console: Console, results: Sequence[OperationResult]) -> None:
    for r in results:
        if r.success:
            console.print(f"[green]✓[/] {r.module}: {r.action} complete")
        else:
            console.print(f"[red]✗[/] {r.module}: {r.action} failed ({r.error})")


def _print_status(console: Console, statuses: Sequence[ModuleStatus]) -> None:
    if not statuses:
        console.print("No modules found remotely or locally.")
        return

    table = Table(title="Module Status")
    table.add_column("Module", style="cyan")
    table.add_column("Remote", justify="center")
    table.add_column("Local", justify="center")
    table.add_column("State")
    table.add_column("Detail", style="dim")

    for s in statuses:
        color = STATE_COLORS.get(s.state, "white")
        table.add_row(
            s.module,
            "yes" if s.remote else "-",
            "yes" if s.local else "-",
            f"[{color}]{s.state.value}[/]",
            s.error or "",
        )

    console.print(table)


def _print_execution(console: Console, result: ExecutionResult) -> None:
    if result.outcome == ExecutionOutcome.OK:
        console.print(f"[green]{result.module} finished[/] in {result.elapsed_ms:.1f}ms")
    elif result.outcome == ExecutionOutcome.NOT_DOWNLOADED:
        console.print(Panel(
            f"Module {result.module} is not downloaded. Download it first.",
            title="Not downloaded", border_style="yellow",
        ))
    else:
        console.print(Panel(
            f"Error executing module {result.module}:\n{result.error}",
            title="Execution failed", border_style="red",
        ))


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

def _select_many(console: Console, message: str, choices: Sequence[str]) -> List[str]:
    """Numbered multi-select.  Returns choices in the order entered."""
    for i, name in enumerate(choices, 1):
        console.print(f"  [cyan]{i}[/]) {name}")

    while True:
        answer = Prompt.ask(
            f"{message} (numbers separated by commas, 'all', or blank for none)",
            default="", console=console,
        ).strip()
        if not answer:
            return []
        if answer.lower() == "all":
            return list(choices)

        selected: List[str] = []
        try:
            for token in answer.split(","):
                index = int(token.strip())
                if not 1 <= index <= len(choices):
                    raise ValueError(token)
                if choices[index - 1] not in selected:
                    selected.append(choices[index - 1])
        except ValueError:
            console.print(f"[red]Enter numbers between 1 and {len(choices)}[/]")
            continue
        return selected


def interactive_download(reconciler: ModuleReconciler, console: Console) -> None:
    check = reconciler.check_modules()
    _print_check(console, check)

    if not check.not_downloaded:
        console.print("\nAll modules are already downloaded.")
        return

    selected = _select_many(console, "Select the modules to download", check.not_downloaded)
    _print_results(console, reconciler.download_modules(selected))
    console.print("Download finished.")


def interactive_download_one(reconciler: ModuleReconciler, console: Console, prefix: str) -> None:
    while True:
        name = Prompt.ask(
            f"Module name to download (e.g. {prefix}01)", console=console,
        ).strip()
        if is_module_name(name, prefix):
            break
        console.print(f'[red]The module name must start with "{prefix}"[/]')

    _print_results(console, reconciler.download_modules([name]))


def interactive_execute(reconciler: ModuleReconciler, console: Console) -> None:
    local_modules = reconciler.local.list_modules()
    if not local_modules:
        console.print("No downloaded modules to execute. Download some modules first.")
        return

    name = Prompt.ask("Select the module to execute", choices=local_modules, console=console)
    _print_execution(console, reconciler.execute_module(name))


def interactive_update(reconciler: ModuleReconciler, console: Console) -> None:
    updatable = reconciler.check_all_modules_for_updates()
    if not updatable:
        console.print("All modules are up to date.")
        return

    console.print("[bold]Modules with updates available:[/]")
    selected = _select_many(console, "Select the modules to update", updatable)
    _print_results(console, reconciler.update_modules(selected))
    console.print("Update finished.")


def run_menu(reconciler: ModuleReconciler, console: Console, prefix: str) -> int:
    """Interactive loop.  Runs until the user picks Exit."""
    while True:
        console.print()
        for i, action in enumerate(MENU_ACTIONS, 1):
            console.print(f"  [cyan]{i}[/]) {action}")
        choice = Prompt.ask(
            "What would you like to do?",
            choices=[str(i) for i in range(1, len(MENU_ACTIONS) + 1)],
            console=console,
        )
        action = MENU_ACTIONS[int(choice) - 1]

        if action == MENU_DOWNLOAD_INTERACTIVE:
            interactive_download(reconciler, console)
        elif action == MENU_DOWNLOAD_ONE:
            interactive_download_one(reconciler, console, prefix)
        elif action == MENU_CHECK:
            _print_check(console, reconciler.check_modules())
        elif action == MENU_EXECUTE:
            interactive_execute(reconciler, console)
        elif action == MENU_UPDATE:
            interactive_update(reconciler, console)
        else:
            console.print("Goodbye!")
            return 0


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------

def _emit_json(data) -> None:
    print(json.dumps(data, indent=2))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="modsync - mirror a remote module catalog locally",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="menu",
        choices=["menu", "check", "download", "update", "execute", "status"],
        help="Command to execute (default: interactive menu)",
    )
    parser.add_argument(
        "modules",
        nargs="*",
        help="Module names (for download, update and execute)",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="With 'update': update every module that has changes upstream",
    )
    parser.add_argument(
        "--config", "-c",
        default="config.yaml",
        help="Path to config.yaml",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output raw JSON instead of Rich formatted output",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    # Setup logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(name)s %(levelname)s: %(message)s",
    )

    config = load_and_validate(args.config)
    reconciler = build_reconciler(config)
    console = Console()

    for name in args.modules:
        if not is_module_name(name, config.module_prefix):
            parser.error(f'module name {name!r} must start with "{config.module_prefix}"')

    if args.command == "menu":
        return run_menu(reconciler, console, config.module_prefix)

    if args.command == "check":
        check = reconciler.check_modules()
        if args.json:
            _emit_json(check.to_dict())
        else:
            _print_check(console, check)
        return 0

    if args.command == "status":
        statuses = reconciler.status()
        if args.json:
            _emit_json([s.to_dict() for s in statuses])
        else:
            _print_status(console, statuses)
        return 0

    if args.command == "download":
        if not args.modules:
            parser.error("download requires at least one module name")
        results = reconciler.download_modules(args.modules)

    elif args.command == "update":
        if args.all and args.modules:
            parser.error("update takes either module names or --all, not both")
        if args.all:
            names = reconciler.check_all_modules_for_updates()
        elif args.modules:
            names = list(args.modules)
        else:
            parser.error("update requires module names or --all")
        if not names:
            if args.json:
                _emit_json([])
            else:
                console.print("All modules are up to date.")
            return 0
        results = reconciler.update_modules(names)

    else:
        if len(args.modules) != 1:
            parser.error("execute requires exactly one module name")
        result = reconciler.execute_module(args.modules[0])
        if args.json:
            _emit_json(result.to_dict())
        else:
            _print_execution(console, result)
        return 0 if result.ok else 1

    if args.json:
        _emit_json([r.to_dict() for r in results])
    else:
        _print_results(console, results)
    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
