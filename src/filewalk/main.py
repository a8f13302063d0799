"""Command line entry point for filewalk."""

from __future__ import annotations

import argparse
import asyncio
import importlib
import signal
import sys
from pathlib import Path
from typing import Any, Callable

from rich.console import Console
from rich.table import Table

from .config import WalkConfig
from .errors import ConfigurationError, ResolutionError, WalkError
from .ignore import should_ignore
from .logsetup import setup_logging
from .progress import ProgressSnapshot
from .resolver import GlobResolver
from .walker import Processor, Walk
from .watcher import TreeWatcher


def _add_walk_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--root", "-r", type=Path, default=None, help="Root directory to walk")
    parser.add_argument("--pattern", "-p", default=None, help="Glob pattern relative to root")
    parser.add_argument("--ignore", "-i", default=None, help="Regex of paths to skip")


def _add_processor_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--concurrency",
        "-j",
        type=int,
        default=None,
        help="Number of files processed at the same time",
    )
    parser.add_argument(
        "--processor",
        "-x",
        default=None,
        help="Processor to run, as module:function",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments.

    """
    parser = argparse.ArgumentParser(
        prog="filewalk",
        description="Run a processor over every file matching a glob pattern",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Scan command
    scan_parser = subparsers.add_parser("scan", help="List matching files without processing them")
    _add_walk_options(scan_parser)

    # Run command
    run_parser = subparsers.add_parser("run", help="Run the processor once")
    _add_walk_options(run_parser)
    _add_processor_options(run_parser)
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort the run after this many seconds",
    )

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Run the processor again whenever files change")
    _add_walk_options(watch_parser)
    _add_processor_options(watch_parser)
    watch_parser.add_argument(
        "--debounce",
        type=float,
        default=0.5,
        help="Seconds to wait for further changes before re-running",
    )

    # Config command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Create default configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    return parser.parse_args(argv)


def load_processor(reference: str | None) -> Processor[Any]:
    """Import a processor from a ``module:function`` reference.

    Raises:
        ConfigurationError: If the reference is missing, malformed or unresolvable.

    """
    if not reference:
        raise ConfigurationError("Missing processor (use --processor module:function)")

    module_name, sep, attr_path = reference.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Processor must look like module:function, got {reference!r}")

    # Allow processors defined in the working directory
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import processor module {module_name!r}: {e}") from e

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError as e:
            raise ConfigurationError(f"{module_name!r} has no attribute {attr_path!r}") from e

    if not callable(target):
        raise ConfigurationError(f"Processor {reference!r} is not callable")
    return target


def apply_overrides(config: WalkConfig, args: argparse.Namespace) -> WalkConfig:
    """Merge command line options into the loaded configuration."""
    return config.replace(
        root=getattr(args, "root", None),
        pattern=getattr(args, "pattern", None),
        ignore=getattr(args, "ignore", None),
        concurrency=getattr(args, "concurrency", None),
        processor=getattr(args, "processor", None),
    )


def print_summary(console: Console, snapshot: ProgressSnapshot) -> None:
    table = Table(title=f"Walk of {snapshot.root}")
    table.add_column("Total", justify="right")
    table.add_column("Success", style="green", justify="right")
    table.add_column("Failed", style="red", justify="right")
    table.add_column("Ignored", style="dim", justify="right")
    table.add_row(str(snapshot.total), str(snapshot.success), str(snapshot.failed), str(snapshot.ignored))
    console.print(table)


def cmd_scan(config: WalkConfig, args: argparse.Namespace) -> int:
    """Execute scan command.

    Args:
        config: Walk configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()
    config = apply_overrides(config, args)
    files = GlobResolver().resolve_sync(config.root, config.pattern)

    if not files:
        console.print("[green]No matching files found[/green]")
        return 0

    table = Table(title=f"Found {len(files)} files")
    table.add_column("File", style="cyan")
    table.add_column("Ignored", style="dim")

    for path in files:
        ignored = should_ignore(config.ignore, path)
        table.add_row(str(path.relative_to(config.root.resolve())), "yes" if ignored else "")

    console.print(table)
    return 0


def cmd_run(config: WalkConfig, args: argparse.Namespace) -> int:
    """Execute run command.

    Args:
        config: Walk configuration.
        args: Parsed arguments.

    Returns:
        Exit code, 1 if any file failed.

    """
    console = Console()
    config = apply_overrides(config, args)
    processor = load_processor(config.processor)
    walker = Walk(config)

    try:
        asyncio.run(walker.run(processor, timeout=args.timeout))
    except TimeoutError:
        console.print(f"[red]Walk timed out after {args.timeout}s[/red]")
        return 1

    snapshot = walker.last_snapshot
    if snapshot is None:
        return 1
    print_summary(console, snapshot)
    return 1 if snapshot.failed else 0


async def watch_loop(
    walker: Walk,
    processor: Processor[Any],
    watcher: TreeWatcher,
    stop: asyncio.Event,
    *,
    debounce: float = 0.5,
    on_run: Callable[[ProgressSnapshot], None] | None = None,
) -> int:
    """Run the walker, then run it again after each batch of changes.

    Changes caused by the run itself are discarded once the run finishes.

    Returns:
        Number of completed runs.

    """
    runs = 0
    watcher.start()
    try:
        while not stop.is_set():
            await walker.run(processor)
            runs += 1
            if on_run is not None and walker.last_snapshot is not None:
                on_run(walker.last_snapshot)

            await asyncio.sleep(debounce)
            watcher.clear_pending()

            while not stop.is_set():
                if await watcher.wait_for_change(timeout=0.2) is not None:
                    break
            else:
                break

            # Let a burst of changes settle into a single run
            await asyncio.sleep(debounce)
            watcher.clear_pending()
    finally:
        watcher.stop()
    return runs


def cmd_watch(config: WalkConfig, args: argparse.Namespace) -> int:
    """Execute watch command.

    Args:
        config: Walk configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()
    config = apply_overrides(config, args)
    processor = load_processor(config.processor)
    walker = Walk(config)

    async def _main() -> int:
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop.set)

        watcher = TreeWatcher(config.root, config.ignore)
        return await watch_loop(
            walker,
            processor,
            watcher,
            stop,
            debounce=args.debounce,
            on_run=lambda snapshot: print_summary(console, snapshot),
        )

    runs = asyncio.run(_main())
    console.print(f"[green]Stopped after {runs} runs[/green]")
    return 0


def cmd_config(config: WalkConfig, args: argparse.Namespace) -> int:
    """Execute config command.

    Args:
        config: Walk configuration.
        args: Parsed arguments.

    Returns:
        Exit code.

    """
    console = Console()

    if args.init:
        config_path = args.config or WalkConfig.get_config_path()
        if config_path.exists():
            console.print(f"[yellow]Config already exists: {config_path}[/yellow]")
            return 1
        config.save(config_path)
        console.print(f"[green]Created config: {config_path}[/green]")
        return 0

    if args.show:
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Root", str(config.root))
        table.add_row("Pattern", config.pattern)
        table.add_row("Concurrency", str(config.concurrency))
        table.add_row("Ignore", str(config.ignore))
        table.add_row("Processor", config.processor or "-")
        table.add_row("Log level", config.log_level)
        table.add_row("Log file", str(config.log_file) if config.log_file else "-")

        console.print(table)
        return 0

    console.print("[yellow]Use --init or --show[/yellow]")
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)
    console = Console(stderr=True)

    try:
        config = WalkConfig.load(args.config)
        setup_logging(config.log_level, config.log_file)

        command = args.command or "scan"
        if command == "scan":
            return cmd_scan(config, args)
        elif command == "run":
            return cmd_run(config, args)
        elif command == "watch":
            return cmd_watch(config, args)
        elif command == "config":
            return cmd_config(config, args)
        else:
            console.print(f"Unknown command: {command}")
            return 1
    except (ConfigurationError, ResolutionError) as e:
        console.print(f"[red]{e}[/red]")
        return 2
    except WalkError as e:
        console.print(f"[red]Walk failed: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
