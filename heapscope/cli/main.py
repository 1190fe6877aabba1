"""CLI: heapscope query, tui, serve, config validate."""

from __future__ import annotations

import argparse
import asyncio
import sys

from ..config import configure_logging, load_config, validate_config
from ..types import SORT_ORDERS, HeapscopeConfig


def _load(args) -> HeapscopeConfig:
    config = load_config(args.config)
    if getattr(args, "url", None):
        config.server.base_url = args.url
    if getattr(args, "sort", None):
        config.render.sort_by = args.sort
    if getattr(args, "depth", None) is not None:
        config.render.expand_depth = args.depth
    configure_logging(config, verbose=args.verbose)
    return config


async def _run_query(config: HeapscopeConfig, query: str | None) -> int:
    from ..client import HeapClient
    from ..sinks import ConsoleSink

    sink = ConsoleSink(
        expand_depth=config.render.expand_depth,
        sort_by=config.render.sort_by,
    )
    async with HeapClient(config, sink=sink) as client:
        client.init(query)
        errors = await client.join()
        if client.queue:
            print(
                f"{len(client.queue)} chained request(s) not sent: "
                f"{', '.join(client.queue)}",
                file=sys.stderr,
            )
    return 1 if errors else 0


def cmd_query(args):
    """Run a session: reset, load class definitions, run one query."""
    config = _load(args)
    sys.exit(asyncio.run(_run_query(config, args.query)))


def cmd_tui(args):
    """Interactive histogram browser."""
    from ..tui.app import HeapApp

    config = _load(args)
    HeapApp(config=config, initial_query=args.query).run()


def cmd_serve(args):
    """Serve a heap snapshot over the heapscope protocol."""
    import uvicorn

    from ..server import capture_snapshot, create_app, load_snapshot

    config = _load(args)
    if args.self_heap:
        snapshot = capture_snapshot()
    elif args.snapshot:
        snapshot = load_snapshot(args.snapshot)
    else:
        print("Error: give a SNAPSHOT file or --self", file=sys.stderr)
        sys.exit(1)

    print(
        f"heapscope snapshot server on {args.host}:{args.port} "
        f"({len(snapshot.classes)} classes, {len(snapshot.histo)} samples)"
    )
    uvicorn.run(
        create_app(snapshot), host=args.host, port=args.port,
        log_level=config.log_level.lower(),
    )


def cmd_config_validate(args):
    """Validate config file."""
    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    errors = validate_config(config)
    if errors:
        print("Config validation errors:")
        for e in errors:
            print(f"  - {e}")
        sys.exit(1)
    print("Config is valid.")
    print(f"  Server:     {config.server.base_url}")
    print(f"  Timeout:    {config.server.timeout if config.server.timeout is not None else 'none'}")
    print(f"  Init query: {config.init_query}")
    print(f"  Sort by:    {config.render.sort_by}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heapscope",
        description="Browse heap histograms from a heap-profiling server",
    )
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # query
    query_parser = subparsers.add_parser("query", help="Run one query and print the histogram")
    query_parser.add_argument("query", nargs="?", help="Query string (default: init_query from config)")
    query_parser.add_argument("--url", "-u", help="Server base URL")
    query_parser.add_argument("--sort", choices=SORT_ORDERS, help="Row order")
    query_parser.add_argument("--depth", "-d", type=int, help="Package levels to print below the top")

    # tui
    tui_parser = subparsers.add_parser("tui", help="Interactive histogram browser")
    tui_parser.add_argument("query", nargs="?", help="First query (default: init_query from config)")
    tui_parser.add_argument("--url", "-u", help="Server base URL")
    tui_parser.add_argument("--sort", choices=SORT_ORDERS, help="Row order")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Serve a heap snapshot (development fixture)")
    serve_parser.add_argument("snapshot", nargs="?", help="Snapshot file (YAML or JSON)")
    serve_parser.add_argument(
        "--self", dest="self_heap", action="store_true",
        help="Serve this process's own heap instead of a file",
    )
    serve_parser.add_argument("--port", "-p", type=int, default=7070)
    serve_parser.add_argument("--host", default="127.0.0.1")

    # config validate
    config_parser = subparsers.add_parser("config", help="Config operations")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.add_parser("validate", help="Validate config file")

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "query":
        cmd_query(args)
    elif args.command == "tui":
        cmd_tui(args)
    elif args.command == "serve":
        cmd_serve(args)
    elif args.command == "config":
        if args.config_command == "validate":
            cmd_config_validate(args)
        else:
            print("Usage: heapscope config validate")
            sys.exit(1)


if __name__ == "__main__":
    main()
