"""Undoviz CLI — undoviz graph / diff / preview / watch.

Entry point for the ``undoviz`` command-line interface. Every command reads
a recorded history document (JSON or YAML) in place of a live editor.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from undoviz._errors import UndovizError

if TYPE_CHECKING:
    from undoviz.session import HistorySession


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the undoviz CLI."""
    parser = argparse.ArgumentParser(
        prog="undoviz",
        description="Visualize branching undo history and diff historical states.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # undoviz graph
    graph_parser = subparsers.add_parser("graph", help="Draw the undo tree")
    _add_common(graph_parser)
    graph_parser.add_argument("--current", type=int, default=None, help="Mark this seq as current")
    graph_parser.add_argument(
        "--mirror", action="store_true", default=None, help="Draw the graph right-to-left",
    )
    graph_parser.add_argument(
        "--inline", action="store_true", default=None, help="Show change counts per state",
    )
    graph_parser.add_argument(
        "--no-header", dest="header", action="store_false", default=None, help="Omit the header",
    )

    # undoviz diff
    diff_parser = subparsers.add_parser("diff", help="Diff two historical states")
    _add_common(diff_parser)
    diff_parser.add_argument("before", type=int, help="Older state seq")
    diff_parser.add_argument("after", type=int, help="Newer state seq")
    diff_parser.add_argument("--context", type=int, default=None, help="Context lines per hunk")

    # undoviz preview
    preview_parser = subparsers.add_parser(
        "preview", help="Show what one state changed relative to its parent",
    )
    _add_common(preview_parser)
    preview_parser.add_argument("seq", type=int, help="State to preview")
    preview_parser.add_argument(
        "--against-current", action="store_true", help="Diff against the current state instead",
    )

    # undoviz watch
    watch_parser = subparsers.add_parser("watch", help="Redraw the graph whenever FILE changes")
    _add_common(watch_parser)

    return parser


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="Recorded history document (.json, .yaml, .yml)")
    parser.add_argument(
        "--config", default=None, help="Directory holding undoviz.yaml (default: FILE's directory)",
    )


def _get_version() -> str:
    """Get the package version."""
    from undoviz import __version__

    return __version__


def _open_session(args: argparse.Namespace, **overrides: object) -> HistorySession:
    from undoviz.config_loader import load_config
    from undoviz.host import RecordedHistory
    from undoviz.session import HistorySession

    path = Path(args.file)
    config_root = Path(args.config) if args.config else path.resolve().parent
    config = load_config(config_root, **overrides)
    host = RecordedHistory.from_file(path)
    return HistorySession(host, config, label=f"Undoviz ({path.name})")


def _print_lines(lines: list[str]) -> None:
    sys.stdout.write("".join(f"{line}\n" for line in lines))


def _run_graph(args: argparse.Namespace) -> None:
    session = _open_session(
        args, mirror_graph=args.mirror, inline_diff=args.inline, header=args.header,
    )
    if args.current is not None:
        session.revert(args.current)
    _print_lines(session.render_graph())


def _run_diff(args: argparse.Namespace) -> None:
    session = _open_session(args, context_lines=args.context)
    _print_lines(session.diff_states(args.before, args.after))


def _run_preview(args: argparse.Namespace) -> None:
    session = _open_session(args)
    if args.against_current:
        _print_lines(session.diff_with_current(args.seq))
    else:
        _print_lines(session.preview(args.seq))


def _run_watch(args: argparse.Namespace) -> None:
    from undoviz.watcher import HistoryWatcher

    session = _open_session(args)
    _print_lines(session.render_graph())
    watcher = HistoryWatcher(Path(args.file))
    try:
        for batch in watcher.changes():
            names = ", ".join(sorted({change.path.name for change in batch}))
            print(f"  Changed: {names}", file=sys.stderr)
            try:
                session = _open_session(args)
            except UndovizError as exc:
                print(f"  Reload error: {exc}", file=sys.stderr)
                continue
            _print_lines(session.render_graph())
    except KeyboardInterrupt:
        watcher.stop()


_COMMANDS = {
    "graph": _run_graph,
    "diff": _run_diff,
    "preview": _run_preview,
    "watch": _run_watch,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        _COMMANDS[args.command](args)
    except UndovizError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
