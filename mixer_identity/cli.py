"""
mixer-identity - CLI entry point.
Provides run, sessions, and tree subcommands.
"""

import argparse
import logging
import os
import sys

from .__version__ import __version__
from .config import load_config
from .constants import DEFAULT_PORT, MAX_DIAGNOSTICS_CHAIN
from .models import MixerIdentityError
from .process_tree import ancestry_chain, process_name

logger = logging.getLogger(__name__)


def _setup_logging(level: str, verbose: int) -> None:
    if verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_run(args, config) -> int:
    """Run a command and present its audio under our name."""
    from .host import HostSession

    command = list(args.child)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        print("No command given. Example: mixer-identity run -- msedge --app=https://example.com")
        return 2

    # An explicit --port implies --status
    port = config.port if (args.status or args.port is not None) else None
    host = HostSession(command, config)
    print(f"  mixer-identity v{__version__}: presenting audio as '{config.display_name}'")
    if port:
        print(f"  Status API at http://localhost:{port}/api/session")
    return host.run(port=port)


def cmd_sessions(args, config) -> int:
    """List every session on the default render endpoint with its ownership verdict."""
    from .attributor import SessionAttributor
    from .audio import AudioEndpoint
    from .dispatcher import Dispatcher
    from .tracker import SessionLifecycleTracker

    attributor = SessionAttributor(
        SessionLifecycleTracker(Dispatcher()),
        config.identity,
        notify_user=lambda message: None,
        host_pid=args.host_pid,
        max_depth=config.max_ancestry_depth,
    )
    endpoint = AudioEndpoint()
    try:
        sessions = endpoint.sessions()
        print(f"Audio sessions (owner check against PID {attributor.host_pid}):")
        for session in sessions:
            info = attributor.describe(session)
            flag = "system" if info.is_system_sounds else ("owned" if info.owned else "-")
            print(
                f"- PID {info.process_id:<7} {info.process_name or '?':<28} "
                f"{info.state:<9} {flag:<7} {info.display_name}"
            )
            session.release()
    finally:
        endpoint.release()
    return 0


def cmd_tree(args, _config) -> int:
    """Print the ancestry chain of a process."""
    chain = ancestry_chain(args.pid, max_depth=MAX_DIAGNOSTICS_CHAIN)
    if not chain:
        print(f"PID {args.pid} not found.")
        return 1
    for depth, pid in enumerate(chain):
        print(f"{'  ' * depth}PID {pid} {process_name(pid) or '(lookup failed)'}")
    return 0


def main(argv=None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="mixer-identity",
        description="Show a child program's audio under your own name in the volume mixer",
        epilog=(
            "Examples:\n"
            "  mixer-identity run -- msedge --app=https://example.com\n"
            '  mixer-identity run --name "My Player" --status -- player.exe\n'
            "  mixer-identity sessions                  List audio sessions\n"
            "  mixer-identity tree 1234                 Show a process's ancestry\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="More logging (-vv for debug)")
    sub = parser.add_subparsers(dest="command")

    run_p = sub.add_parser("run", help="Run a command and rename its audio session")
    run_p.add_argument("--name", help="Display name in the volume mixer")
    run_p.add_argument("--icon", help="Icon path (e.g. C:\\app.exe,0)")
    run_p.add_argument(
        "--release-delay", type=float, help="Seconds to defer release after a session ends"
    )
    run_p.add_argument(
        "--status", action="store_true", help="Serve the local status API on the configured port"
    )
    run_p.add_argument(
        "--port", type=int, help=f"Serve the status API on this port (default: {DEFAULT_PORT})"
    )
    run_p.add_argument("child", nargs=argparse.REMAINDER, help="Command to run (after --)")

    sessions_p = sub.add_parser("sessions", help="List audio sessions on the default endpoint")
    sessions_p.add_argument(
        "--host-pid",
        type=int,
        default=os.getpid(),
        help="Process whose tree counts as owned (default: this process)",
    )

    tree_p = sub.add_parser("tree", help="Print the ancestry chain of a process")
    tree_p.add_argument("pid", type=int)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        config = load_config(
            display_name=getattr(args, "name", None),
            icon_path=getattr(args, "icon", None),
            release_delay=getattr(args, "release_delay", None),
            port=getattr(args, "port", None),
        )
    except MixerIdentityError as e:
        print(f"Configuration error: {e}")
        return 2
    _setup_logging(config.log_level, args.verbose)

    handler = {
        "run": cmd_run,
        "sessions": cmd_sessions,
        "tree": cmd_tree,
    }[args.command]
    try:
        return handler(args, config)
    except MixerIdentityError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
