"""pocketdrive entry point.

  pocketdrive serve            Start the API server
  pocketdrive ls [PATH]        Print a directory listing of a disk
"""

import argparse
import asyncio
import logging
import sys

from pocketdrive import __version__
from pocketdrive.config import get_settings
from pocketdrive.errors import FileManagerError
from pocketdrive.logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _print_listing(path: str, disk: str | None) -> int:
    from pocketdrive.navigation import NavigationController
    from pocketdrive.sessions import SessionManager

    session = SessionManager(get_settings()).create(disk)
    controller = NavigationController(session)
    entries = await controller.navigate(path)

    print(f"{session.disk}: {controller.heading}")
    for entry in entries:
        modified = entry.modified_at.strftime("%Y-%m-%d %H:%M") if entry.modified_at else ""
        print(f"  {entry.kind.value:<6}  {modified:<16}  {entry.display_size:>9}  {entry.name}")
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="pocketdrive",
        description="File manager service for local and OneDrive disks",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")

    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Start the API server")
    serve.add_argument("--host", default=None, help="Bind address (default from settings)")
    serve.add_argument("--port", type=int, default=None, help="Port (default from settings)")
    serve.add_argument("--dev", action="store_true", help="Auto-reload on code changes")

    ls = sub.add_parser("ls", help="List a folder on a disk")
    ls.add_argument("path", nargs="?", default="", help="Folder path (default: root)")
    ls.add_argument("--disk", default=None, help="Disk name (default from settings)")

    args = parser.parse_args()
    setup_logging(level=args.log_level)

    if args.command == "ls":
        try:
            sys.exit(asyncio.run(_print_listing(args.path, args.disk)))
        except FileManagerError as e:
            logger.error("%s", e)
            sys.exit(1)

    from pocketdrive.api.serve import run_api_server

    settings = get_settings()
    run_api_server(
        host=getattr(args, "host", None) or settings.host,
        port=getattr(args, "port", None) or settings.port,
        dev=getattr(args, "dev", False),
    )


if __name__ == "__main__":
    main()
