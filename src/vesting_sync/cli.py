"""Command line entry point."""

import argparse
import asyncio
import logging
import sys

import uvicorn

from vesting_sync.core.config import Settings, get_settings
from vesting_sync.core.logging import setup_logging
from vesting_sync.main import create_app
from vesting_sync.services.event_sync.supervisor import EXIT_FATAL, SyncSupervisor

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vesting-sync",
        description="Sync vesting contract events into the database.",
    )
    parser.add_argument(
        "--no-http",
        action="store_true",
        help="run the sync loop without the HTTP server",
    )
    parser.add_argument("--host", help="HTTP listen address")
    parser.add_argument("--port", type=int, help="HTTP listen port")
    return parser


async def serve(settings: Settings, with_http: bool = True) -> int:
    """Run the sync loop, optionally beside the HTTP server.

    Returns the process exit code. A fatal sync error stops the server.
    """
    supervisor = SyncSupervisor(settings)
    if not with_http:
        return await supervisor.run()

    app = create_app(settings, supervisor)
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.http_host,
            port=settings.http_port,
            log_config=None,
        )
    )

    sync_task = asyncio.create_task(supervisor.run(), name="sync")
    server_task = asyncio.create_task(server.serve(), name="http")
    logger.info(f"Listening at http://{settings.http_host}:{settings.http_port}")

    done, _ = await asyncio.wait(
        {sync_task, server_task}, return_when=asyncio.FIRST_COMPLETED
    )

    if sync_task in done:
        server.should_exit = True
        await server_task
        return sync_task.result()

    # Server stopped first (signal); the sync loop has no clean stop point
    sync_task.cancel()
    try:
        await sync_task
    except asyncio.CancelledError:
        pass
    return 0 if server.should_exit else EXIT_FATAL


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    overrides = {}
    if args.host:
        overrides["http_host"] = args.host
    if args.port:
        overrides["http_port"] = args.port
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(settings)
    return asyncio.run(serve(settings, with_http=not args.no_http))


if __name__ == "__main__":
    sys.exit(main())
