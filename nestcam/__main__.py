"""
Command-line demo: stream events or snapshots from a Nest camera.

Reads NEST_ID, REFRESH_TOKEN, CLIENT_ID and API_KEY from the environment
(or a .env file in the working directory).

Usage:
    python -m nestcam --stream event
    python -m nestcam --stream snapshot --save-dir assets --duration 60
"""
# Standard library imports
import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# External package imports
from dotenv import load_dotenv

# Local application imports
from .application import NestCamera
from .core.config import get_settings
from .core.exceptions import NestCameraError
from .domain.models import StreamKind
from .infrastructure.http_client_factory import close_shared_http_client
from .utils.snapshot_storage import save_snapshot

logger = logging.getLogger("nestcam")


def _options_from_env() -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "nest_id": os.getenv("NEST_ID"),
        "refresh_token": os.getenv("REFRESH_TOKEN"),
        "api_key": os.getenv("API_KEY"),
        "client_id": os.getenv("CLIENT_ID"),
    }
    if os.getenv("NEST_HOST"):
        options["host"] = os.getenv("NEST_HOST")
    return options


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nestcam", description="Stream events or snapshots from a Nest camera")
    parser.add_argument(
        "--stream",
        default=StreamKind.EVENT.value,
        choices=[kind.value for kind in StreamKind],
        help="Stream to subscribe to (default: event)",
    )
    parser.add_argument("--save-dir", default=None, help="Directory for snapshot images (default: NEST_SNAPSHOT_DIR)")
    parser.add_argument("--duration", type=float, default=None, help="Stop after this many seconds (default: run until interrupted)")
    parser.add_argument("--event-interval", type=int, default=None, help="Events poll interval in ms")
    parser.add_argument("--snapshot-interval", type=int, default=None, help="Snapshot poll interval in ms")
    return parser


async def run(args: argparse.Namespace) -> int:
    options = _options_from_env()
    if args.event_interval:
        options["event_interval"] = args.event_interval
    if args.snapshot_interval:
        options["snapshot_interval"] = args.snapshot_interval

    try:
        camera = NestCamera(options)
    except NestCameraError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    def on_event(event: Dict[str, Any]) -> None:
        logger.info(f"Event received: {event}")

    def on_snapshot(data: bytes) -> None:
        save_snapshot(data, args.save_dir)

    def on_error(error: BaseException) -> None:
        logger.warning(f"Stream error: {error}")

    try:
        async with camera:
            await camera.init()
            handler = on_event if args.stream == StreamKind.EVENT.value else on_snapshot
            camera.subscribe(args.stream, handler, on_error)
            if args.duration is not None:
                await asyncio.sleep(args.duration)
            else:
                await asyncio.Event().wait()
    except NestCameraError as e:
        logger.error(f"Camera client failed: {e}")
        return 1
    finally:
        await close_shared_http_client()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(Path.cwd() / ".env")
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
