"""autovoice entry point — connects to IRC and runs the promotion engine."""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pydantic import ValidationError

from autovoice.config import Settings, load_settings
from autovoice.engine.loop import PromotionEngine
from autovoice.irc.base import TransportError
from autovoice.irc.client import IRCClient

log = logging.getLogger("autovoice")

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s — %(message)s"

# -v count -> (root level, autovoice level)
_VERBOSITY = {
    0: (logging.WARNING, logging.INFO),
    1: (logging.INFO, logging.DEBUG),
}


def _version() -> str:
    try:
        return version("autovoice")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autovoice", description="Voice IRC channel members after they have waited long enough."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase logging output (can be used multiple times)",
    )
    parser.add_argument("--server", help="irc server")
    parser.add_argument("--port", type=int, help="irc server port (default 6697)")
    parser.add_argument(
        "--tls", dest="use_tls", action=argparse.BooleanOptionalAction, default=None,
        help="connect with TLS (default on)",
    )
    parser.add_argument("--nickname", help="irc user nickname")
    parser.add_argument("--password", help="irc user password (or IRC_USER_PASSWORD)")
    parser.add_argument("--channel", help="irc channel to moderate")

    group = parser.add_mutually_exclusive_group()
    group.add_argument("--promote-after-seconds", type=int, help="Wait this many seconds before promoting a user")
    group.add_argument("--promote-after-minutes", type=int, help="Wait this many minutes before promoting a user")
    group.add_argument("--promote-after-hours", type=int, help="Wait this many hours before promoting a user")

    parser.add_argument("--check-interval", type=float, help="seconds between promotion checks (default 60)")
    return parser


def setup_logging(verbose: int) -> None:
    root_level, app_level = _VERBOSITY.get(verbose, (logging.DEBUG, logging.DEBUG))
    logging.basicConfig(level=root_level, format=LOG_FORMAT, force=True)
    logging.getLogger("autovoice").setLevel(app_level)


async def start(settings: Settings) -> None:
    """Connect, join, and promote until the connection dies."""
    client = IRCClient(
        settings.server,
        settings.nickname,
        settings.channel,
        port=settings.port,
        password=settings.password,
        use_tls=settings.use_tls,
    )
    engine = PromotionEngine(
        client,
        channel=settings.channel,
        nickname=settings.nickname,
        cooldown=settings.cooldown,
        jitter=settings.jitter,
    )

    scheduler = AsyncIOScheduler()
    try:
        await client.connect()
        await client.identify()

        scheduler.add_job(
            engine.request_check,
            IntervalTrigger(seconds=settings.check_interval),
            id="promotion_check",
            next_run_time=datetime.now(),
        )
        scheduler.start()
        log.info(
            "Moderating %s (cooldown %ss, check every %ss)",
            settings.channel, settings.cooldown, settings.check_interval,
        )

        await engine.run()
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)
        await client.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(
            server=args.server,
            port=args.port,
            use_tls=args.use_tls,
            nickname=args.nickname,
            password=args.password,
            channel=args.channel,
            promote_after_seconds=args.promote_after_seconds,
            promote_after_minutes=args.promote_after_minutes,
            promote_after_hours=args.promote_after_hours,
            check_interval=args.check_interval,
        )
    except ValidationError as e:
        log.error("Invalid configuration: %s", e)
        return 1

    try:
        asyncio.run(start(settings))
    except TransportError as e:
        log.error("Fatal irc error: %s", e)
        return 1
    except KeyboardInterrupt:
        return 130
    except Exception:
        log.exception("Fatal error")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
