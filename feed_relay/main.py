"""Process entry point for the feed relay."""

import argparse
import sys
import time

import requests

from .config import Config
from .credentials import resolve_bot_token
from .dedup import NoveltyDetector
from .discord import DiscordGateway
from .formatting import AnnouncementFormatter
from .logging_config import (
    create_execution_logger,
    new_execution_id,
    setup_structured_logging,
)
from .relay import FeedRelay
from .rss import FeedFetcher
from .scheduler import Scheduler


def wait_until_ready(
    gateway: DiscordGateway,
    logger,
    attempts: int = 5,
    backoff_factor: float = 2.0,
    sleep=time.sleep,
) -> dict:
    """
    Block until the Discord API accepts the bot token.

    Connection problems are retried with exponential backoff; a rejected
    token is fatal immediately.

    Returns:
        The bot's user object

    Raises:
        RuntimeError: If the token is rejected or the API stays unreachable
    """
    for attempt in range(attempts):
        try:
            user = gateway.get_current_user()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in (401, 403):
                raise RuntimeError("Discord rejected the bot token") from e
            error = e
        except requests.RequestException as e:
            error = e
        else:
            logger.info(f"Logged in as {user.get('username', 'unknown')}")
            return user

        if attempt < attempts - 1:
            backoff_time = backoff_factor**attempt
            logger.warning(
                f"Discord API not ready, retrying in {backoff_time} seconds",
                attempt=attempt + 1,
                error=str(error),
            )
            sleep(backoff_time)

    raise RuntimeError(f"Discord API unreachable after {attempts} attempts")


def build_relay(config: Config, bot_token: str, execution_id: str) -> FeedRelay:
    """Wire the relay components from configuration."""
    discord_config = config.get_discord_config()
    discord_config.bot_token = bot_token
    feed_config = config.get_feed_config()
    announcement_config = config.get_announcement_config()
    schedule_config = config.get_schedule_config()

    return FeedRelay(
        fetcher=FeedFetcher(timeout=feed_config.timeout, execution_id=execution_id),
        detector=NoveltyDetector(announcement_config.mode),
        formatter=AnnouncementFormatter(
            mode=announcement_config.mode,
            thumbnail_url=announcement_config.thumbnail_url,
            color=announcement_config.color,
        ),
        gateway=DiscordGateway(discord_config, execution_id=execution_id),
        feed_url=feed_config.url,
        channel_id=discord_config.channel_id,
        tick_timeout=schedule_config.tick_timeout_seconds,
        request_timeout=feed_config.timeout,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="feed-relay",
        description="Announce new feed items into a Discord channel.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="run a single polling cycle and exit",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="logging level (defaults to LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = Config()
    log_level = args.log_level or config.log_level
    try:
        setup_structured_logging(log_level)
        log_level_error = None
    except ValueError as e:
        setup_structured_logging("INFO")
        log_level_error = e

    execution_id = new_execution_id("process")
    logger = create_execution_logger("main", execution_id)

    if log_level_error is not None:
        logger.error(
            f"Failed to start relay: {log_level_error}", error=str(log_level_error)
        )
        return 1

    # Setup failures are fatal for the process
    try:
        bot_token = resolve_bot_token(config, execution_id)
        relay = build_relay(config, bot_token, execution_id)
        wait_until_ready(relay.gateway, logger)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to start relay: {e}", error=str(e))
        return 1

    if args.once:
        result = relay.run_tick()
        return 1 if result.failed else 0

    scheduler = Scheduler(
        relay.run_tick,
        interval_seconds=config.get_schedule_config().interval_seconds,
        execution_id=execution_id,
    )
    try:
        scheduler.run()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
