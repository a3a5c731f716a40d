"""Tick body of the feed relay: fetch, compare, announce."""

import time
from collections.abc import Callable

from .dedup import NoveltyDetector
from .discord import DiscordGateway
from .errors import RelayError, TickTimeoutError
from .formatting import AnnouncementFormatter
from .logging_config import create_execution_logger, new_execution_id
from .models import TickResult
from .rss import FeedFetcher


class FeedRelay:
    """Announces the newest feed item into a channel unless already posted."""

    def __init__(
        self,
        fetcher: FeedFetcher,
        detector: NoveltyDetector,
        formatter: AnnouncementFormatter,
        gateway: DiscordGateway,
        feed_url: str,
        channel_id: str,
        tick_timeout: float = 45.0,
        request_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if detector.mode != formatter.mode:
            raise ValueError(
                f"Detector mode {detector.mode!r} does not match "
                f"formatter mode {formatter.mode!r}"
            )
        self.fetcher = fetcher
        self.detector = detector
        self.formatter = formatter
        self.gateway = gateway
        self.feed_url = feed_url
        self.channel_id = channel_id
        self.tick_timeout = tick_timeout
        self.request_timeout = request_timeout
        self.clock = clock

    def run_tick(self) -> TickResult:
        """
        Run one polling cycle.

        Every RelayError is caught here, logged with the feed and channel it
        concerns, and reported as a failed result; nothing is retried within
        the tick.

        Returns:
            TickResult describing what happened
        """
        logger = create_execution_logger("relay", new_execution_id())
        context = {"feed_url": self.feed_url, "channel_id": self.channel_id}
        logger.log_execution_start(**context)

        try:
            result = self._announce_latest(logger)
        except RelayError as e:
            logger.error(
                f"Tick aborted: {e}",
                error_kind=e.kind,
                error=str(e),
                **context,
            )
            result = TickResult(status="failed", error_kind=e.kind, error=str(e))

        logger.log_execution_end(
            success=not result.failed,
            status=result.status,
            item_link=result.item_link,
            **context,
        )
        return result

    def _announce_latest(self, logger) -> TickResult:
        deadline = self.clock() + self.tick_timeout
        # Body reads are bounded on the monotonic clock whatever self.clock is
        transfer_deadline = time.monotonic() + self.tick_timeout

        items = self.fetcher.fetch(
            self.feed_url,
            timeout=self._budget(deadline),
            deadline=transfer_deadline,
        )
        if not items:
            logger.warning("Feed has no items", feed_url=self.feed_url)
            return TickResult(status="empty")

        # Only the newest entry is ever considered
        latest = items[0]

        history = self.gateway.get_recent_messages(
            self.channel_id,
            limit=1,
            timeout=self._budget(deadline),
            deadline=transfer_deadline,
        )
        fingerprint = self.detector.extract_fingerprint(history)
        if fingerprint is None:
            logger.info(
                "No comparable previous announcement, treating item as new",
                channel_id=self.channel_id,
            )

        if not self.detector.is_new(latest, fingerprint):
            logger.info("No new news", item_link=latest.link)
            return TickResult(status="duplicate", item_link=latest.link)

        payload = self.formatter.render(latest)
        self.gateway.send_message(
            self.channel_id,
            payload,
            timeout=self._budget(deadline),
            deadline=transfer_deadline,
        )
        logger.info(
            f"Posted news: {latest.title}",
            item_link=latest.link,
            channel_id=self.channel_id,
        )
        return TickResult(status="sent", item_link=latest.link)

    def _budget(self, deadline: float) -> float:
        """Return the timeout for the next network step."""
        remaining = deadline - self.clock()
        if remaining <= 0:
            raise TickTimeoutError(
                f"Tick exceeded its {self.tick_timeout}s deadline"
            )
        return min(self.request_timeout, remaining)
