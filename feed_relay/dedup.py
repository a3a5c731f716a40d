"""Novelty detection for the feed relay.

The destination channel is the dedup ledger: nothing is stored locally. Each
tick reads the channel's most recent message and derives a fingerprint from
it, which is compared against the newest feed item.
"""

from collections.abc import Sequence

from .formatting import rendered_title
from .models import ANNOUNCE_MODES, PLAIN_MODE, RICH_MODE, ChannelMessage, FeedItem


class NoveltyDetector:
    """Decides whether the newest feed item has already been announced."""

    def __init__(self, mode: str = PLAIN_MODE):
        if mode not in ANNOUNCE_MODES:
            raise ValueError(f"Unknown announcement mode: {mode}")
        self.mode = mode

    def extract_fingerprint(self, messages: Sequence[ChannelMessage]) -> str | None:
        """Return the comparison key of the most recent message.

        Plain announcements are keyed by their body, rich ones by the title of
        their first embed. None means there is nothing to compare against.
        """
        if not messages:
            return None

        latest = messages[0]
        if self.mode == RICH_MODE:
            return latest.embed_titles[0] if latest.embed_titles else None

        content = latest.content.strip()
        return content or None

    def fingerprint_of(self, item: FeedItem) -> str:
        """Return the key an announcement of item would carry."""
        if self.mode == RICH_MODE:
            return rendered_title(item.title)
        return item.link

    def is_new(self, latest: FeedItem, fingerprint: str | None) -> bool:
        """Return False iff latest was the last thing announced."""
        if fingerprint is None:
            return True
        return fingerprint != self.fingerprint_of(latest)
