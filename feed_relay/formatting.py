"""Announcement rendering for the feed relay."""

from .config import DEFAULT_COLOR, DEFAULT_THUMBNAIL_URL
from .models import (
    ANNOUNCE_MODES,
    PLAIN_MODE,
    RICH_MODE,
    UNKNOWN_AUTHOR,
    FeedItem,
    MessagePayload,
)

# Discord embed limits
TITLE_LIMIT = 256
DESCRIPTION_LIMIT = 4096
FOOTER_LIMIT = 2048


class AnnouncementFormatter:
    """Renders feed items into channel messages."""

    def __init__(
        self,
        mode: str = PLAIN_MODE,
        thumbnail_url: str = DEFAULT_THUMBNAIL_URL,
        color: int = DEFAULT_COLOR,
    ):
        if mode not in ANNOUNCE_MODES:
            raise ValueError(f"Unknown announcement mode: {mode}")
        self.mode = mode
        self.thumbnail_url = thumbnail_url
        self.color = color

    def render(self, item: FeedItem) -> MessagePayload:
        """
        Render a feed item as a message payload.

        Plain mode posts the bare link and lets the client unfurl it. Rich mode
        posts a card with title, description, link, thumbnail, accent color
        and an attribution footer.

        Args:
            item: The feed item to announce

        Returns:
            MessagePayload for the gateway
        """
        if self.mode == RICH_MODE:
            return MessagePayload(embeds=[self.format_embed(item)])
        return MessagePayload(content=item.link)

    def format_embed(self, item: FeedItem) -> dict:
        author = (item.author or "").strip() or UNKNOWN_AUTHOR
        return {
            "title": rendered_title(item.title),
            "description": truncate(item.description, DESCRIPTION_LIMIT),
            "url": item.link,
            "color": self.color,
            "thumbnail": {"url": self.thumbnail_url},
            "footer": {"text": truncate(f"By {author}", FOOTER_LIMIT)},
        }


def truncate(text: str, limit: int) -> str:
    """Clip text to limit characters, marking the cut with an ellipsis."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def rendered_title(title: str) -> str:
    """Return the title exactly as it appears on a rich card."""
    return truncate(title, TITLE_LIMIT)
