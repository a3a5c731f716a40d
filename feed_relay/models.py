"""Data models for the feed relay."""

from dataclasses import dataclass, field
from typing import Any

UNKNOWN_AUTHOR = "Unknown"

PLAIN_MODE = "plain"
RICH_MODE = "rich"
ANNOUNCE_MODES = (PLAIN_MODE, RICH_MODE)


@dataclass(frozen=True)
class FeedItem:
    """Represents a single RSS/Atom feed item."""

    title: str
    description: str
    link: str
    author: str = UNKNOWN_AUTHOR


@dataclass(frozen=True)
class ChannelMessage:
    """The parts of a channel message needed to fingerprint it."""

    id: str
    content: str = ""
    embed_titles: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ChannelMessage":
        """Build a ChannelMessage from a Discord message object."""
        titles = tuple(
            embed["title"]
            for embed in data.get("embeds") or []
            if isinstance(embed, dict) and embed.get("title")
        )
        return cls(
            id=str(data.get("id", "")),
            content=data.get("content") or "",
            embed_titles=titles,
        )


@dataclass
class MessagePayload:
    """A rendered announcement, ready to be sent to a channel."""

    content: str | None = None
    embeds: list[dict[str, Any]] = field(default_factory=list)

    def as_request_body(self) -> dict[str, Any]:
        """Return the JSON body for the create-message endpoint."""
        body: dict[str, Any] = {}
        if self.content:
            body["content"] = self.content
        if self.embeds:
            body["embeds"] = self.embeds
        return body


@dataclass
class TickResult:
    """Outcome of one execution of the polling job."""

    status: str  # sent, duplicate, empty or failed
    item_link: str | None = None
    error_kind: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == "failed"
