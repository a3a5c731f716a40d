"""Configuration management for the feed relay."""

import os
from dataclasses import dataclass

from .models import ANNOUNCE_MODES, PLAIN_MODE

DEFAULT_FEED_URL = "https://www.dlnews.com/arc/outboundfeeds/rss/"
DEFAULT_CHANNEL_ID = "1143749967706603602"
DEFAULT_API_BASE = "https://discord.com/api/v10"
DEFAULT_THUMBNAIL_URL = "https://www.dlnews.com/pf/resources/images/dlnews-logo.png"
DEFAULT_COLOR = 0x1F6FEB


@dataclass
class DiscordConfig:
    """Configuration for the Discord REST API."""

    bot_token: str
    channel_id: str
    api_base: str = DEFAULT_API_BASE
    timeout: float = 30.0


@dataclass
class FeedConfig:
    """Configuration for the polled feed."""

    url: str = DEFAULT_FEED_URL
    timeout: float = 30.0


@dataclass
class AnnouncementConfig:
    """Configuration for announcement rendering."""

    mode: str = PLAIN_MODE
    thumbnail_url: str = DEFAULT_THUMBNAIL_URL
    color: int = DEFAULT_COLOR


@dataclass
class ScheduleConfig:
    """Configuration for the polling schedule."""

    interval_seconds: float = 60.0
    tick_timeout_seconds: float = 45.0


class Config:
    """Main configuration manager."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.discord_token = os.getenv("DISCORD_TOKEN", "").strip()
        self.discord_secret_name = os.getenv("DISCORD_SECRET_NAME", "").strip()
        self.aws_region = os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        self.channel_id = os.getenv("DISCORD_CHANNEL_ID", DEFAULT_CHANNEL_ID).strip()
        self.api_base = os.getenv("DISCORD_API_BASE", DEFAULT_API_BASE).rstrip("/")
        self.feed_url = os.getenv("FEED_URL", DEFAULT_FEED_URL).strip()
        self.announce_mode = os.getenv("ANNOUNCE_MODE", PLAIN_MODE).strip().lower()
        self.thumbnail_url = os.getenv("ANNOUNCE_THUMBNAIL_URL", DEFAULT_THUMBNAIL_URL)
        self.color = os.getenv("ANNOUNCE_COLOR", hex(DEFAULT_COLOR))
        self.interval_seconds = os.getenv("POLL_INTERVAL_SECONDS", "60")
        self.tick_timeout_seconds = os.getenv("TICK_TIMEOUT_SECONDS", "45")
        self.request_timeout_seconds = os.getenv("REQUEST_TIMEOUT_SECONDS", "30")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

    def get_discord_config(self) -> DiscordConfig:
        """Get Discord configuration."""
        if not self.channel_id.isdigit():
            raise ValueError(f"DISCORD_CHANNEL_ID must be numeric: {self.channel_id!r}")
        # Token may be resolved later from Secrets Manager
        return DiscordConfig(
            bot_token=self.discord_token,
            channel_id=self.channel_id,
            api_base=self.api_base,
            timeout=self._positive_float(
                "REQUEST_TIMEOUT_SECONDS", self.request_timeout_seconds
            ),
        )

    def get_feed_config(self) -> FeedConfig:
        """Get feed configuration."""
        if not self.feed_url:
            raise ValueError("FEED_URL cannot be empty")
        return FeedConfig(
            url=self.feed_url,
            timeout=self._positive_float(
                "REQUEST_TIMEOUT_SECONDS", self.request_timeout_seconds
            ),
        )

    def get_announcement_config(self) -> AnnouncementConfig:
        """Get announcement configuration."""
        if self.announce_mode not in ANNOUNCE_MODES:
            raise ValueError(
                f"ANNOUNCE_MODE must be one of {', '.join(ANNOUNCE_MODES)}: "
                f"{self.announce_mode!r}"
            )
        try:
            color = int(self.color, 0)
        except ValueError as e:
            raise ValueError(f"Invalid ANNOUNCE_COLOR: {self.color!r}") from e
        if not 0 <= color <= 0xFFFFFF:
            raise ValueError(f"ANNOUNCE_COLOR out of range: {self.color!r}")
        return AnnouncementConfig(
            mode=self.announce_mode,
            thumbnail_url=self.thumbnail_url,
            color=color,
        )

    def get_schedule_config(self) -> ScheduleConfig:
        """Get schedule configuration."""
        return ScheduleConfig(
            interval_seconds=self._positive_float(
                "POLL_INTERVAL_SECONDS", self.interval_seconds
            ),
            tick_timeout_seconds=self._positive_float(
                "TICK_TIMEOUT_SECONDS", self.tick_timeout_seconds
            ),
        )

    @staticmethod
    def _positive_float(name: str, raw: str) -> float:
        try:
            value = float(raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"{name} must be a number: {raw!r}") from e
        if value <= 0:
            raise ValueError(f"{name} must be positive: {raw!r}")
        return value
