"""Discord delivery gateway for the feed relay."""

import json

import requests

from .config import DiscordConfig
from .errors import DeliveryError, HistoryLookupError, TickTimeoutError
from .logging_config import create_execution_logger
from .models import ChannelMessage, MessagePayload
from .transport import read_body


class DiscordGateway:
    """Thin client over the Discord REST API.

    One instance (and one HTTP session) is shared by every tick for the
    lifetime of the process.
    """

    def __init__(self, config: DiscordConfig, execution_id: str | None = None):
        """Initialize the gateway with configuration."""
        if not config.bot_token:
            raise ValueError("Discord bot token cannot be empty")

        self.config = config
        self.logger = create_execution_logger("discord_gateway", execution_id)
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bot {config.bot_token}",
                "User-Agent": "DiscordBot (https://github.com/feed-relay, 1.0)",
            }
        )

        self.logger.info(
            "DiscordGateway initialized",
            channel_id=config.channel_id,
            api_base=config.api_base,
        )

    def get_current_user(self) -> dict:
        """
        Return the bot's own user object.

        Used as the readiness probe: it only succeeds once the token has been
        accepted by the API.

        Raises:
            requests.RequestException: If the API cannot be reached or
                rejects the token
        """
        response = self.session.get(
            f"{self.config.api_base}/users/@me", timeout=self.config.timeout
        )
        response.raise_for_status()
        return response.json()

    def get_recent_messages(
        self,
        channel_id: str,
        limit: int = 1,
        timeout: float | None = None,
        deadline: float | None = None,
    ) -> list[ChannelMessage]:
        """
        Read the most recent messages of a channel, newest first.

        Args:
            channel_id: Channel to read
            limit: Number of messages to return (1-100)
            timeout: Overrides the configured request timeout for this call
            deadline: time.monotonic() value after which reading is abandoned

        Returns:
            List of ChannelMessage, possibly empty

        Raises:
            HistoryLookupError: If the channel history cannot be read
            TickTimeoutError: If the deadline passes mid-response
        """
        url = f"{self.config.api_base}/channels/{channel_id}/messages"
        try:
            response = self.session.get(
                url,
                params={"limit": limit},
                timeout=timeout or self.config.timeout,
                stream=True,
            )
            if not response.ok:
                response.close()
            response.raise_for_status()
            data = json.loads(read_body(response, deadline))
        except (requests.RequestException, ValueError) as e:
            raise HistoryLookupError(
                f"Failed to read history of channel {channel_id}: {e}"
            ) from e

        if not isinstance(data, list) or not all(
            isinstance(message, dict) for message in data
        ):
            raise HistoryLookupError(
                f"Unexpected history response for channel {channel_id}"
            )

        return [ChannelMessage.from_api(message) for message in data]

    def send_message(
        self,
        channel_id: str,
        payload: MessagePayload,
        timeout: float | None = None,
        deadline: float | None = None,
    ) -> ChannelMessage:
        """
        Post a message to a channel.

        No retry is attempted here; a rejected send is retried by the next tick.

        Args:
            channel_id: Destination channel
            payload: Rendered announcement
            timeout: Overrides the configured request timeout for this call
            deadline: time.monotonic() value after which reading the reply
                is abandoned

        Returns:
            The created ChannelMessage

        Raises:
            DeliveryError: If the message was not accepted
        """
        url = f"{self.config.api_base}/channels/{channel_id}/messages"
        body = payload.as_request_body()
        if not body:
            raise DeliveryError("Refusing to send an empty message")

        try:
            response = self.session.post(
                url, json=body, timeout=timeout or self.config.timeout, stream=True
            )
        except requests.RequestException as e:
            raise DeliveryError(f"Failed to reach channel {channel_id}: {e}") from e

        if response.status_code == 429:
            self.logger.warning(
                "Rate limited by Discord API",
                channel_id=channel_id,
                retry_after=response.headers.get("Retry-After"),
            )

        if not response.ok:
            response.close()
            raise DeliveryError(
                f"Discord API returned status {response.status_code} "
                f"for channel {channel_id}",
                status_code=response.status_code,
            )

        # The message is posted once the status is accepted; the reply body is
        # only used for its id
        try:
            data = json.loads(read_body(response, deadline))
        except (TickTimeoutError, requests.RequestException, ValueError) as e:
            self.logger.warning(
                f"Message accepted but reply unreadable: {e}", channel_id=channel_id
            )
            return ChannelMessage(id="")

        if not isinstance(data, dict):
            return ChannelMessage(id="")
        return ChannelMessage.from_api(data)
