"""Unit tests for data models."""

import dataclasses

import pytest

from feed_relay.models import ChannelMessage, FeedItem, MessagePayload, TickResult


class TestModelsUnit:
    """Unit tests for the relay's data models."""

    def test_feed_item_defaults_and_immutability(self):
        item = FeedItem(title="T", description="D", link="L")

        assert item.author == "Unknown"
        with pytest.raises(dataclasses.FrozenInstanceError):
            item.link = "other"

    def test_channel_message_from_api(self):
        message = ChannelMessage.from_api(
            {
                "id": 123,
                "content": None,
                "embeds": [{"title": "First"}, {"description": "no title"}],
            }
        )

        assert message == ChannelMessage(id="123", content="", embed_titles=("First",))

    def test_channel_message_without_embeds(self):
        message = ChannelMessage.from_api({"id": "1", "content": "https://x/1"})

        assert message.embed_titles == ()

    def test_payload_request_body(self):
        assert MessagePayload(content="L").as_request_body() == {"content": "L"}
        assert MessagePayload(embeds=[{"title": "T"}]).as_request_body() == {
            "embeds": [{"title": "T"}]
        }
        assert MessagePayload().as_request_body() == {}

    def test_tick_result_failed(self):
        assert TickResult(status="failed").failed
        assert not TickResult(status="duplicate").failed
