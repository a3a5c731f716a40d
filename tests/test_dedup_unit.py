"""Unit tests for the novelty detector."""

import pytest

from feed_relay.dedup import NoveltyDetector
from feed_relay.models import ChannelMessage, FeedItem


def _item(link="https://x/2", title="T"):
    return FeedItem(title=title, description="D", link=link, author="A")


class TestNoveltyDetectorPlainMode:
    """Plain announcements are fingerprinted by their link."""

    def setup_method(self):
        self.detector = NoveltyDetector("plain")

    def test_same_link_is_duplicate(self):
        history = [ChannelMessage(id="1", content="https://x/1")]

        fingerprint = self.detector.extract_fingerprint(history)

        assert fingerprint == "https://x/1"
        assert self.detector.is_new(_item("https://x/1"), fingerprint) is False

    def test_different_link_is_new(self):
        history = [ChannelMessage(id="1", content="https://x/1")]

        fingerprint = self.detector.extract_fingerprint(history)

        assert self.detector.is_new(_item("https://x/2"), fingerprint) is True

    def test_surrounding_whitespace_is_ignored(self):
        history = [ChannelMessage(id="1", content="  https://x/1\n")]

        fingerprint = self.detector.extract_fingerprint(history)

        assert self.detector.is_new(_item("https://x/1"), fingerprint) is False

    def test_empty_history_means_new(self):
        fingerprint = self.detector.extract_fingerprint([])

        assert fingerprint is None
        assert self.detector.is_new(_item(), fingerprint) is True

    def test_message_without_body_means_new(self):
        history = [ChannelMessage(id="1", content="", embed_titles=("T",))]

        assert self.detector.extract_fingerprint(history) is None

    def test_only_most_recent_message_is_used(self):
        history = [
            ChannelMessage(id="2", content="https://x/2"),
            ChannelMessage(id="1", content="https://x/1"),
        ]

        assert self.detector.extract_fingerprint(history) == "https://x/2"


class TestNoveltyDetectorRichMode:
    """Rich announcements are fingerprinted by their card title."""

    def setup_method(self):
        self.detector = NoveltyDetector("rich")

    def test_same_title_is_duplicate(self):
        history = [ChannelMessage(id="1", embed_titles=("T",))]

        fingerprint = self.detector.extract_fingerprint(history)

        assert fingerprint == "T"
        assert self.detector.is_new(_item(title="T"), fingerprint) is False

    def test_different_title_is_new(self):
        history = [ChannelMessage(id="1", embed_titles=("Old",))]

        fingerprint = self.detector.extract_fingerprint(history)

        assert self.detector.is_new(_item(title="T"), fingerprint) is True

    def test_plain_message_yields_no_fingerprint(self):
        history = [ChannelMessage(id="1", content="https://x/1")]

        assert self.detector.extract_fingerprint(history) is None

    def test_long_title_matches_its_rendered_card(self):
        title = "x" * 300
        rendered = "x" * 255 + "…"
        history = [ChannelMessage(id="1", embed_titles=(rendered,))]

        fingerprint = self.detector.extract_fingerprint(history)

        assert self.detector.is_new(_item(title=title), fingerprint) is False


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        NoveltyDetector("carrier-pigeon")
