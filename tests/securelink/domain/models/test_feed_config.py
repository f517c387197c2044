"""
FeedConfig 테스트
"""

import pytest

from securelink.domain.exceptions import InvalidConfigurationError
from securelink.domain.models.feed_config import FeedConfig
from securelink.domain.models.transaction import Bank


class TestFeedConfig:
    def test_valid_config_passes(self) -> None:
        config = FeedConfig(feed_name="feed", websocket_url="wss://feed.example.com/tx")

        assert config.subscribed_banks == frozenset(Bank)
        assert config.ping_interval_seconds == 20

    def test_bank_codes_are_normalized(self) -> None:
        """
        GIVEN: 소문자 문자열 은행 코드
        WHEN: FeedConfig를 생성하면
        THEN: Bank enum으로 정규화되어야 함
        """
        config = FeedConfig(
            feed_name="feed",
            websocket_url="ws://localhost:8765",
            subscribed_banks=frozenset({"hdfc", Bank.SBI}),
        )

        assert config.subscribed_banks == frozenset({Bank.HDFC, Bank.SBI})

    def test_unknown_bank_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="unknown bank"):
            FeedConfig(
                feed_name="feed",
                websocket_url="ws://localhost:8765",
                subscribed_banks=frozenset({"AXIS"}),
            )

    @pytest.mark.parametrize("url", ["http://example.com", "example.com", "wss://"])
    def test_invalid_websocket_url_rejected(self, url) -> None:
        with pytest.raises(InvalidConfigurationError, match="websocket_url"):
            FeedConfig(feed_name="feed", websocket_url=url)

    def test_empty_banks_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="subscribed_banks"):
            FeedConfig(feed_name="feed", websocket_url="ws://localhost", subscribed_banks=frozenset())

    def test_ping_interval_minimum_value(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="ping_interval_seconds"):
            FeedConfig(feed_name="feed", websocket_url="ws://localhost", ping_interval_seconds=0)

    def test_zero_max_reconnect_means_infinite(self) -> None:
        config = FeedConfig(feed_name="feed", websocket_url="ws://localhost", max_reconnect_attempts=0)

        assert config.is_infinite_reconnect()

    def test_negative_max_reconnect_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="max_reconnect_attempts"):
            FeedConfig(feed_name="feed", websocket_url="ws://localhost", max_reconnect_attempts=-1)
