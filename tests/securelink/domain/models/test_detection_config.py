"""
DetectionConfig / SimulationConfig 테스트
"""

import pytest

from securelink.domain.exceptions import InvalidConfigurationError
from securelink.domain.models.detection_config import (
    DEFAULT_WINDOW_MS,
    DetectionConfig,
    SimulationConfig,
)


class TestDetectionConfig:
    def test_defaults(self) -> None:
        config = DetectionConfig()

        assert config.window_ms == DEFAULT_WINDOW_MS == 60000
        assert config.recent_rings_limit == 5
        assert config.max_consecutive_failures == 10

    def test_invalid_values_are_reported_together(self) -> None:
        """
        GIVEN: 여러 규칙을 위반한 설정
        WHEN: DetectionConfig를 생성하면
        THEN: 모든 위반 내용을 담은 InvalidConfigurationError가 발생해야 함
        """
        with pytest.raises(InvalidConfigurationError) as exc_info:
            DetectionConfig(window_ms=0, recent_rings_limit=0)

        assert "window_ms" in str(exc_info.value)
        assert "recent_rings_limit" in str(exc_info.value)


class TestSimulationConfig:
    def test_defaults(self) -> None:
        config = SimulationConfig()

        assert config.transaction_interval_ms == 800
        assert config.ring_interval_min_ms == 30000
        assert config.ring_interval_jitter_ms == 15000
        assert config.ring_member_spacing_ms == 500
        assert config.max_transactions is None

    @pytest.mark.parametrize("interval", [200, 2000])
    def test_interval_bounds_are_inclusive(self, interval) -> None:
        assert SimulationConfig(transaction_interval_ms=interval).transaction_interval_ms == interval

    @pytest.mark.parametrize("interval", [199, 2001])
    def test_interval_out_of_range_rejected(self, interval) -> None:
        with pytest.raises(InvalidConfigurationError, match="transaction_interval_ms"):
            SimulationConfig(transaction_interval_ms=interval)

    def test_max_transactions_must_be_positive(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="max_transactions"):
            SimulationConfig(max_transactions=0)

    def test_negative_spacing_rejected(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="ring_member_spacing_ms"):
            SimulationConfig(ring_member_spacing_ms=-1)
