"""Application Layer Package"""

from securelink.application.services.detection_service import DetectionService
from securelink.application.use_cases.run_detection import (
    run_simulated_detection,
    stream_bank_feed,
)

__all__ = [
    "DetectionService",
    "run_simulated_detection",
    "stream_bank_feed",
]
