#!/usr/bin/env python3
"""
Ring Detection Job 실행 스크립트

샘플 거래로 교차 은행 사기 조직 탐지 Flink Job을 실행합니다.

사용법:
    pip install -e ".[flink]"
    python examples/ring_detection_job.py
"""

import sys
import traceback

from securelink.infrastructure.flink.ring_detection_job import run_ring_detection_job


def main() -> None:
    """메인 함수"""
    try:
        run_ring_detection_job()
    except KeyboardInterrupt:
        print("\n\n사용자에 의해 중단되었습니다.")
        sys.exit(0)
    except Exception as e:
        print(f"\n오류 발생: {e}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
