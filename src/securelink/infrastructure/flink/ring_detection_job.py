"""
RingDetectionJob - 교차 은행 사기 조직 탐지 Flink Job

거래 스트림을 지문으로 키 분할하고, 각 연산자 인스턴스가 가진
RingDetectionEngine으로 교차 은행 링을 탐지하는 Flink Job입니다.
"""

from typing import Dict, Iterable, Optional

from pyflink.common.typeinfo import Types
from pyflink.datastream import RuntimeContext, StreamExecutionEnvironment
from pyflink.datastream.functions import KeyedProcessFunction, MapFunction

from securelink.domain.models.transaction import Transaction
from securelink.domain.services.ring_detection_engine import RingDetectionEngine
from securelink.infrastructure.flink.sample_data import (
    TransactionRow,
    create_sample_transactions,
    row_to_transaction,
    transaction_to_row,
)
from securelink.infrastructure.serialization.json_utils import json_dumps
from securelink.infrastructure.serialization.transaction_mapper import ring_to_dict

TRANSACTION_ROW_TYPE = Types.TUPLE(
    [
        Types.STRING(),  # id
        Types.STRING(),  # bank
        Types.DOUBLE(),  # amount
        Types.LONG(),  # timestamp
        Types.STRING(),  # merchant
        Types.STRING(),  # card
        Types.STRING(),  # device
        Types.STRING(),  # fingerprint
    ]
)


class CrossBankRingDetector(KeyedProcessFunction):
    """
    교차 은행 링 탐지 KeyedProcessFunction

    같은 지문의 거래는 같은 키로 모이므로 한 연산자 인스턴스의 엔진이
    해당 지문의 모든 거래를 봅니다. 링이 생성되거나 새 멤버가 추가될 때만
    링 스냅샷(dict)을 내보냅니다.

    엔진은 연산자 메모리에 있으며 Flink 체크포인트 대상이 아닙니다.
    """

    def __init__(self, window_ms: Optional[int] = None) -> None:
        self._window_ms = window_ms
        self._engine: Optional[RingDetectionEngine] = None
        self._emitted_sizes: Dict[str, int] = {}

    def open(self, runtime_context: RuntimeContext) -> None:
        """엔진은 직렬화되지 않도록 연산자 초기화 시점에 생성합니다."""
        if self._window_ms is None:
            self._engine = RingDetectionEngine()
        else:
            self._engine = RingDetectionEngine(window_ms=self._window_ms)
        self._emitted_sizes = {}

    def process_element(
        self, transaction: Transaction, ctx: "KeyedProcessFunction.Context"
    ) -> Iterable[dict]:
        ring = self._engine.add_transaction(transaction)
        if ring is None:
            return

        if self._emitted_sizes.get(ring.id) == ring.size:
            return

        self._emitted_sizes[ring.id] = ring.size
        yield ring_to_dict(ring)


class RowToTransactionMapFunction(MapFunction):
    """튜플 행을 Transaction으로 변환하는 MapFunction"""

    def map(self, value: TransactionRow) -> Transaction:
        return row_to_transaction(value)


class RingAlertMapFunction(MapFunction):
    """링 스냅샷을 경고 문자열로 변환하는 MapFunction"""

    def map(self, value: dict) -> str:
        return f"FRAUD RING ALERT: {json_dumps(value)}"


def create_ring_detection_job(env: StreamExecutionEnvironment) -> None:
    """
    Ring Detection Job을 구성합니다.

    Args:
        env: Flink StreamExecutionEnvironment
    """
    rows = [transaction_to_row(t) for t in create_sample_transactions()]

    ds = env.from_collection(collection=rows, type_info=TRANSACTION_ROW_TYPE)

    transaction_stream = ds.map(
        RowToTransactionMapFunction(),
        output_type=Types.PICKLED_BYTE_ARRAY(),
    ).name("to-transaction")

    rings = (
        transaction_stream.key_by(lambda t: t.fingerprint, key_type=Types.STRING())
        .process(CrossBankRingDetector(), output_type=Types.PICKLED_BYTE_ARRAY())
        .name("cross-bank-ring-detector")
    )

    rings.map(
        RingAlertMapFunction(), output_type=Types.STRING()
    ).name("format-ring-alert").print()


def run_ring_detection_job() -> None:
    """Ring Detection Job을 로컬 환경(병렬도 1)에서 실행합니다."""
    env = StreamExecutionEnvironment.get_execution_environment()
    env.set_parallelism(1)

    create_ring_detection_job(env)

    print("=" * 80)
    print("Ring Detection Job 시작")
    print("=" * 80)
    print()
    print("샘플 거래를 처리하고 있습니다...")
    print("예상 결과: 링 A 생성(HDFC, ICICI) 후 SBI로 확장, 링 B는 같은 은행이라 경고 없음")
    print()

    env.execute("Ring Detection Job")

    print()
    print("=" * 80)
    print("Ring Detection Job 완료")
    print("=" * 80)
