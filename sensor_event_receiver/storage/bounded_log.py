"""
Bounded in-memory history of raw bytes and decoded records.

Two independent fixed-capacity channels; each evicts its oldest entry once
capacity is exceeded and is read back newest-first.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional

from ..config import config
from ..utils.trace_formatter import TraceFormatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    """タイムスタンプ付きログエントリ"""

    timestamp: float
    payload: Any


@dataclass(frozen=True)
class LogSnapshot:
    """両チャネルの読み取り専用スナップショット（新しい順）"""

    raw: List[LogEntry]
    records: List[LogEntry]


class BoundedLog:
    """
    固定容量のリングバッファ2本（生バイト / デコード済みレコード）

    書き込みは単一スレッド前提。スナップショットはコピーを返すため
    別の観測者（UIなど）にそのまま渡してよい。
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is None:
            capacity = config.LOG_CAPACITY
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")

        self._capacity = capacity
        self._raw: Deque[LogEntry] = deque(maxlen=capacity)
        self._records: Deque[LogEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def raw_count(self) -> int:
        return len(self._raw)

    @property
    def record_count(self) -> int:
        return len(self._records)

    def push_raw(self, byte: int) -> None:
        """生バイトを16進文字列として記録"""
        self._raw.append(LogEntry(time.time(), TraceFormatter.format_byte(byte)))

    def push_record(self, record) -> None:
        """デコード済みレコードを記録"""
        self._records.append(LogEntry(time.time(), record))

    def raw_snapshot(self) -> List[LogEntry]:
        return list(reversed(self._raw))

    def record_snapshot(self) -> List[LogEntry]:
        return list(reversed(self._records))

    def snapshot(self) -> LogSnapshot:
        return LogSnapshot(raw=self.raw_snapshot(), records=self.record_snapshot())

    def clear(self) -> None:
        self._raw.clear()
        self._records.clear()
        logger.debug("Bounded log cleared")
