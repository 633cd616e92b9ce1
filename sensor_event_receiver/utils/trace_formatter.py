"""Display formatting for raw bytes and decoded records."""

import logging
from typing import List, Optional

from ..protocol.message_interpreter import ClassificationRecord, DetectionRecord, Record

logger = logging.getLogger(__name__)


class TraceFormatter:
    """トレース表示用の共通フォーマッタ"""

    @staticmethod
    def format_byte(byte: int) -> str:
        """1バイトを2桁の16進文字列に変換 (例: 0xFD -> "FD")"""
        return f"{byte:02X}"

    @staticmethod
    def format_record(record: Record) -> str:
        """
        レコードを1行の文字列に変換

        Args:
            record: ClassificationRecord または DetectionRecord

        Returns:
            表示用文字列
        """
        if isinstance(record, DetectionRecord):
            return (
                f"DET subtype={record.subtype} id={record.id} "
                f"box=({record.x},{record.y},{record.w},{record.h}) "
                f"conf={record.confidence}"
            )
        if isinstance(record, ClassificationRecord):
            return f"CLS subtype={record.subtype} id={record.id} conf={record.confidence}"
        logger.warning(f"Unknown record type: {type(record).__name__}")
        return repr(record)

    @staticmethod
    def format_snapshot(snapshot, limit: Optional[int] = None) -> List[str]:
        """
        BoundedLog のスナップショットを新しい順の行リストに変換

        limit はチャネルごとの件数上限（生バイトとレコードそれぞれに適用）
        """
        lines = [f"RAW {entry.payload}" for entry in snapshot.raw[:limit]]
        lines.extend(TraceFormatter.format_record(entry.payload) for entry in snapshot.records[:limit])
        return lines
