"""Payload interpretation for completed frames."""

from dataclasses import dataclass
from typing import List, Union

from .constants import (
    COMMAND_CLASSIFICATION, COMMAND_DETECTION, SUBTYPE_LENGTH,
    CLASSIFICATION_RECORD_LENGTH, DETECTION_RECORD_LENGTH
)
from .frame_decoder import Frame


@dataclass(frozen=True)
class ClassificationRecord:
    """分類結果 (id, confidence) 1件"""

    subtype: int
    id: int
    confidence: int


@dataclass(frozen=True)
class DetectionRecord:
    """検出結果 (id, x, y, w, h, confidence) 1件"""

    subtype: int
    id: int
    x: int
    y: int
    w: int
    h: int
    confidence: int


Record = Union[ClassificationRecord, DetectionRecord]


class MessageInterpreter:
    """フレームのペイロードをレコード列に変換するクラス"""

    @staticmethod
    def interpret(frame: Frame) -> List[Record]:
        """
        コマンドバイトに応じてペイロードを解釈する

        Args:
            frame: 受信完了したフレーム

        Returns:
            ペイロード順のレコードのリスト。未知のコマンドや
            レコードに満たない末尾データは無視される。
        """
        if frame.command == COMMAND_CLASSIFICATION:
            return MessageInterpreter.parse_classification(frame.payload)
        if frame.command == COMMAND_DETECTION:
            return MessageInterpreter.parse_detection(frame.payload)
        return []

    @staticmethod
    def parse_classification(payload: bytes) -> List[ClassificationRecord]:
        """Parse ``subtype`` followed by (id, confidence) pairs."""
        if len(payload) < SUBTYPE_LENGTH:
            return []

        subtype = payload[0]
        records = []
        last_start = len(payload) - CLASSIFICATION_RECORD_LENGTH
        for pos in range(SUBTYPE_LENGTH, last_start + 1, CLASSIFICATION_RECORD_LENGTH):
            records.append(ClassificationRecord(
                subtype=subtype,
                id=payload[pos],
                confidence=payload[pos + 1],
            ))
        return records

    @staticmethod
    def parse_detection(payload: bytes) -> List[DetectionRecord]:
        """Parse ``subtype`` followed by (id, x, y, w, h, confidence) tuples."""
        if len(payload) < SUBTYPE_LENGTH:
            return []

        subtype = payload[0]
        records = []
        last_start = len(payload) - DETECTION_RECORD_LENGTH
        for pos in range(SUBTYPE_LENGTH, last_start + 1, DETECTION_RECORD_LENGTH):
            record_id, x, y, w, h, confidence = payload[pos:pos + DETECTION_RECORD_LENGTH]
            records.append(DetectionRecord(
                subtype=subtype,
                id=record_id,
                x=x,
                y=y,
                w=w,
                h=h,
                confidence=confidence,
            ))
        return records


def interpret(frame: Frame) -> List[Record]:
    """Module-level shortcut for :meth:`MessageInterpreter.interpret`."""
    return MessageInterpreter.interpret(frame)
