"""Trigger rule applied to decoded records."""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ..config import config
from ..protocol.message_interpreter import Record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggerEvent:
    """ジャンプ動作を起こすためのイベント"""

    record: Record
    timestamp: float = field(default_factory=time.time)


class EventRouter:
    """
    レコードがトリガー条件を満たすか判定するクラス

    判定はレコードの種類に関係なく id のみで行う。
    """

    def __init__(self, trigger_id: Optional[int] = None):
        if trigger_id is None:
            trigger_id = config.TRIGGER_ID
        if not 0 <= trigger_id <= 0xFF:
            raise ValueError(f"trigger_id must be 0-255, got {trigger_id}")
        self.trigger_id = trigger_id

    def route(self, record: Record) -> Optional[TriggerEvent]:
        """Return a TriggerEvent when ``record.id`` matches the trigger id."""
        if record.id != self.trigger_id:
            return None
        if config.DEBUG_FRAME_PARSING:
            logger.debug(f"Trigger condition met: {record}")
        return TriggerEvent(record=record)
