"""Fan-out of trigger events to registered sinks."""

import logging
from typing import Callable, List, Optional

from ..config import config
from ..protocol.message_interpreter import ClassificationRecord
from .event_router import TriggerEvent

logger = logging.getLogger(__name__)

TriggerSink = Callable[[TriggerEvent], None]


def log_trigger(event: TriggerEvent) -> None:
    """デフォルトのシンク: ジャンプ検知をログ出力"""
    logger.info(f"Trigger id={event.record.id} detected, jump! ({type(event.record).__name__})")


class TriggerDispatcher:
    """トリガーイベントを登録済みシンクへ配信するクラス"""

    def __init__(self, trigger_id: Optional[int] = None):
        self.trigger_id = config.TRIGGER_ID if trigger_id is None else trigger_id
        self._sinks: List[TriggerSink] = []
        self.dispatched_count = 0

    @property
    def sinks(self) -> List[TriggerSink]:
        return list(self._sinks)

    def subscribe(self, sink: TriggerSink) -> None:
        if sink not in self._sinks:
            self._sinks.append(sink)

    def unsubscribe(self, sink: TriggerSink) -> None:
        try:
            self._sinks.remove(sink)
        except ValueError:
            logger.warning(f"Sink {sink!r} was not subscribed")

    def dispatch(self, event: TriggerEvent) -> None:
        """
        登録順に各シンクを呼び出す

        シンクの例外はログに残し、残りのシンクとバイト受信ループは継続する。
        """
        self.dispatched_count += 1
        for sink in list(self._sinks):
            try:
                sink(event)
            except Exception as e:
                logger.exception(f"Trigger sink {sink!r} failed: {e}")

    def trigger_manually(self) -> TriggerEvent:
        """Dispatch a synthetic trigger, for checking sinks without a device."""
        record = ClassificationRecord(subtype=0, id=self.trigger_id, confidence=0)
        event = TriggerEvent(record=record)
        logger.info("Manual trigger requested")
        self.dispatch(event)
        return event
