"""Serial protocol handler for frame processing."""

import asyncio
import logging
import time
from typing import Dict, Optional

from .frame_decoder import Frame, FrameDecoder
from .message_interpreter import MessageInterpreter
from ..config import config
from ..processors.event_router import EventRouter
from ..processors.trigger_dispatcher import TriggerDispatcher
from ..storage.bounded_log import BoundedLog
from ..utils.trace_formatter import TraceFormatter

logger = logging.getLogger(__name__)


def new_stats() -> Dict[str, int]:
    """統計情報の初期値"""
    return {
        "bytes_received": 0,
        "frames_decoded": 0,
        "records_decoded": 0,
        "triggers": 0,
        "resets": 0,
    }


class SerialProtocol(asyncio.Protocol):
    """Asyncio protocol to handle serial data."""

    def __init__(self, connection_lost_future: asyncio.Future,
                 router: EventRouter, dispatcher: TriggerDispatcher,
                 bounded_log: BoundedLog, stats: Optional[Dict] = None):
        super().__init__()
        self.transport = None
        self.connection_lost_future = connection_lost_future

        # 接続ごとにデコーダーを1つ持つ
        self.decoder = FrameDecoder()
        self.router = router
        self.dispatcher = dispatcher
        self.bounded_log = bounded_log
        self.stats = stats if stats is not None else new_stats()

        # 最後に受信したバイトの時刻
        self.last_byte_time = time.monotonic()

        # 受信中フレームの開始時刻（ストール検出用、開始マーカー待ちの間は None）
        self.frame_start_time = None

        # 最新のレコード（画面表示用のセンサー値）
        self.latest_record = None

        logger.info("Serial Protocol initialized.")

    def connection_made(self, transport):
        self.transport = transport
        try:
            transport.serial.dtr = True
            logger.info(f"Serial port {transport.serial.port} opened, DTR set.")
        except IOError as e:
            logger.warning(f"Could not set DTR on {transport.serial.port}: {e}")

        # 新しいセッション: 前回の途中フレームを持ち越さない
        self.decoder.reset()
        self.last_byte_time = time.monotonic()
        self.frame_start_time = None

    def data_received(self, data):
        """Called when data is received from the serial port."""
        if config.DEBUG_FRAME_PARSING:
            if len(data) < 50:
                logger.debug(f"Raw serial data received: {data.hex()}")
            else:
                logger.debug(f"Raw serial data received: {len(data)} bytes, start: {data[:20].hex()}")

        now = time.monotonic()
        self.last_byte_time = now
        self.stats["bytes_received"] += len(data)

        for byte in data:
            self.bounded_log.push_raw(byte)
            was_idle = self.decoder.is_idle
            frame = self.decoder.feed(byte)
            if was_idle and not self.decoder.is_idle:
                self.frame_start_time = now
            if frame is not None:
                self._process_frame(frame)

    def _process_frame(self, frame: Frame) -> None:
        """完成したフレームをレコードに変換してルーティング"""
        self.stats["frames_decoded"] += 1
        records = MessageInterpreter.interpret(frame)

        if config.DEBUG_FRAME_PARSING:
            logger.debug(f"Decoded {frame!r} into {len(records)} record(s)")
        if not records:
            logger.debug(f"Frame with command 0x{frame.command:02X} produced no records (length={frame.length})")
            return

        for record in records:
            self.stats["records_decoded"] += 1
            self.latest_record = record
            self.bounded_log.push_record(record)
            if config.DEBUG_FRAME_PARSING:
                logger.debug(f"Record: {TraceFormatter.format_record(record)}")

            event = self.router.route(record)
            if event is not None:
                self.stats["triggers"] += 1
                self.dispatcher.dispatch(event)

    def check_stall(self, now: Optional[float] = None) -> bool:
        """
        フレーム開始から FRAME_TIMEOUT 秒経っても完成しない場合にデコーダーをリセット

        受信が続いていても判定する（長さフィールド破損で PAYLOAD に居座るケース）。

        Returns:
            リセットした場合は True
        """
        if self.decoder.is_idle:
            return False

        if now is None:
            now = time.monotonic()
        started = self.frame_start_time if self.frame_start_time is not None else self.last_byte_time
        elapsed = now - started
        if elapsed <= config.FRAME_TIMEOUT:
            return False

        silence = now - self.last_byte_time
        if self.decoder.is_stalled:
            logger.warning(f"Decoder stalled waiting for end marker for {elapsed:.1f}s. Resetting.")
        else:
            logger.warning(
                f"Frame timeout in state {self.decoder.state.value} after {elapsed:.1f}s "
                f"(last byte {silence:.1f}s ago). Discarding partial frame."
            )
        self.decoder.reset()
        self.frame_start_time = None
        self.stats["resets"] += 1
        return True

    def connection_lost(self, exc):
        if exc:
            logger.error(f"Serial port connection lost: {exc}")
        else:
            logger.info("Serial port connection closed normally.")
        self.decoder.reset()
        self.frame_start_time = None
        self.transport = None

        if self.connection_lost_future and not self.connection_lost_future.done():
            try:
                if exc:
                    self.connection_lost_future.set_exception(exc)
                else:
                    self.connection_lost_future.set_result(True)
            except asyncio.InvalidStateError:
                logger.warning("Future was already set/cancelled when signalling connection loss.")
