"""Byte-at-a-time frame reassembly.

Frame layout::

    +--------+---------+---------+-----------+----------+------+
    | START  | Command | Length  |  Payload  | Checksum | END  |
    | 0xFD   | 1 byte  | 2 bytes |  N bytes  | 4 bytes  | 0xED |
    +--------+---------+---------+-----------+----------+------+

- Length: little-endian payload byte count
- Checksum: little-endian 32-bit value, captured but not verified
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .constants import (
    START_MARKER, END_MARKER, HEADER_LENGTH, CHECKSUM_LENGTH
)

logger = logging.getLogger(__name__)


class DecoderState(Enum):
    """フレームデコーダーの状態"""
    WAIT_START = "wait_start"
    HEADER = "header"
    PAYLOAD = "payload"
    CHECKSUM = "checksum"
    END = "end"


@dataclass(frozen=True)
class Frame:
    """A fully reassembled protocol frame."""

    command: int
    length: int
    payload: bytes
    checksum: int

    def __repr__(self) -> str:
        return (
            f"Frame(command=0x{self.command:02X}, length={self.length}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'}, "
            f"checksum=0x{self.checksum:08X})"
        )


class FrameDecoder:
    """
    1バイトずつ受け取りフレームを再構築するステートマシン

    接続ごとに1インスタンスを持つ。feed() は完了したフレームを
    エンドマーカーを消費した呼び出しでのみ返す。
    """

    def __init__(self):
        self._scratch = bytearray()
        self._clear()

    @property
    def state(self) -> DecoderState:
        """現在の状態"""
        return self._state

    @property
    def is_idle(self) -> bool:
        """開始マーカー待ちかどうか"""
        return self._state is DecoderState.WAIT_START

    @property
    def is_stalled(self) -> bool:
        """エンドマーカー待ちで停止しているかどうか"""
        return self._state is DecoderState.END

    def reset(self) -> None:
        """受信途中のフレームを破棄して開始マーカー待ちに戻す"""
        if self._state is not DecoderState.WAIT_START:
            logger.debug(f"Decoder reset from {self._state.value}, discarding {len(self._scratch)} scratch bytes")
        self._clear()

    def _clear(self) -> None:
        self._state = DecoderState.WAIT_START
        self._scratch.clear()
        self._command = 0
        self._length = 0
        self._payload = b""
        self._checksum = 0

    def feed(self, byte: int) -> Optional[Frame]:
        """Consume one byte; return the frame completed by it, if any."""
        if not isinstance(byte, int) or not 0 <= byte <= 0xFF:
            raise ValueError(f"Expected a byte value 0-255, got {byte!r}")

        state = self._state

        if state is DecoderState.WAIT_START:
            # 開始マーカー以外は読み捨てて再同期
            if byte == START_MARKER:
                self._scratch.clear()
                self._state = DecoderState.HEADER
            return None

        if state is DecoderState.HEADER:
            self._scratch.append(byte)
            if len(self._scratch) == HEADER_LENGTH:
                self._command = self._scratch[0]
                self._length = self._scratch[1] | (self._scratch[2] << 8)
                self._scratch.clear()
                if self._length == 0:
                    # ペイロードなし: 次のバイトはチェックサムの先頭
                    self._payload = b""
                    self._state = DecoderState.CHECKSUM
                else:
                    self._state = DecoderState.PAYLOAD
            return None

        if state is DecoderState.PAYLOAD:
            self._scratch.append(byte)
            if len(self._scratch) == self._length:
                self._payload = bytes(self._scratch)
                self._scratch.clear()
                self._state = DecoderState.CHECKSUM
            return None

        if state is DecoderState.CHECKSUM:
            self._scratch.append(byte)
            if len(self._scratch) == CHECKSUM_LENGTH:
                self._checksum = int.from_bytes(self._scratch, byteorder="little")
                self._scratch.clear()
                self._state = DecoderState.END
            return None

        # DecoderState.END
        if byte != END_MARKER:
            # エンドマーカー以外は受け付けない（外部から reset() されるまで停止）
            return None

        frame = Frame(
            command=self._command,
            length=self._length,
            payload=self._payload,
            checksum=self._checksum,
        )
        self._clear()
        return frame

    def feed_bytes(self, data: bytes) -> List[Frame]:
        """Feed a chunk byte by byte and collect every completed frame."""
        frames = []
        for byte in data:
            frame = self.feed(byte)
            if frame is not None:
                frames.append(frame)
        return frames
