import random

import pytest

from sensor_event_receiver.protocol.constants import START_MARKER, END_MARKER
from sensor_event_receiver.protocol.frame_decoder import DecoderState, Frame, FrameDecoder


def feed_all(decoder, data):
    """1バイトずつ投入して完成フレームを集める"""
    frames = []
    for byte in data:
        frame = decoder.feed(byte)
        if frame is not None:
            frames.append(frame)
    return frames


def test_single_classification_frame(frame_bytes):
    decoder = FrameDecoder()
    data = frame_bytes(1, b"\x00\x02\x50\x03\x40", checksum=0x12345678)

    results = [decoder.feed(b) for b in data]

    # 最後のバイト（エンドマーカー）でのみフレームが返る
    assert all(r is None for r in results[:-1])
    frame = results[-1]
    assert frame == Frame(command=1, length=5, payload=b"\x00\x02\x50\x03\x40", checksum=0x12345678)
    assert decoder.state is DecoderState.WAIT_START


def test_state_transitions():
    decoder = FrameDecoder()
    assert decoder.state is DecoderState.WAIT_START

    decoder.feed(START_MARKER)
    assert decoder.state is DecoderState.HEADER

    for b in (2, 1, 0):
        decoder.feed(b)
    assert decoder.state is DecoderState.PAYLOAD

    decoder.feed(0x00)
    assert decoder.state is DecoderState.CHECKSUM

    for _ in range(4):
        decoder.feed(0xAA)
    assert decoder.state is DecoderState.END
    assert decoder.is_stalled

    frame = decoder.feed(END_MARKER)
    assert frame.checksum == 0xAAAAAAAA
    assert decoder.is_idle


def test_garbage_before_start_marker_is_skipped(frame_bytes):
    decoder = FrameDecoder()
    data = b"\x00\x13\xed\x7f" + frame_bytes(2, b"\x00\x01\x0a\x0b\x05\x06\x64")

    frames = feed_all(decoder, data)

    assert len(frames) == 1
    assert frames[0].command == 2
    assert frames[0].length == 7


def test_start_marker_inside_payload_is_data(frame_bytes):
    decoder = FrameDecoder()
    payload = bytes([0x00, START_MARKER, START_MARKER, END_MARKER, 0x10])

    frames = feed_all(decoder, frame_bytes(1, payload))

    assert len(frames) == 1
    assert frames[0].payload == payload


def test_length_is_little_endian():
    decoder = FrameDecoder()
    payload = bytes(range(256)) + bytes(44)  # 300 = 0x012C
    data = bytes([START_MARKER, 1, 0x2C, 0x01]) + payload + b"\x00" * 4 + bytes([END_MARKER])

    frames = feed_all(decoder, data)

    assert len(frames) == 1
    assert frames[0].length == 300
    assert frames[0].payload == payload


def test_zero_length_payload_goes_straight_to_checksum():
    decoder = FrameDecoder()
    for b in (START_MARKER, 1, 0, 0):
        decoder.feed(b)

    # ペイロードなし: 次のバイトはチェックサムとして扱われる
    assert decoder.state is DecoderState.CHECKSUM

    for b in (0x01, 0x02, 0x03, 0x04):
        decoder.feed(b)
    assert decoder.state is DecoderState.END

    frame = decoder.feed(END_MARKER)
    assert frame == Frame(command=1, length=0, payload=b"", checksum=0x04030201)


def test_one_byte_classification_payload_completes(frame_bytes):
    decoder = FrameDecoder()
    data = bytes([0xFD, 1, 1, 0, 0x02, 0x00, 0x00, 0x00, 0x00, 0xED])
    assert data == frame_bytes(1, b"\x02")

    frames = feed_all(decoder, data)

    assert frames == [Frame(command=1, length=1, payload=b"\x02", checksum=0)]


def test_end_state_stalls_on_wrong_byte(frame_bytes):
    decoder = FrameDecoder()
    data = frame_bytes(1, b"\x00\x02\x50")[:-1]
    feed_all(decoder, data)
    assert decoder.state is DecoderState.END

    # エンドマーカー以外は開始マーカーも含めて受け付けない
    follow_up = b"\x00" + frame_bytes(1, b"\x00\x03\x40")[:-1]
    assert feed_all(decoder, follow_up) == []
    assert decoder.is_stalled

    # エンドマーカーが来ると、停止していたフレームが完成する
    frame = decoder.feed(END_MARKER)
    assert frame.payload == b"\x00\x02\x50"


def test_reset_mid_frame_discards_partial(frame_bytes):
    decoder = FrameDecoder()
    partial = frame_bytes(2, b"\x00\x01\x02\x03\x04\x05\x06")[:6]
    feed_all(decoder, partial)
    assert decoder.state is DecoderState.PAYLOAD

    decoder.reset()
    assert decoder.is_idle

    frames = feed_all(decoder, frame_bytes(1, b"\x07\x02\x33"))
    assert frames == [Frame(command=1, length=3, payload=b"\x07\x02\x33", checksum=0)]


def test_reset_from_stall_recovers(frame_bytes):
    decoder = FrameDecoder()
    feed_all(decoder, frame_bytes(1, b"\x00")[:-1] + b"\x42")
    assert decoder.is_stalled

    decoder.reset()
    frames = feed_all(decoder, frame_bytes(2, b"\x01"))

    assert len(frames) == 1
    assert frames[0].command == 2


def test_frames_are_not_retained(frame_bytes):
    decoder = FrameDecoder()
    first = feed_all(decoder, frame_bytes(1, b"\x00\x02\x10"))[0]
    second = feed_all(decoder, frame_bytes(1, b"\x01\x03\x20"))[0]

    assert first.payload == b"\x00\x02\x10"
    assert second.payload == b"\x01\x03\x20"


def test_chunk_boundary_independence(frame_bytes):
    stream = (
        b"\x11\x22" +
        frame_bytes(1, b"\x00\x02\x50\x03\x40") +
        b"\x00\x99" +
        frame_bytes(2, b"\x00\x01\x0a\x0b\x05\x06\x64", checksum=0xDEADBEEF) +
        frame_bytes(0, b"") +
        frame_bytes(7, b"\x01\x02")
    )
    expected = feed_all(FrameDecoder(), stream)
    assert expected

    rng = random.Random(1234)
    for _ in range(50):
        decoder = FrameDecoder()
        frames = []
        pos = 0
        while pos < len(stream):
            size = rng.randint(0, 9)
            frames.extend(decoder.feed_bytes(stream[pos:pos + size]))
            pos += size
        assert frames == expected


@pytest.mark.parametrize("bad", [-1, 256, 1000, "a", None, 1.5])
def test_feed_rejects_non_byte_values(bad):
    decoder = FrameDecoder()
    with pytest.raises(ValueError):
        decoder.feed(bad)


def test_every_byte_value_is_accepted():
    decoder = FrameDecoder()
    for value in range(256):
        decoder.feed(value)
