"""Shared fixtures for sensor event receiver tests."""

import pytest

from sensor_event_receiver.protocol.constants import START_MARKER, END_MARKER


def build_frame_bytes(command, payload=b"", checksum=0):
    """フレームのバイト列を作成するヘルパー"""
    return (
        bytes([START_MARKER, command]) +
        len(payload).to_bytes(2, byteorder="little") +
        bytes(payload) +
        checksum.to_bytes(4, byteorder="little") +
        bytes([END_MARKER])
    )


@pytest.fixture
def frame_bytes():
    """Provide the frame builder helper."""
    return build_frame_bytes
