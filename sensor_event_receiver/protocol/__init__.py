"""Protocol module for frame processing."""

from .constants import (
    START_MARKER, END_MARKER, COMMAND_LENGTH, LENGTH_FIELD_BYTES, CHECKSUM_LENGTH,
    COMMAND_RESERVED, COMMAND_CLASSIFICATION, COMMAND_DETECTION,
    HEADER_LENGTH, FRAME_OVERHEAD
)
from .frame_decoder import DecoderState, Frame, FrameDecoder
from .message_interpreter import (
    ClassificationRecord, DetectionRecord, MessageInterpreter, Record, interpret
)

__all__ = [
    "START_MARKER", "END_MARKER", "COMMAND_LENGTH", "LENGTH_FIELD_BYTES",
    "CHECKSUM_LENGTH", "COMMAND_RESERVED", "COMMAND_CLASSIFICATION",
    "COMMAND_DETECTION", "HEADER_LENGTH", "FRAME_OVERHEAD",
    "DecoderState", "Frame", "FrameDecoder",
    "ClassificationRecord", "DetectionRecord", "MessageInterpreter", "Record",
    "interpret"
]
