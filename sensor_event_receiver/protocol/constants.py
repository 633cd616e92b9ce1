"""Protocol constants for frame processing."""

# Frame markers (1 byte each)
START_MARKER = 0xFD
END_MARKER = 0xED

# Frame field sizes
COMMAND_LENGTH = 1
LENGTH_FIELD_BYTES = 2
CHECKSUM_LENGTH = 4

# Command definitions
COMMAND_RESERVED = 0
COMMAND_CLASSIFICATION = 1
COMMAND_DETECTION = 2

# Record sizes inside the payload (subtype byte excluded)
SUBTYPE_LENGTH = 1
CLASSIFICATION_RECORD_LENGTH = 2  # id, confidence
DETECTION_RECORD_LENGTH = 6  # id, x, y, w, h, confidence

# Calculated frame lengths
HEADER_LENGTH = COMMAND_LENGTH + LENGTH_FIELD_BYTES
FRAME_OVERHEAD = 1 + HEADER_LENGTH + CHECKSUM_LENGTH + 1
