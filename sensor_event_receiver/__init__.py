"""Serial sensor event receiver: frame decoding, record interpretation and trigger dispatch."""

__version__ = "0.1.0"
