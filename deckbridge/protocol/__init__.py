from .envelope import (
    Envelope,
    dumps,
    decode,
    encode,
    now_ms,
    now_iso,
    build_response,
    build_error_response,
)

__all__ = [
    "Envelope",
    "build_error_response",
    "build_response",
    "decode",
    "dumps",
    "encode",
    "now_iso",
    "now_ms",
]
