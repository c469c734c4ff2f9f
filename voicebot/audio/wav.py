"""
PCM -> WAV container. Canonical 44-byte RIFF header followed by the untouched PCM.

Pure and deterministic: identical input gives identical bytes. Used before
uploading an utterance to the transcription service.
"""
from __future__ import annotations

import struct

WAV_HEADER_BYTES = 44
BITS_PER_SAMPLE = 16

# RIFF/WAVE header, all integers little-endian:
# "RIFF" <36+L> "WAVE" "fmt " <16> <fmt=1> <channels> <rate> <byte_rate> <block_align> <bits> "data" <L>
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def pcm_to_wav(pcm: bytes, sample_rate: int = 16000, channels: int = 1) -> bytes:
    """Wrap 16-bit little-endian PCM in a minimal WAV container."""
    block_align = channels * BITS_PER_SAMPLE // 8
    byte_rate = sample_rate * block_align
    header = _HEADER.pack(
        b"RIFF",
        36 + len(pcm),
        b"WAVE",
        b"fmt ",
        16,  # fmt chunk size for PCM
        1,  # audio format: PCM
        channels,
        sample_rate,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        len(pcm),
    )
    return header + bytes(pcm)
