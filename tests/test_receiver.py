import random

from voicebot.audio.receiver import FrameAssembler, frame_bytes, ingest, split_frames, take_windows
from voicebot.session import ConnectionSession


def test_even_chunk_passes_through():
    frames, leftover = ingest(b"", b"\x01\x02\x03\x04")
    assert frames == b"\x01\x02\x03\x04"
    assert leftover == b""


def test_odd_chunk_withholds_final_byte():
    frames, leftover = ingest(b"", b"\x01\x02\x03")
    assert frames == b"\x01\x02"
    assert leftover == b"\x03"


def test_leftover_is_prepended():
    frames, leftover = ingest(b"\x09", b"\x01\x02\x03")
    assert frames == b"\x09\x01\x02\x03"
    assert leftover == b""


def test_single_byte_yields_nothing_to_process():
    frames, leftover = ingest(b"", b"\x07")
    assert frames == b""
    assert leftover == b"\x07"


def test_empty_chunk_keeps_leftover():
    frames, leftover = ingest(b"\x07", b"")
    assert frames == b""
    assert leftover == b"\x07"


def test_reframing_is_lossless_for_random_chunking():
    rng = random.Random(1234)
    data = bytes(rng.randrange(256) for _ in range(5001))
    out = bytearray()
    leftover = b""
    pos = 0
    while pos < len(data):
        size = rng.randint(0, 97)
        frames, leftover = ingest(leftover, data[pos : pos + size])
        assert len(frames) % 2 == 0
        assert len(leftover) in (0, 1)
        out.extend(frames)
        pos += size
    assert bytes(out) + leftover == data


def test_assembler_updates_session_leftover():
    session = ConnectionSession()
    assembler = FrameAssembler()

    assert assembler.feed(session, b"\x01\x02\x03") == b"\x01\x02"
    assert session.leftover == b"\x03"
    assert assembler.feed(session, b"\x04") == b"\x03\x04"
    assert session.leftover == b""


def test_frame_bytes():
    assert frame_bytes(16000, 30) == 960
    assert frame_bytes(16000, 20) == 640
    assert frame_bytes(8000, 10) == 160


def test_split_frames_drops_short_tail():
    frames = list(split_frames(b"\x00" * 25, 10))
    assert frames == [b"\x00" * 10, b"\x00" * 10]
    assert list(split_frames(b"\x00" * 5, 10)) == []


def test_take_windows_holds_short_remainder():
    windows, partial = take_windows(b"", b"\x01" * 25, 10)
    assert windows == b"\x01" * 20
    assert partial == b"\x01" * 5

    windows, partial = take_windows(partial, b"\x02" * 3, 10)
    assert windows == b""
    assert partial == b"\x01" * 5 + b"\x02" * 3


def test_windowed_assembler_is_lossless_for_random_chunking():
    rng = random.Random(99)
    data = bytes(rng.randrange(1, 256) for _ in range(20001))
    session = ConnectionSession()
    assembler = FrameAssembler(window_size=960)
    out = bytearray()
    pos = 0
    while pos < len(data):
        size = rng.randint(1, 1500)
        windows = assembler.feed(session, data[pos : pos + size])
        assert len(windows) % 960 == 0
        assert len(session.partial_window) < 960
        out.extend(windows)
        pos += size
    assert bytes(out) + session.partial_window + session.leftover == data
