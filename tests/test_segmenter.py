import pytest

from conftest import FRAME_20MS, SAMPLE_RATE, ManualClock, SignalClassifier, TickClock, silence_pcm, voice_pcm
from voicebot.audio.segmenter import UtteranceSegmenter
from voicebot.errors import ClassificationError
from voicebot.session import ConnectionSession


def make_segmenter(clock, classifier=None) -> UtteranceSegmenter:
    return UtteranceSegmenter(
        classifier or SignalClassifier(),
        sample_rate=SAMPLE_RATE,
        channels=1,
        frame_ms=20,
        silence_threshold_ms=300,
        clock=clock,
    )


async def feed_all(segmenter, session, chunks):
    out = []
    for chunk in chunks:
        utterance = await segmenter.feed(session, chunk)
        if utterance is not None:
            out.append(utterance)
    return out


@pytest.mark.asyncio
async def test_voice_then_silence_yields_one_utterance(segmenter):
    session = ConnectionSession()
    voice = [voice_pcm(20)] * 25  # 500ms
    silence = [silence_pcm(20)] * 20  # 400ms

    utterances = await feed_all(segmenter, session, voice + silence)

    assert len(utterances) == 1
    utterance = utterances[0]
    assert utterance.pcm.startswith(b"".join(voice))
    # Silence crossing happens on the 17th silence chunk (320ms > 300ms)
    assert len(utterance.pcm) == 25 * FRAME_20MS + 17 * FRAME_20MS
    assert utterance.sample_rate == SAMPLE_RATE
    assert utterance.channels == 1
    assert utterance.session_id == session.session_id
    # Session is idle again after the boundary
    assert session.buffer == bytearray()


@pytest.mark.asyncio
async def test_silence_only_yields_nothing(segmenter):
    session = ConnectionSession()
    utterances = await feed_all(segmenter, session, [silence_pcm(20)] * 100)

    assert utterances == []
    assert session.buffer == bytearray()


@pytest.mark.asyncio
async def test_voice_resets_silence_timer(segmenter):
    session = ConnectionSession()
    pattern = ([voice_pcm(20)] + [silence_pcm(20)] * 10) * 5

    assert await feed_all(segmenter, session, pattern) == []
    assert session.is_accumulating
    assert session.silence_started_at is not None


@pytest.mark.asyncio
async def test_threshold_needs_strictly_more_than_threshold():
    clock = ManualClock()
    segmenter = make_segmenter(clock)
    session = ConnectionSession()

    await segmenter.feed(session, voice_pcm(20))
    clock.now = 1000
    assert await segmenter.feed(session, silence_pcm(20)) is None
    clock.now = 1300
    assert await segmenter.feed(session, silence_pcm(20)) is None
    clock.now = 1301
    utterance = await segmenter.feed(session, silence_pcm(20))
    assert utterance is not None
    assert len(utterance.pcm) == 4 * FRAME_20MS


@pytest.mark.asyncio
async def test_chunk_shorter_than_a_window_is_held_not_classified(segmenter, classifier):
    session = ConnectionSession()
    await segmenter.feed(session, voice_pcm(20))
    await segmenter.feed(session, silence_pcm(20))
    buffer_before = bytes(session.buffer)
    silence_before = session.silence_started_at
    calls_before = classifier.calls

    assert await segmenter.feed(session, b"\x05" * 100) is None

    assert bytes(session.buffer) == buffer_before
    assert session.silence_started_at == silence_before
    assert session.partial_window == b"\x05" * 100
    assert classifier.calls == calls_before

    # The next chunk completes the window; the held bytes lead it
    await segmenter.feed(session, voice_pcm(20))
    assert bytes(session.buffer) == buffer_before + b"\x05" * 100 + voice_pcm(20)[: FRAME_20MS - 100]
    assert len(session.partial_window) == 100


class Unclassifiable(SignalClassifier):
    def __init__(self) -> None:
        super().__init__()
        self.failing = False

    async def classify(self, frame, sample_rate):
        if self.failing:
            raise ClassificationError("vad unavailable")
        return await super().classify(frame, sample_rate)


@pytest.mark.asyncio
async def test_classification_error_keeps_audio_of_open_utterance():
    classifier = Unclassifiable()
    segmenter = make_segmenter(ManualClock(), classifier)
    session = ConnectionSession()
    await segmenter.feed(session, voice_pcm(20))
    await segmenter.feed(session, silence_pcm(20))
    silence_before = session.silence_started_at

    classifier.failing = True
    assert await segmenter.feed(session, voice_pcm(20)) is None

    assert bytes(session.buffer) == voice_pcm(20) + silence_pcm(20) + voice_pcm(20)
    assert session.silence_started_at == silence_before


@pytest.mark.asyncio
async def test_classification_error_while_idle_changes_nothing():
    classifier = Unclassifiable()
    classifier.failing = True
    segmenter = make_segmenter(ManualClock(), classifier)
    session = ConnectionSession()

    assert await segmenter.feed(session, voice_pcm(20)) is None

    assert session.buffer == bytearray()
    assert session.silence_started_at is None


@pytest.mark.asyncio
async def test_unaligned_chunks_are_reassembled():
    segmenter = make_segmenter(TickClock(step=20.0))
    session = ConnectionSession()
    stream = voice_pcm(20) * 25 + silence_pcm(20) * 20
    # 641-byte pieces: every other call carries an odd byte forward
    pieces = [stream[i : i + 641] for i in range(0, len(stream), 641)]

    utterances = await feed_all(segmenter, session, pieces)

    assert len(utterances) == 1
    assert utterances[0].pcm.startswith(voice_pcm(20) * 25)
    assert len(utterances[0].pcm) % 2 == 0


@pytest.mark.asyncio
async def test_sessions_do_not_share_state(segmenter):
    a = ConnectionSession()
    b = ConnectionSession()

    await segmenter.feed(a, voice_pcm(20))
    await segmenter.feed(b, silence_pcm(20))

    assert len(a.buffer) == FRAME_20MS
    assert b.buffer == bytearray()


# ---------------------------------------------------------------------
# Default 30 ms window with arbitrary client chunk sizes
# ---------------------------------------------------------------------

BYTES_PER_MS = SAMPLE_RATE * 2 // 1000


async def feed_stream(segmenter, session, stream: bytes, sizes, clock: ManualClock):
    """Feed stream in chunks (cycling through sizes); the clock follows the audio fed so far."""
    out = []
    pos = 0
    i = 0
    while pos < len(stream):
        size = sizes[i % len(sizes)]
        pos += size
        clock.now = min(pos, len(stream)) / BYTES_PER_MS
        utterance = await segmenter.feed(session, stream[pos - size : pos])
        if utterance is not None:
            out.append(utterance)
        i += 1
    return out


def default_window_segmenter(clock) -> UtteranceSegmenter:
    # frame_ms left to the configured default (30 ms = 960 bytes)
    return UtteranceSegmenter(SignalClassifier(), sample_rate=SAMPLE_RATE, silence_threshold_ms=300, clock=clock)


@pytest.mark.asyncio
@pytest.mark.parametrize("size", [256, 320, 640, 1000, 257, 961, 1001])
async def test_whole_voice_run_survives_any_chunk_size(size):
    clock = ManualClock()
    segmenter = default_window_segmenter(clock)
    session = ConnectionSession()
    voice = voice_pcm(1000)

    utterances = await feed_stream(segmenter, session, voice + silence_pcm(1000), [size], clock)

    assert len(utterances) == 1
    assert utterances[0].pcm[: len(voice)] == voice
    assert len(utterances[0].pcm) % 960 == 0


@pytest.mark.asyncio
async def test_mixed_short_and_long_chunks_lose_no_voice():
    clock = ManualClock()
    segmenter = default_window_segmenter(clock)
    session = ConnectionSession()
    voice = voice_pcm(500)

    # 40 ms then 10 ms pieces; neither lines up with the 30 ms window
    utterances = await feed_stream(segmenter, session, voice + silence_pcm(1000), [1280, 320], clock)

    assert len(utterances) == 1
    assert utterances[0].pcm.startswith(voice)


@pytest.mark.asyncio
async def test_speech_onset_inside_a_window_is_kept():
    clock = ManualClock()
    segmenter = default_window_segmenter(clock)
    session = ConnectionSession()
    voice = voice_pcm(500)
    # 50 ms of silence: the first window is silence, the second straddles the onset
    stream = silence_pcm(50) + voice + silence_pcm(1000)

    utterances = await feed_stream(segmenter, session, stream, [FRAME_20MS], clock)

    assert len(utterances) == 1
    pcm = utterances[0].pcm
    assert pcm[:FRAME_20MS] == silence_pcm(20)
    assert pcm[FRAME_20MS : FRAME_20MS + len(voice)] == voice
