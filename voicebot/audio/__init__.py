"""Audio pipeline: frame assembly, VAD, utterance segmentation, WAV encoding."""
from .receiver import FrameAssembler, frame_bytes, ingest, split_frames, take_windows
from .vad import VoiceActivity, VoiceClassifier, WebRTCVoiceClassifier, classify_chunk, contains_speech
from .segmenter import Utterance, UtteranceSegmenter
from .wav import pcm_to_wav

__all__ = [
    "FrameAssembler",
    "frame_bytes",
    "ingest",
    "split_frames",
    "take_windows",
    "VoiceActivity",
    "VoiceClassifier",
    "WebRTCVoiceClassifier",
    "classify_chunk",
    "contains_speech",
    "Utterance",
    "UtteranceSegmenter",
    "pcm_to_wav",
]
