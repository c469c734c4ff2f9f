"""Application configuration. Loads from env vars."""
from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    """App settings. Override via environment variables."""

    # Server
    PORT: int = 3000
    CORS_ORIGIN: str = "*"

    # Audio: PCM 16-bit mono, 16kHz (inbound stream contract)
    SAMPLE_RATE: int = 16000
    SAMPLE_WIDTH: int = 2  # 16-bit
    CHANNELS: int = 1

    # VAD: webrtcvad accepts 10/20/30 ms frames; 30ms @ 16kHz = 480 samples = 960 bytes
    VAD_FRAME_MS: int = 30
    VAD_AGGRESSIVENESS: int = 3  # 0 (least) .. 3 (very aggressive)

    # Silence run (ms) that closes an utterance
    SILENCE_THRESHOLD_MS: int = 300

    # Transcription (AssemblyAI): upload + poll; ceiling = MAX_POLLS * POLL_INTERVAL
    ASSEMBLY_API_KEY: str = ""
    ASSEMBLY_API_URL: str = "https://api.assemblyai.com/v2"
    ASSEMBLY_LANGUAGE_CODE: str = "en"
    TRANSCRIBE_POLL_INTERVAL_SEC: float = 2.0
    TRANSCRIBE_MAX_POLLS: int = 60

    # Text generation: "gemini" | "cloudflare"
    LLM_BACKEND: Literal["gemini", "cloudflare"] = "gemini"
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-pro"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    CLOUDFLARE_ACCOUNT_ID: str = ""
    CLOUDFLARE_API_TOKEN: str = ""
    CLOUDFLARE_LLM_MODEL: str = "@cf/meta/llama-3.1-8b-instruct"
    LLM_MAX_TOKENS: int = 512

    # TTS: elevenlabs | edge (Edge TTS, no key) | none (disabled)
    TTS_BACKEND: str = "elevenlabs"
    ELEVENLABS_API_KEY: str = ""
    ELEVENLABS_API_URL: str = "https://api.elevenlabs.io/v1"
    ELEVENLABS_VOICE_ID: str = "DMyrgzQFny3JI1Y1paM5"
    TTS_EDGE_VOICE: str = "en-US-GuyNeural"

    # Outbound HTTP calls to collaborators
    HTTP_TIMEOUT_SEC: float = 60.0

    # Logging: level (DEBUG, INFO, WARNING, ERROR); file path empty = console only
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
