"""Run the backend: python -m voicebot"""
import uvicorn

from voicebot.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("voicebot.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
