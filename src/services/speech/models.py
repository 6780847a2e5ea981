from typing import Any, Optional

from src.utils.models import CamelModel

# Sent only when the caller omits the whole object; caller objects pass through untouched
DEFAULT_VOICE: dict[str, Any] = {
    "languageCode": "en-US",
    "name": "en-US-Neural2-D",
    "ssmlGender": "NEUTRAL",
}

DEFAULT_AUDIO_CONFIG: dict[str, Any] = {
    "audioEncoding": "MP3",
    "speakingRate": 1.0,
    "pitch": 0.0,
}


class TTSRequest(CamelModel):
    text: Optional[str] = None
    voice: Optional[dict[str, Any]] = None
    audio_config: Optional[dict[str, Any]] = None


class TTSResponse(CamelModel):
    audio_content: str
    audio_config: dict[str, Any]
    voice: dict[str, Any]
