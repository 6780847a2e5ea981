from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger as log

from src.api.dependencies import get_speech_synthesizer
from src.services.speech.google_auth import SpeechSynthesisError
from src.services.speech.models import TTSRequest, TTSResponse
from src.services.speech.synthesizer import SpeechSynthesizer

router = APIRouter(prefix="/api/tts", tags=["Speech"])


@router.post("/synthesize", response_model=TTSResponse)
async def synthesize_speech(
    payload: TTSRequest,
    synthesizer: SpeechSynthesizer = Depends(get_speech_synthesizer),
):
    """Proxy a text-to-speech request to Google Cloud TTS."""
    if not payload.text:
        return JSONResponse(
            status_code=400, content={"error": "Text is required for TTS synthesis"}
        )

    try:
        return await synthesizer.synthesize(payload)
    except SpeechSynthesisError as e:
        log.error(f"TTS synthesis error: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})
