"""Forwards text-to-speech requests to Google Cloud Text-to-Speech."""

from typing import Optional, Protocol

import httpx
from loguru import logger as log

from common import global_config
from src.services.speech.google_auth import SpeechSynthesisError
from src.services.speech.models import (
    DEFAULT_AUDIO_CONFIG,
    DEFAULT_VOICE,
    TTSRequest,
    TTSResponse,
)


class AccessTokenProvider(Protocol):
    async def get_access_token(self) -> str: ...


class SpeechSynthesizer:
    def __init__(
        self,
        token_provider: AccessTokenProvider,
        client: Optional[httpx.AsyncClient] = None,
        synthesize_url: str = global_config.speech.synthesize_url,
    ) -> None:
        self.token_provider = token_provider
        self.client = client or httpx.AsyncClient(
            timeout=global_config.speech.request_timeout_seconds
        )
        self.synthesize_url = synthesize_url

    async def synthesize(self, request: TTSRequest) -> TTSResponse:
        """
        Synthesize speech for ``request.text``.

        A missing voice or audio config falls back to en-US-Neural2-D / MP3.
        Objects supplied by the caller are forwarded as given, including
        fields this service does not know about, and echoed back next to
        the audio content.

        Raises:
            SpeechSynthesisError: if the text is empty or any upstream step fails
        """
        if not request.text:
            raise SpeechSynthesisError("Text is required for TTS synthesis")

        voice = dict(DEFAULT_VOICE) if request.voice is None else request.voice
        audio_config = (
            dict(DEFAULT_AUDIO_CONFIG)
            if request.audio_config is None
            else request.audio_config
        )
        payload = {
            "input": {"text": request.text},
            "voice": voice,
            "audioConfig": audio_config,
        }

        access_token = await self.token_provider.get_access_token()

        try:
            response = await self.client.post(
                self.synthesize_url,
                json=payload,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            raise SpeechSynthesisError(f"TTS API request failed: {e}") from e

        if not response.is_success:
            log.error(f"Google Cloud TTS API error: {response.text}")
            raise SpeechSynthesisError(
                f"TTS API request failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            audio_content = response.json()["audioContent"]
        except (ValueError, KeyError) as e:
            raise SpeechSynthesisError(f"Malformed TTS response: {e}") from e

        return TTSResponse(
            audio_content=audio_content, audio_config=audio_config, voice=voice
        )
