import json

import httpx

from src.api.dependencies import get_speech_synthesizer
from src.services.speech.google_auth import SpeechSynthesisError
from src.services.speech.synthesizer import SpeechSynthesizer
from tests.e2e.e2e_test_base import E2ETestBase


class RecordingTokenProvider:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = 0

    async def get_access_token(self) -> str:
        self.calls += 1
        if self.error:
            raise self.error
        return "ya29.token"


class TestTTSRoute(E2ETestBase):
    def use_synthesizer(self, handler, token_provider=None):
        token_provider = token_provider or RecordingTokenProvider()
        synthesizer = SpeechSynthesizer(
            token_provider=token_provider,
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        self.override(get_speech_synthesizer, lambda: synthesizer)
        return token_provider

    def test_synthesizes_with_defaults(self):
        sent = {}

        def handler(request: httpx.Request) -> httpx.Response:
            sent.update(json.loads(request.content))
            return httpx.Response(200, json={"audioContent": "SUQzBAAAAAAA"})

        self.use_synthesizer(handler)

        response = self.client.post(
            "/api/tts/synthesize", json={"text": "Your campaign is live"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["audioContent"] == "SUQzBAAAAAAA"
        assert data["voice"] == {
            "languageCode": "en-US",
            "name": "en-US-Neural2-D",
            "ssmlGender": "NEUTRAL",
        }
        assert data["audioConfig"] == {
            "audioEncoding": "MP3",
            "speakingRate": 1.0,
            "pitch": 0.0,
        }
        assert sent["input"] == {"text": "Your campaign is live"}

    def test_caller_settings_are_forwarded_verbatim(self):
        sent = {}

        def handler(request: httpx.Request) -> httpx.Response:
            sent.update(json.loads(request.content))
            return httpx.Response(200, json={"audioContent": "AAAA"})

        self.use_synthesizer(handler)
        voice = {"languageCode": "en-GB", "name": "en-GB-Neural2-B"}
        audio_config = {
            "audioEncoding": "LINEAR16",
            "sampleRateHertz": 16000,
            "volumeGainDb": 3.0,
            "effectsProfileId": ["telephony-class-application"],
        }

        response = self.client.post(
            "/api/tts/synthesize",
            json={"text": "Hi", "voice": voice, "audioConfig": audio_config},
        )

        assert response.status_code == 200
        assert sent["voice"] == voice
        assert sent["audioConfig"] == audio_config
        assert response.json()["voice"] == voice
        assert response.json()["audioConfig"] == audio_config

    def test_empty_text_rejected_without_token_exchange(self):
        token_provider = self.use_synthesizer(
            lambda request: httpx.Response(200, json={"audioContent": ""})
        )

        for body in ({"text": ""}, {}):
            response = self.client.post("/api/tts/synthesize", json=body)

            assert response.status_code == 400
            assert response.json() == {"error": "Text is required for TTS synthesis"}
        assert token_provider.calls == 0

    def test_authentication_failure(self):
        self.use_synthesizer(
            lambda request: httpx.Response(200, json={}),
            RecordingTokenProvider(
                SpeechSynthesisError("Authentication failed: bad key")
            ),
        )

        response = self.client.post("/api/tts/synthesize", json={"text": "Hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Authentication failed: bad key"}

    def test_upstream_failure(self):
        self.use_synthesizer(lambda request: httpx.Response(500, text="internal"))

        response = self.client.post("/api/tts/synthesize", json={"text": "Hi"})

        assert response.status_code == 500
        assert response.json()["error"].startswith("TTS API request failed: 500")
