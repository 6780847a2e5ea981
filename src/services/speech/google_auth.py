"""
Google service-account token exchange.

Signs an RS256 JWT assertion with the service account's private key and trades
it for an OAuth access token using the jwt-bearer grant.
"""

import json
import time
from typing import Any, Callable, Optional

import httpx
import jwt
from loguru import logger as log

from common import global_config

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class SpeechSynthesisError(Exception):
    """Raised for any failure while synthesizing speech."""


def load_service_account(raw_key: str) -> dict[str, Any]:
    try:
        key_data = json.loads(raw_key)
    except (TypeError, ValueError) as e:
        raise SpeechSynthesisError(f"Invalid service account key: {e}") from e
    if not isinstance(key_data, dict):
        raise SpeechSynthesisError("Invalid service account key: expected an object")
    for field in ("client_email", "private_key"):
        if not key_data.get(field):
            raise SpeechSynthesisError(f"Service account key is missing {field}")
    return key_data


def build_assertion(
    key_data: dict[str, Any],
    now: Optional[int] = None,
    scope: str = global_config.speech.scope,
    audience: str = global_config.speech.token_url,
    lifetime_seconds: int = global_config.speech.token_lifetime_seconds,
) -> str:
    """Create the signed JWT assertion for the token endpoint."""
    issued_at = int(time.time()) if now is None else now
    claims = {
        "iss": key_data["client_email"],
        "scope": scope,
        "aud": audience,
        "exp": issued_at + lifetime_seconds,
        "iat": issued_at,
    }
    return jwt.encode(
        claims,
        key_data["private_key"],
        algorithm="RS256",
        headers={"typ": "JWT"},
    )


class GoogleAccessTokenProvider:
    def __init__(
        self,
        service_account_key: str = global_config.GOOGLE_CLOUD_SERVICE_ACCOUNT_KEY,
        client: Optional[httpx.AsyncClient] = None,
        token_url: str = global_config.speech.token_url,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.service_account_key = service_account_key
        self.client = client or httpx.AsyncClient(
            timeout=global_config.speech.request_timeout_seconds
        )
        self.token_url = token_url
        self.clock = clock

    async def get_access_token(self) -> str:
        try:
            key_data = load_service_account(self.service_account_key)
            assertion = build_assertion(
                key_data, now=int(self.clock()), audience=self.token_url
            )
            response = await self.client.post(
                self.token_url,
                data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            )
            if not response.is_success:
                raise SpeechSynthesisError(
                    f"Failed to get access token: {response.status_code}"
                )
            access_token = response.json().get("access_token")
            if not access_token:
                raise SpeechSynthesisError("Token response did not include access_token")
            return access_token
        except Exception as e:
            log.error(f"Error getting Google access token: {e}")
            raise SpeechSynthesisError(f"Authentication failed: {e}") from e
