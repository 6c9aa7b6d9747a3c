"""Bearer token parsing and verification for the authorization gate."""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from app.config.settings import AuthMode, SecuritySettings
from app.core.exceptions import AuthError, ErrorCode

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header value.

    Raises AuthError when the header is absent, lacks the ``Bearer `` prefix or
    carries an empty token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthError()
    return token


class TokenVerifier:
    """Verifies bearer tokens issued by the identity provider.

    With a JWKS URL the signing key is looked up by ``kid``; otherwise the
    shared secret is used. In ``presence`` mode only the header format is
    checked and no claims are returned.
    """

    def __init__(self, settings: SecuritySettings, jwks_client: Optional[jwt.PyJWKClient] = None):
        self.settings = settings
        self.algorithms = settings.get_jwt_algorithms()
        self._jwks_client = jwks_client
        if self._jwks_client is None and settings.jwks_url:
            self._jwks_client = jwt.PyJWKClient(settings.jwks_url)

    @property
    def enabled(self) -> bool:
        return self.settings.auth_mode == AuthMode.JWT

    async def verify(self, token: str) -> Dict[str, Any]:
        if not self.enabled:
            return {}

        try:
            if self._jwks_client is not None:
                # PyJWKClient fetches over blocking urllib
                signing_key = await asyncio.to_thread(self._jwks_client.get_signing_key_from_jwt, token)
                key = signing_key.key
            else:
                key = self.settings.jwt_secret
            return jwt.decode(
                token,
                key,
                algorithms=self.algorithms,
                audience=self.settings.jwt_audience,
                issuer=self.settings.jwt_issuer,
                options={"verify_aud": bool(self.settings.jwt_audience), "require": ["exp"]},
            )
        except jwt.PyJWTError as e:
            logger.info(f"Bearer token rejected: {type(e).__name__}")
            raise AuthError("Invalid or expired token", error_code=ErrorCode.INVALID_TOKEN) from e


def issue_token(secret: str, subject: str, expires_minutes: int = 60, algorithm: str = "HS256",
                **claims: Any) -> str:
    """Sign a token with a shared secret; backs ``run.py --issue-dev-token``."""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": subject,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        **claims,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)
