"""
Authorization gate middleware.
Rejects requests without a valid ``Authorization: Bearer <token>`` header before any handler runs.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import logging
from typing import Optional, Set

from app.config.settings import Settings
from app.core.exceptions import AuthError
from app.core.security import TokenVerifier, extract_bearer_token

logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Bearer-token authentication middleware.

    Verifies the token for protected endpoints and allows public access to
    health check, language list and documentation endpoints. Verified claims
    are stored on ``request.state.auth_claims``.
    """

    def __init__(self, app, settings: Settings, verifier: Optional[TokenVerifier] = None,
                 public_paths: Optional[Set[str]] = None):
        super().__init__(app)
        self.settings = settings
        self.verifier = verifier or TokenVerifier(settings.security)
        self.public_paths = public_paths or {
            "/",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/health",
            "/api/languages",
        }
        if not self.verifier.enabled:
            logger.warning("Token verification disabled; only the Bearer header format is checked.")

    async def dispatch(self, request: Request, call_next):
        """
        Process authentication for incoming requests.

        Args:
            request: FastAPI request object
            call_next: Next middleware in chain

        Returns:
            Response object
        """
        if request.method == "OPTIONS" or request.url.path in self.public_paths:
            return await call_next(request)

        request_id = getattr(request.state, 'request_id', 'unknown')
        try:
            token = extract_bearer_token(request.headers.get("Authorization"))
            claims = await self.verifier.verify(token)
        except AuthError as exc:
            logger.warning(
                f"Rejected request {request_id}: {exc.message}",
                extra={
                    'request_id': request_id,
                    'path': request.url.path,
                    'client_ip': request.client.host if request.client else 'unknown'
                }
            )
            return request.app.state.error_handler.create_error_response(
                error_code=exc.error_code.value,
                message=exc.message,
                request_id=request_id,
                status_code=exc.status_code
            )

        request.state.auth_claims = claims
        request.state.user_id = claims.get("sub")

        logger.debug(f"Request {request_id} authenticated successfully")

        return await call_next(request)
