"""
Middleware package for FastAPI application.
"""

from .auth import AuthenticationMiddleware
from .cors import CORSEnvelopeMiddleware
from .request_context import RequestContextMiddleware

__all__ = ["AuthenticationMiddleware", "CORSEnvelopeMiddleware", "RequestContextMiddleware"]
