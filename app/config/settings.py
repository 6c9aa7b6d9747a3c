"""
Configuration management system using Pydantic Settings.
Supports environment-based configuration for different deployment environments.
"""

import os
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings
from typing import Optional, Dict, List
from enum import Enum


class Environment(str, Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AuthMode(str, Enum):
    """How bearer tokens are checked by the authorization gate"""
    JWT = "jwt"
    PRESENCE = "presence"


class UploadEncoding(str, Enum):
    """Body encoding used when creating translation tasks upstream"""
    MULTIPART = "multipart"
    JSON = "json"


class VisionSettings(BaseSettings):
    """Vision-generation API (Gemini) configuration"""

    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("VISION_API_KEY", "GEMINI_API_KEY"),
        description="Server-held key for the vision-generation API",
    )
    model: str = Field(default="gemini-3-pro-image-preview")
    timeout_seconds: float = Field(default=120.0, gt=0, le=600)

    model_config = {
        "env_prefix": "VISION_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "protected_namespaces": (),
        "populate_by_name": True,
    }


class TranslationApiSettings(BaseSettings):
    """Third-party asynchronous translation task API configuration"""

    base_url: Optional[str] = Field(default=None)
    api_key: Optional[str] = Field(default=None)
    timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    fast_creation: bool = Field(default=True)
    ocr_translation: bool = Field(default=False)
    upload_encoding: UploadEncoding = Field(default=UploadEncoding.MULTIPART)

    @field_validator('base_url', mode='before')
    @classmethod
    def strip_trailing_slash(cls, v):
        if isinstance(v, str):
            return v.rstrip("/") or None
        return v

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    model_config = {
        "env_prefix": "TRANSLATION_API_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


class SecuritySettings(BaseSettings):
    """Security, token verification and CORS configuration"""

    auth_mode: AuthMode = Field(default=AuthMode.JWT)
    jwt_secret: Optional[str] = Field(default="please-change-me")
    jwt_algorithms: str = Field(default="HS256", description="Comma-separated list")
    jwt_audience: Optional[str] = Field(default=None)
    jwt_issuer: Optional[str] = Field(default=None)
    jwks_url: Optional[str] = Field(default=None, description="Identity provider JWKS endpoint")
    cors_allow_origin: str = Field(default="*")
    cors_allow_methods: str = Field(default="GET, POST, OPTIONS")
    cors_allow_headers: str = Field(default="Content-Type, Authorization")

    @field_validator('auth_mode', mode='before')
    @classmethod
    def normalize_auth_mode(cls, v):
        if isinstance(v, str):
            return AuthMode(v.lower())
        return v

    def get_jwt_algorithms(self) -> List[str]:
        """Parse the algorithm list from its comma-separated form"""
        return [alg.strip() for alg in self.jwt_algorithms.split(",") if alg.strip()]

    model_config = {
        "env_prefix": "SECURITY_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


class UploadSettings(BaseSettings):
    """Inbound image upload limits"""

    max_image_size_mb: int = Field(default=10, ge=1, le=50)

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    model_config = {
        "env_prefix": "UPLOAD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


class PollingSettings(BaseSettings):
    """Client polling controller defaults"""

    interval_seconds: float = Field(default=2.0, ge=0)
    max_polls: int = Field(default=30, ge=1, le=1000)

    model_config = {
        "env_prefix": "POLLING_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


class Settings(BaseSettings):
    """Main application settings"""

    # Application Configuration
    app_name: str = Field(default="Menu Lens Backend")
    app_version: str = Field(default="1.0.0")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = Field(default=False)
    workers: int = Field(default=1, ge=1, le=16)

    # Logging Configuration
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="json", description="json or text")

    # Nested Settings
    vision: VisionSettings = Field(default_factory=VisionSettings)
    translation_api: TranslationApiSettings = Field(default_factory=TranslationApiSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment setting"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @classmethod
    def from_env_file(cls, env_file: str, **values) -> "Settings":
        """
        Build settings whose nested groups read the same env file as the
        top-level fields; nested groups otherwise only see ``.env``.
        """
        nested = {
            "vision": VisionSettings(_env_file=env_file),
            "translation_api": TranslationApiSettings(_env_file=env_file),
            "security": SecuritySettings(_env_file=env_file),
            "upload": UploadSettings(_env_file=env_file),
            "polling": PollingSettings(_env_file=env_file),
        }
        nested.update(values)
        return cls(_env_file=env_file, **nested)

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def get_cors_headers(self) -> Dict[str, str]:
        """Headers attached to every response and preflight answer"""
        return {
            "Access-Control-Allow-Origin": self.security.cors_allow_origin,
            "Access-Control-Allow-Methods": self.security.cors_allow_methods,
            "Access-Control-Allow-Headers": self.security.cors_allow_headers,
        }

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def _load_settings() -> Settings:
    """Settings for the process, from ``.env.<ENVIRONMENT>`` when that file exists"""
    env_file = Path(f".env.{os.getenv('ENVIRONMENT', Environment.DEVELOPMENT.value).lower()}")
    if env_file.exists():
        return Settings.from_env_file(str(env_file))
    return Settings()


# Global settings instance
settings = _load_settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment and files"""
    global settings
    settings = _load_settings()
    return settings
