"""
Configuration loader utility for environment-specific settings.
"""

import logging
import os
from pathlib import Path
from typing import Optional
from .settings import Settings, Environment

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Utility class for loading environment-specific configurations"""

    @staticmethod
    def load_environment_config(environment: Optional[str] = None) -> Settings:
        """
        Load configuration for the specified environment.

        Args:
            environment: Target environment (development, staging, production, testing)
                        If None, uses ENVIRONMENT env var or defaults to development

        Returns:
            Settings instance with environment-specific configuration
        """
        if environment is None:
            environment = os.getenv("ENVIRONMENT", "development")

        env = Environment(environment.lower())
        env_file_path = Path(f".env.{env.value}")

        if env_file_path.exists():
            return Settings.from_env_file(str(env_file_path), environment=env)

        logger.warning(f"Environment file {env_file_path} not found, using default settings")
        return Settings(environment=env)

    @staticmethod
    def get_available_environments() -> list[str]:
        """Get list of available environment configurations"""
        env_files = []
        for env_file in Path(".").glob(".env.*"):
            if env_file.name.endswith(".sample"):
                continue
            env_files.append(env_file.name.replace(".env.", ""))
        return sorted(env_files)

    @staticmethod
    def validate_environment_config(environment: str) -> bool:
        """
        Validate that an environment configuration can be loaded and carries
        the upstream credentials a deployed server needs.
        """
        try:
            settings = ConfigLoader.load_environment_config(environment)
        except ValueError as e:
            logger.error(f"Invalid configuration for '{environment}': {e}")
            return False

        if settings.is_production():
            missing = []
            if not settings.vision.api_key:
                missing.append("VISION_API_KEY")
            if not settings.translation_api.is_configured:
                missing.append("TRANSLATION_API_BASE_URL/TRANSLATION_API_KEY")
            if settings.security.auth_mode.value == "jwt" and not settings.security.jwks_url \
                    and settings.security.jwt_secret == "please-change-me":
                missing.append("SECURITY_JWT_SECRET or SECURITY_JWKS_URL")
            if missing:
                logger.error(f"Production configuration is missing: {', '.join(missing)}")
                return False

        return True

    @staticmethod
    def create_sample_env_file(environment: str, output_path: Optional[str] = None) -> str:
        """
        Create a sample .env file for the specified environment.

        Args:
            environment: Target environment
            output_path: Optional custom output path

        Returns:
            Path to the created sample file
        """
        env = Environment(environment.lower())

        if output_path is None:
            output_path = f".env.{env.value}.sample"

        defaults = Settings(environment=env)

        sample_content = f"""# Sample configuration for {env.value} environment
# Copy this file to .env.{env.value} and modify as needed

# Application Configuration
APP_NAME={defaults.app_name}
APP_VERSION={defaults.app_version}
ENVIRONMENT={env.value}
DEBUG={'true' if env == Environment.DEVELOPMENT else 'false'}

# Server Configuration
HOST={defaults.host}
PORT={defaults.port}
RELOAD={'true' if env == Environment.DEVELOPMENT else 'false'}
WORKERS={1 if env == Environment.DEVELOPMENT else 4}

# Logging Configuration
LOG_LEVEL={defaults.log_level.value}
LOG_FORMAT={defaults.log_format}

# Vision-generation API
GEMINI_API_KEY=your-gemini-api-key
VISION_MODEL={defaults.vision.model}
VISION_TIMEOUT_SECONDS={defaults.vision.timeout_seconds}

# Asynchronous translation API
TRANSLATION_API_BASE_URL=https://translation.example.com
TRANSLATION_API_KEY=your-translation-api-key
TRANSLATION_API_TIMEOUT_SECONDS={defaults.translation_api.timeout_seconds}
TRANSLATION_API_FAST_CREATION={str(defaults.translation_api.fast_creation).lower()}
TRANSLATION_API_OCR_TRANSLATION={str(defaults.translation_api.ocr_translation).lower()}
TRANSLATION_API_UPLOAD_ENCODING={defaults.translation_api.upload_encoding.value}

# Security Configuration
SECURITY_AUTH_MODE={defaults.security.auth_mode.value}
SECURITY_JWT_SECRET=change-me
SECURITY_JWT_ALGORITHMS={defaults.security.jwt_algorithms}
SECURITY_JWKS_URL=
SECURITY_CORS_ALLOW_ORIGIN={defaults.security.cors_allow_origin}

# Upload and polling
UPLOAD_MAX_IMAGE_SIZE_MB={defaults.upload.max_image_size_mb}
POLLING_INTERVAL_SECONDS={defaults.polling.interval_seconds}
POLLING_MAX_POLLS={defaults.polling.max_polls}
"""

        with open(output_path, "w") as f:
            f.write(sample_content)

        return output_path


def load_config_for_environment(environment: Optional[str] = None) -> Settings:
    """Convenience function to load configuration for an environment"""
    return ConfigLoader.load_environment_config(environment)
