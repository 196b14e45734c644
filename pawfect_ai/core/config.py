"""
Core Configuration Module

Centralizes environment configuration for the sitter trust and booking service.
Provides a singleton Settings object with defaults aligned to the collaborator clients.

Usage:
    from pawfect_ai.core.config import settings

    print(settings.APP_ENV)
    print(settings.BACKEND_API_URL)
"""

import os
from typing import List, Optional


class Settings:
    """
    Application settings loaded from environment variables.

    Properties are re-read on every access so tests can monkeypatch the
    environment without rebuilding the singleton.
    """

    # ==================== Application Settings ====================

    @property
    def APP_ENV(self) -> str:
        """Application environment: dev, staging, production"""
        return os.getenv("APP_ENV", "dev")

    @property
    def LOG_LEVEL(self) -> str:
        """Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"""
        return os.getenv("LOG_LEVEL", "INFO")

    @property
    def DATA_STORE(self) -> str:
        """Data store backing the API: backend (HTTP) or memory"""
        return os.getenv("DATA_STORE", "backend").lower()

    # ==================== Collaborator URLs ====================

    @property
    def BACKEND_API_URL(self) -> str:
        """Marketplace backend exposing sitter, pet and booking records"""
        return os.getenv("BACKEND_API_URL", "http://localhost:3001")

    @property
    def NOTIFICATION_SERVICE_URL(self) -> str:
        """Notification service accepting typed booking events"""
        return os.getenv("NOTIFICATION_SERVICE_URL", "http://localhost:3006")

    @property
    def INSIGHT_API_URL(self) -> str:
        """OpenAI-compatible chat completions endpoint used for external insight"""
        return os.getenv("INSIGHT_API_URL", "https://api.openai.com/v1/chat/completions")

    @property
    def INSIGHT_API_KEY(self) -> Optional[str]:
        """API key for the insight provider (unset disables the external signal)"""
        return os.getenv("INSIGHT_API_KEY") or os.getenv("OPENAI_API_KEY")

    @property
    def INSIGHT_MODEL(self) -> str:
        """Model name sent to the insight provider"""
        return os.getenv("INSIGHT_MODEL", "gpt-4o-mini")

    # ==================== HTTP Client Settings ====================

    @property
    def DEFAULT_CLIENT_TIMEOUT(self) -> float:
        """Default HTTP client timeout in seconds"""
        return float(os.getenv("DEFAULT_CLIENT_TIMEOUT", "10.0"))

    @property
    def DEFAULT_CLIENT_MAX_CONNECTIONS(self) -> int:
        """Default maximum HTTP connections in pool"""
        return int(os.getenv("DEFAULT_CLIENT_MAX_CONNECTIONS", "50"))

    @property
    def DEFAULT_CLIENT_MAX_KEEPALIVE(self) -> int:
        """Default maximum keepalive connections in pool"""
        return int(os.getenv("DEFAULT_CLIENT_MAX_KEEPALIVE", "10"))

    @property
    def BACKEND_CLIENT_TIMEOUT(self) -> float:
        """Backend data store client timeout"""
        return float(os.getenv("BACKEND_CLIENT_TIMEOUT", str(self.DEFAULT_CLIENT_TIMEOUT)))

    @property
    def NOTIFICATION_CLIENT_TIMEOUT(self) -> float:
        """Notification client timeout"""
        return float(os.getenv("NOTIFICATION_CLIENT_TIMEOUT", "5.0"))

    @property
    def INSIGHT_TIMEOUT_SECONDS(self) -> float:
        """Upper bound on any external insight call before falling back"""
        return float(os.getenv("INSIGHT_TIMEOUT_SECONDS", "2.0"))

    # ==================== Scheduling Settings ====================

    @property
    def DEFAULT_OPEN_HOUR(self) -> int:
        """Start of the preference window used when a sitter has no configured hours"""
        return int(os.getenv("DEFAULT_OPEN_HOUR", "8"))

    @property
    def DEFAULT_CLOSE_HOUR(self) -> int:
        """End of the preference window used when a sitter has no configured hours"""
        return int(os.getenv("DEFAULT_CLOSE_HOUR", "18"))

    @property
    def AVAILABILITY_CACHE_TTL_SECONDS(self) -> float:
        """Lifetime of cached availability lookups"""
        return float(os.getenv("AVAILABILITY_CACHE_TTL_SECONDS", "60"))

    # ==================== Pricing Settings ====================

    @property
    def DEFAULT_HOURLY_RATE(self) -> float:
        """Hourly rate applied when neither request nor sitter profile carries one"""
        return float(os.getenv("DEFAULT_HOURLY_RATE", "25.0"))

    @property
    def AI_DISCOUNT_FACTOR(self) -> float:
        """Price multiplier for bookings created from an AI-optimized suggestion"""
        return float(os.getenv("AI_DISCOUNT_FACTOR", "0.95"))

    # ==================== Models ====================

    @property
    def TRUST_MODEL_PATH(self) -> Optional[str]:
        """Optional JSON weights file for the trust model"""
        return os.getenv("TRUST_MODEL_PATH")

    # ==================== CORS Settings ====================

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Allowed CORS origins"""
        origins_str = os.getenv("CORS_ORIGINS", "*")
        if origins_str == "*":
            return ["*"]
        return [origin.strip() for origin in origins_str.split(",")]


# ==================== Singleton Instance ====================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the singleton Settings instance.

    Returns:
        Settings object with configuration values
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


# Convenience singleton for direct import
settings = get_settings()
