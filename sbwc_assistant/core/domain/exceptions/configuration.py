"""Configuration exceptions for the SBWC assistant."""

from .base import AssistantError


class ConfigurationError(AssistantError):
    """Invalid or missing configuration."""

    error_code = "SBWC_CFG_001"


class MissingAPIKeyError(ConfigurationError):
    """Required API key or credential is not set."""

    error_code = "SBWC_CFG_002"
