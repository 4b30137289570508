from __future__ import annotations

from enum import Enum


class TaskOrganizerError(Exception):
    """Base class for errors surfaced by the note parsing pipeline."""


class ConfigurationError(TaskOrganizerError):
    """The service is missing configuration it needs (credential, reference data)."""


class AIErrorReason(str, Enum):
    UNCONFIGURED = "unconfigured"
    MODEL_UNAVAILABLE = "model_unavailable"
    UNAUTHORIZED = "unauthorized"
    PROVIDER_ERROR = "provider_error"


class AIServiceError(TaskOrganizerError):
    def __init__(self, reason: AIErrorReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class AIConfigurationError(ConfigurationError, AIServiceError):
    """No credential for the AI provider. Raised before any network I/O."""

    def __init__(self, message: str):
        AIServiceError.__init__(self, AIErrorReason.UNCONFIGURED, message)


class ParseError(TaskOrganizerError):
    """The AI output could not be decoded as a JSON array."""
