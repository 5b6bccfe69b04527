"""Exception hierarchy for the study tracker."""


class SmartStudyError(Exception):
    """Base exception for all smart_study errors."""


class ValidationError(SmartStudyError):
    """Raised when user input is rejected before it reaches the data layer."""


class StorageError(SmartStudyError):
    """Raised when a data file cannot be written."""


class AuthError(SmartStudyError):
    """Raised when registration or login fails."""


class ConfigError(SmartStudyError):
    """Raised when the config file or environment holds invalid settings."""
