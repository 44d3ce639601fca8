"""Core modules for deploywire - centralized error definitions."""

from deploywire.core.errors import (
    ConfigurationError,
    ConfigurationNotSelected,
    CorruptEnvironmentFile,
    DeploywireError,
    EnvironmentFileConflict,
    ExitCode,
    ProviderError,
    UnknownResourceKind,
    UnresolvedResource,
    UnsupportedWiringShape,
    ValidationError,
    VerificationFailed,
    WrapTargetNotLive,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "DeploywireError",
    "ConfigurationError",
    "ConfigurationNotSelected",
    "CorruptEnvironmentFile",
    "EnvironmentFileConflict",
    "ProviderError",
    "ValidationError",
    "UnknownResourceKind",
    "UnsupportedWiringShape",
    "VerificationFailed",
    "WrapTargetNotLive",
    "UnresolvedResource",
    "main_with_error_handling",
    "format_error_message",
]
