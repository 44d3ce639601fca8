"""
Unified error handling for deploywire.

Every failure the wiring engine can detect is raised synchronously as a
DeploywireError subclass carrying structured details, and propagates
through decorators and routine bodies unmodified.

Exit Codes:
- 0: Success
- 10: Configuration error (no environment selected, unreadable environment file)
- 11: Provider error (backend failure)
- 12: Validation error (unknown kind, undecodable request, failed verification)
- 13: Unresolved resource
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    VALIDATION_ERROR = 12
    UNRESOLVED = 13
    UNKNOWN_ERROR = 127


class DeploywireError(Exception):
    """Base exception for deploywire errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(DeploywireError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ConfigurationNotSelected(ConfigurationError):
    """Raised when the store is used before an environment was selected."""

    def __init__(self, key: str | None = None):
        details = {"key": key} if key is not None else {}
        super().__init__("No environment selected; call select() first", details)
        self.key = key


class CorruptEnvironmentFile(ConfigurationError):
    """Raised when an environment file cannot be parsed into the expected shape."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Environment file {path} is unreadable: {reason}", {"path": path})
        self.path = path
        self.reason = reason


class EnvironmentFileConflict(ConfigurationError):
    """Raised when the environment file changed on disk since it was loaded."""

    def __init__(self, path: str):
        super().__init__(
            f"Environment file {path} was modified by another writer since it was loaded",
            {"path": path},
        )
        self.path = path


class ProviderError(DeploywireError):
    """Raised when a backend fails to materialize, inspect or initialize a resource."""

    exit_code = ExitCode.PROVIDER_ERROR


class ValidationError(DeploywireError):
    """Raised for validation failures."""

    exit_code = ExitCode.VALIDATION_ERROR


class UnknownResourceKind(ValidationError):
    """Raised for identity or payload lookups outside the resource catalog."""

    def __init__(self, kind: Any, reason: str = "not in the resource catalog"):
        super().__init__(f"Unknown resource kind {kind!r}: {reason}", {"kind": str(kind)})
        self.kind = kind


class UnsupportedWiringShape(ValidationError):
    """Raised for requests or composite payloads the engine cannot decode."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details)


class VerificationFailed(ValidationError):
    """Raised when no live resource exists where one was expected."""

    def __init__(
        self,
        kind: str,
        namespace: str | None,
        expected: str,
        found: str = "",
        recorded: str | None = None,
        message: str | None = None,
    ):
        target = kind if namespace is None else f"{kind}/{namespace}"
        super().__init__(
            message or f"Verification failed for {target}: nothing live at {expected}",
            {
                "kind": kind,
                "namespace": namespace,
                "expected": expected,
                "found": found,
                "recorded": recorded,
            },
        )
        self.kind = kind
        self.namespace = namespace
        self.expected = expected
        self.found = found
        self.recorded = recorded


class WrapTargetNotLive(VerificationFailed):
    """Raised when a wrap step targets a resource that does not exist yet."""

    def __init__(self, kind: str, expected: str, recorded: str | None = None):
        super().__init__(
            kind,
            None,
            expected,
            found="",
            recorded=recorded,
            message=f"Cannot wrap {kind}: no live resource at {expected}",
        )


class UnresolvedResource(DeploywireError):
    """Raised when a lookup finds no wiring entry for the requested key."""

    exit_code = ExitCode.UNRESOLVED

    def __init__(self, key: str, environment: str | None = None):
        details: dict[str, Any] = {"key": key}
        if environment is not None:
            details["environment"] = environment
        super().__init__(f"{key} is not wired", details)
        self.key = key
        self.environment = environment


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI main functions that provides unified error handling.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - DeploywireError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except DeploywireError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: DeploywireError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    details = {k: v for k, v in error.details.items() if v not in (None, "")}
    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        msg = f"{msg} ({detail_str})"
    return msg
