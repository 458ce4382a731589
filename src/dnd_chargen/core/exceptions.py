"""Custom exception hierarchy for the character creation engine.

All exceptions inherit from ChargenError, which carries a stable ``code``
identifying the error kind plus a ``details`` dictionary of contextual
metadata. Wrapping an error with :func:`wrap_error` adds metadata while
keeping the original class, so callers can still branch with ``isinstance``
after the error has crossed several layers.

Example:
    >>> from dnd_chargen.core.exceptions import NotFoundError
    >>> raise NotFoundError("Character not found", entity_id="char-1")
"""

from __future__ import annotations

from typing import Any


class ChargenError(Exception):
    """Base exception for all character creation errors.

    Attributes:
        code: Stable identifier for the error kind.
        message: Human-readable error description.
        details: Dictionary containing additional error context.
    """

    code: str = "unknown"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception.

        Returns:
            String representation suitable for debugging.
        """
        return (
            f"{self.__class__.__name__}(code={self.code!r}, "
            f"message={self.message!r}, details={self.details!r})"
        )


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(ChargenError):
    """Raised when there is a configuration-related error."""

    code = "configuration"

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


# =============================================================================
# Request Exceptions
# =============================================================================


class InvalidArgumentError(ChargenError):
    """Raised when a caller supplies a missing or malformed argument.

    Covers missing character ids, missing names and step results without
    the selection the step requires. Never retried.
    """

    code = "invalid_argument"

    def __init__(
        self,
        message: str,
        *,
        argument: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if argument:
            combined_details["argument"] = argument
        super().__init__(message, details=combined_details)


class ValidationError(ChargenError):
    """Raised when submitted data fails a rules check."""

    code = "validation"

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: The name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Storage Exceptions
# =============================================================================


class NotFoundError(ChargenError):
    """Raised when a requested entity does not exist."""

    code = "not_found"

    def __init__(
        self,
        message: str,
        *,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if entity_id:
            combined_details["entity_id"] = entity_id
        super().__init__(message, details=combined_details)


class AlreadyExistsError(ChargenError):
    """Raised when creating an entity whose id is already taken."""

    code = "already_exists"

    def __init__(
        self,
        message: str,
        *,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if entity_id:
            combined_details["entity_id"] = entity_id
        super().__init__(message, details=combined_details)


class ConcurrencyConflictError(ChargenError):
    """Raised when an update is based on a stale character version.

    Two concurrent step results against the same character would otherwise
    silently overwrite each other; the loser of the race gets this error
    and may reload and retry.
    """

    code = "conflict"

    def __init__(
        self,
        message: str,
        *,
        entity_id: str | None = None,
        expected_version: int | None = None,
        actual_version: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize conflict error with version context.

        Args:
            message: Human-readable error description.
            entity_id: Id of the character being updated.
            expected_version: Version the caller based its update on.
            actual_version: Version currently stored.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if entity_id:
            combined_details["entity_id"] = entity_id
        if expected_version is not None:
            combined_details["expected_version"] = expected_version
        if actual_version is not None:
            combined_details["actual_version"] = actual_version
        super().__init__(message, details=combined_details)


# =============================================================================
# Rules Data Exceptions
# =============================================================================


class RulesDataError(ChargenError):
    """Raised when rules data cannot be fetched or interpreted."""

    code = "rules_data"

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if resource:
            combined_details["resource"] = resource
        super().__init__(message, details=combined_details)


class DiceRollError(ChargenError):
    """Raised when a dice expression is invalid or cannot be evaluated."""

    code = "dice"

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


# =============================================================================
# Creation Flow Exceptions
# =============================================================================


class StepApplicationError(ChargenError):
    """Raised when a step result cannot be applied to a character."""

    code = "step_application"

    def __init__(
        self,
        message: str,
        *,
        step_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if step_type:
            combined_details["step_type"] = step_type
        super().__init__(message, details=combined_details)


# =============================================================================
# Helpers
# =============================================================================


def wrap_error(exc: Exception, message: str, **meta: Any) -> ChargenError:
    """Add context to an error while preserving its kind.

    A ChargenError is re-created as the same class with ``message``
    prefixed and ``meta`` merged into its details. Any other exception is
    converted to a bare ChargenError (code ``internal``). The caller is
    expected to ``raise ... from exc``.

    Args:
        exc: The error to wrap.
        message: Context describing the failed operation.
        **meta: Additional metadata (entity id, operation name, ...).

    Returns:
        A new exception of the same kind carrying the merged context.

    Example:
        >>> try:
        ...     repo.get("missing")
        ... except NotFoundError as exc:
        ...     raise wrap_error(exc, "failed to load character", operation="get_next_step") from exc
    """
    if isinstance(exc, ChargenError):
        wrapped = exc.__class__.__new__(exc.__class__)
        ChargenError.__init__(
            wrapped,
            f"{message}: {exc.message}",
            details={**exc.details, **meta},
        )
        return wrapped

    wrapped = ChargenError(f"{message}: {exc}", details=dict(meta))
    wrapped.code = "internal"
    return wrapped


__all__ = [
    "ChargenError",
    "ConfigurationError",
    "InvalidArgumentError",
    "ValidationError",
    "NotFoundError",
    "AlreadyExistsError",
    "ConcurrencyConflictError",
    "RulesDataError",
    "DiceRollError",
    "StepApplicationError",
    "wrap_error",
]
