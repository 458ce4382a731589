"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        ChargenError: Base exception for all application errors.
        InvalidArgumentError, NotFoundError, ValidationError, ...

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        step_context: Bind character and step ids for a block.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from dnd_chargen.core.config import (
    CreationSettings,
    RulesSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from dnd_chargen.core.exceptions import (
    AlreadyExistsError,
    ChargenError,
    ConcurrencyConflictError,
    ConfigurationError,
    DiceRollError,
    InvalidArgumentError,
    NotFoundError,
    RulesDataError,
    StepApplicationError,
    ValidationError,
    wrap_error,
)
from dnd_chargen.core.logging import (
    clear_context,
    configure_from_settings,
    configure_logging,
    get_logger,
    step_context,
)


__all__ = [
    # Exceptions
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
    # Configuration
    "Settings",
    "RulesSettings",
    "StorageSettings",
    "CreationSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "configure_from_settings",
    "step_context",
    "clear_context",
]
