"""
Exception hierarchy for the cycle audit engine.

Per-cycle errors (malformed amounts, environment failures, missing pools in
strict mode) are caught by the orchestrator and recorded against the cycle.
Run-level errors (bad config, unreadable inputs, unreachable environment)
abort the audit.
"""

from typing import Any, Dict, Optional


class AuditError(Exception):
    """Base exception for all audit related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigError(AuditError):
    """Raised when config is invalid or missing required fields."""

    pass


class ValidationError(AuditError):
    """Raised when an input record or cycle path is unusable."""

    pass


class DataError(AuditError):
    """Raised when an input file cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.source = source


class MalformedDecimal(AuditError):
    """Raised when an amount cannot be parsed as a decimal number."""

    def __init__(self, value: Any, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Malformed decimal value: {value!r}", details)
        self.value = value


class PoolNotFound(AuditError):
    """Raised in strict mode when no reserve record matches a hop."""

    def __init__(
        self, token_a: str, token_b: str, details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(f"No pool record for {token_a} <-> {token_b}", details)
        self.token_a = token_a
        self.token_b = token_b


class ExecutionEnvironmentError(AuditError):
    """Raised when a request to the execution environment fails or reverts."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.operation = operation


class RunFatalError(AuditError):
    """Raised when the audit cannot continue at all."""

    pass
