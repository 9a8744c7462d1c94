"""
Exception types and the error taxonomy for the admission agent.

Recoverable kinds are turned into structured values by the response composer.
Only InternalError is allowed to leave the service boundary.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Error kinds reported to the chat orchestration layer."""
    AMBIGUOUS_ENTITY = "AmbiguousEntity"
    ENTITY_NOT_FOUND = "EntityNotFound"
    MISSING_REQUIRED_SLOT = "MissingRequiredSlot"
    INSUFFICIENT_HISTORICAL_DATA = "InsufficientHistoricalData"
    UNREALISTIC_TARGET = "UnrealisticTarget"
    NO_VALID_COMBINATION = "NoValidCombination"
    LOW_CONFIDENCE = "LowConfidence"
    INTERNAL_ERROR = "InternalError"


class AdmissionAgentError(Exception):
    """Base exception for admission agent service."""


class ConfigurationError(AdmissionAgentError):
    """Raised when configuration is missing or invalid."""


class CatalogError(AdmissionAgentError):
    """Raised when reference data violates catalog constraints."""


class ScenarioValidationError(AdmissionAgentError, ValueError):
    """Raised when a scenario margin list is rejected."""


class InternalError(AdmissionAgentError):
    """
    A defect inside the core (e.g. an unmapped composer state).

    Never converted into a user-facing value; callers log and alert.
    """


class CalculationError(AdmissionAgentError):
    """
    Recoverable failure of the net score calculator.

    :param details: Machine-readable context for the failure
    """
    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details: Dict[str, Any] = details or {}


class InsufficientHistoricalDataError(CalculationError):
    """No score record exists for the requested exam type (or year)."""
    kind = ErrorKind.INSUFFICIENT_HISTORICAL_DATA


class UnrealisticTargetError(CalculationError):
    """Requested target score is outside what the exam can award."""
    kind = ErrorKind.UNREALISTIC_TARGET


class NoValidCombinationError(CalculationError):
    """No net coefficients are available to build a net band."""
    kind = ErrorKind.NO_VALID_COMBINATION
