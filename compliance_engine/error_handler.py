"""
Error Handler

Centralized error handling for the compliance engine pipeline.
"""

import traceback
import time
from typing import Any, Dict, Optional
from loguru import logger
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels"""
    LOW = "low"           # Non-critical, can continue
    MEDIUM = "medium"     # Important but recoverable
    HIGH = "high"         # Analysis degraded
    CRITICAL = "critical" # Output could not be produced


class ErrorStage(Enum):
    """Pipeline stage where an error was raised"""
    INPUT = "input"                # Input normalization
    EXTRACTION = "extraction"      # Section extraction
    MATCHING = "matching"          # Section matching
    ANALYSIS = "analysis"          # Difference analysis, scoring, findings
    ASSEMBLY = "assembly"          # Result assembly
    VALIDATION = "validation"      # Output schema validation
    UNKNOWN = "unknown"            # Unclassified


class EngineError(Exception):
    """Base class for errors raised inside the compliance engine."""

    def __init__(self, message: str, stage: ErrorStage = ErrorStage.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}


class SchemaValidationError(EngineError):
    """Raised when a report cannot be made schema-valid, even after sanitization."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorStage.VALIDATION, details)


def log_error(error: Exception, stage: ErrorStage,
              severity: ErrorSeverity, context: Dict = None) -> Dict[str, Any]:
    """
    Log error with context

    Args:
        error: Exception object
        stage: Pipeline stage
        severity: Error severity
        context: Additional context (analysis id, input sizes, etc.)

    Returns:
        Error info dict, suitable for reviewer notes
    """
    error_info = {
        'timestamp': time.time(),
        'error_type': type(error).__name__,
        'error_message': str(error),
        'stage': stage.value,
        'severity': severity.value,
        'context': context or {},
        'traceback': traceback.format_exc()
    }

    # Log based on severity
    if severity == ErrorSeverity.CRITICAL:
        logger.critical(f"💥 CRITICAL ERROR [{stage.value}]: {error}")
    elif severity == ErrorSeverity.HIGH:
        logger.error(f"❌ ERROR [{stage.value}]: {error}")
    elif severity == ErrorSeverity.MEDIUM:
        logger.warning(f"⚠️ WARNING [{stage.value}]: {error}")
    else:
        logger.info(f"ℹ️ INFO [{stage.value}]: {error}")

    # Log context if available
    if context:
        logger.debug(f"Context: {context}")

    return error_info


def normalize_text(value: Any, field: str = "text") -> str:
    """
    Normalize an input document to text

    None becomes an empty document and bytes are decoded as UTF-8.

    Raises:
        EngineError: If the value is not text-like
    """
    if value is None:
        return ""

    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")

    if not isinstance(value, str):
        raise EngineError(
            f"Expected str for {field}, got {type(value).__name__}",
            stage=ErrorStage.INPUT,
            details={'field': field}
        )

    return value
