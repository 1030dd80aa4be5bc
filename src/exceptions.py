"""
Standardized exception hierarchy for the commitment engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class ResolyError(Exception):
    """
    Base exception for all engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise ResolyError(
            message="Failed to evaluate challenge",
            user_id="123456",
            operation="evaluate_challenge",
            context={"challenge_id": "abc-123"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error": self.to_dict(),  # LogRecord reserves 'message'
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for callers and structured log records"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (Commitment Input)
# ==========================================

class ValidationError(ResolyError):
    """
    Raised when commitment parameters or engine inputs fail validation

    Examples:
    - sessions_per_week outside 1-7
    - Negative stake
    - Session event recorded against another challenge

    Example:
        raise ValidationError(
            message="Stake cannot be negative",
            field="bet_amount",
            value=-5,
            user_id="123456"
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        user_message: Optional[str] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=user_message or (f"Invalid {field}: {message}" if field else message),
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(ResolyError):
    """Engine configuration (settings or reward catalog) is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Attestation Errors
# ==========================================

class AttestationError(ResolyError):
    """Oracle verdict payload is malformed or reports a failed analysis"""

    def __init__(
        self,
        message: str,
        payload: Optional[Any] = None,
        **kwargs
    ):
        self.payload = payload
        super().__init__(
            message=message,
            user_message="We couldn't verify your gym photo. Please try again.",
            context={"payload": payload},
            **kwargs
        )


# ==========================================
# Lifecycle Errors
# ==========================================

class LifecycleError(ResolyError):
    """Requested challenge status change is not a forward transition"""

    def __init__(
        self,
        message: str,
        challenge_id: Optional[str] = None,
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
        **kwargs
    ):
        self.challenge_id = challenge_id
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            message=message,
            user_message="This challenge can no longer change to that status.",
            context={
                "challenge_id": challenge_id,
                "current_status": current_status,
                "requested_status": requested_status,
            },
            **kwargs
        )
