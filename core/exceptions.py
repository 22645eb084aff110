"""
Custom exceptions for NeuRazor
Provides structured error handling across all domains
"""
from typing import Any, Dict, Optional


class NeuRazorError(Exception):
    """Base exception for all NeuRazor errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InputError(NeuRazorError):
    """Raised when request fields are missing or malformed"""

    def __init__(self, message: str, field: Optional[str] = None, error_code: str = "INPUT_ERROR", **details):
        super().__init__(
            message=message,
            error_code=error_code,
            details={"field": field, **details} if field else details,
            status_code=400,
        )
        self.field = field


class NotFoundError(NeuRazorError):
    """Raised when a resource is not found"""

    def __init__(self, resource: str, identifier: Any, error_code: str = "NOT_FOUND"):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            error_code=error_code,
            details={"resource": resource, "identifier": str(identifier)},
            status_code=404,
        )
        self.resource = resource
        self.identifier = identifier


class PersistenceError(NeuRazorError):
    """Raised when a storage collaborator fails"""

    def __init__(self, message: str, operation: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="PERSISTENCE_ERROR",
            details={"operation": operation, **details} if operation else details,
            status_code=500,
        )
        self.operation = operation

