"""Custom exceptions for the HybridRec API.

Defines specific exception types for better error handling and reporting.
"""

from typing import Any, Dict, Optional


class HybridRecException(Exception):
    """Base exception for HybridRec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class DataNotFoundError(HybridRecException):
    """Raised when the data files cannot be found."""

    def __init__(self, data_dir: str, details: Optional[Dict[str, Any]] = None):
        message = f"Data not found in '{data_dir}'. Generate or export data first."
        super().__init__(
            message=message,
            status_code=503,
            details=details or {"data_dir": data_dir},
        )


class DataLoadError(HybridRecException):
    """Raised when data files exist but cannot be loaded."""

    def __init__(self, data_dir: str, error: Exception):
        message = f"Failed to load data from '{data_dir}': {str(error)}"
        super().__init__(
            message=message,
            status_code=500,
            details={
                "data_dir": data_dir,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )


class ProductNotFoundError(HybridRecException):
    """Raised when an interaction references an unknown product."""

    def __init__(self, product_id: int):
        super().__init__(
            message=f"Product {product_id} not found",
            status_code=404,
            details={"product_id": product_id},
        )


class InvalidInteractionError(HybridRecException):
    """Raised when an interaction cannot be recorded."""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Invalid interaction: {reason}",
            status_code=400,
            details=details,
        )
