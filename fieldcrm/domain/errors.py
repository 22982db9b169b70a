"""
Error Handling Module

Defines domain exceptions and error categories for the job domain layer.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry user-facing messaging for the UI.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_AMOUNT = "invalid_amount"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    UNKNOWN_CATEGORY = "unknown_category"
    UNKNOWN_STATUS = "unknown_status"
    ASSET_NOT_FOUND = "asset_not_found"
    MISSING_NAME = "missing_name"
    JOB_NOT_FOUND = "job_not_found"
    INCOMPLETE_LEAD = "incomplete_lead"
    STALE_OPERATION = "stale_operation"
    PERSISTENCE_FAILURE = "persistence_failure"
    STORAGE_FAILURE = "storage_failure"
    ORPHAN_CUSTOMER = "orphan_customer"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_AMOUNT: {
        "title": "Invalid Amount",
        "message": "The amount entered is not a valid dollar value.",
        "action": "Enter a positive number without letters or symbols.",
    },
    ErrorCategory.INDEX_OUT_OF_RANGE: {
        "title": "Payment Not Found",
        "message": "The selected payment no longer exists on this job.",
        "action": "Refresh the job and try again.",
    },
    ErrorCategory.UNKNOWN_CATEGORY: {
        "title": "Unknown Folder",
        "message": "Files can only be placed in the Inspection, Install or Documents folders.",
        "action": "Choose one of the available folders.",
    },
    ErrorCategory.UNKNOWN_STATUS: {
        "title": "Unknown Status",
        "message": "The selected status is not part of the job pipeline.",
        "action": "Choose a status from the list.",
    },
    ErrorCategory.ASSET_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The selected photo or document no longer exists on this job.",
        "action": "Refresh the job and try again.",
    },
    ErrorCategory.MISSING_NAME: {
        "title": "Name Required",
        "message": "Documents need a name before they can be filed.",
        "action": "Enter a name for the document and try again.",
    },
    ErrorCategory.JOB_NOT_FOUND: {
        "title": "Job Not Found",
        "message": "The requested job could not be found. It may have been deleted.",
        "action": "Return to the job list.",
    },
    ErrorCategory.INCOMPLETE_LEAD: {
        "title": "Missing Information",
        "message": "A lead needs at least a customer name and an address.",
        "action": "Fill in the required fields and save again.",
    },
    ErrorCategory.STALE_OPERATION: {
        "title": "Job Closed",
        "message": "This job was closed before the operation could start.",
        "action": "Open the job again and retry.",
    },
    ErrorCategory.PERSISTENCE_FAILURE: {
        "title": "Save Failed",
        "message": "Your change could not be saved.",
        "action": "Check your connection and try again.",
    },
    ErrorCategory.STORAGE_FAILURE: {
        "title": "Upload Failed",
        "message": "The file could not be transferred.",
        "action": "Check your connection and try again.",
    },
    ErrorCategory.ORPHAN_CUSTOMER: {
        "title": "Job Not Saved",
        "message": "The customer was saved but the job could not be created.",
        "action": "Select the existing customer and save the job again.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions are pure and have no external dependencies.
    They can optionally wrap original errors for context.
    """

    category = ErrorCategory.SYSTEM_ERROR

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class InvalidAmountError(DomainError):
    """Raised when a money amount is negative, zero where forbidden, or not finite."""

    category = ErrorCategory.INVALID_AMOUNT


class IndexOutOfRangeError(DomainError):
    """Raised when a payment position does not exist in the ledger."""

    category = ErrorCategory.INDEX_OUT_OF_RANGE


class UnknownCategoryError(DomainError):
    """Raised for a media category outside inspection/install/document."""

    category = ErrorCategory.UNKNOWN_CATEGORY


class UnknownStatusError(DomainError):
    """Raised for a status outside the fixed pipeline."""

    category = ErrorCategory.UNKNOWN_STATUS


class AssetNotFoundError(DomainError):
    """Raised when a media asset id does not exist in the job's media."""

    category = ErrorCategory.ASSET_NOT_FOUND


class MissingNameError(DomainError):
    """Raised when a document would be filed without a display name."""

    category = ErrorCategory.MISSING_NAME


class JobNotFoundError(DomainError):
    """Raised when a job record does not exist in the document store."""

    category = ErrorCategory.JOB_NOT_FOUND


class IncompleteLeadError(DomainError):
    """Raised when a draft lead is saved without its required fields."""

    category = ErrorCategory.INCOMPLETE_LEAD


class StaleOperationError(DomainError):
    """Raised when an operation is started against a job that is not live."""

    category = ErrorCategory.STALE_OPERATION


class PersistenceError(DomainError):
    """
    Raised when the document store rejects or fails a write.

    Timeouts reported by the store collaborator surface as this error too.
    """

    category = ErrorCategory.PERSISTENCE_FAILURE


class StorageError(DomainError):
    """Raised when the blob store fails an upload or download."""

    category = ErrorCategory.STORAGE_FAILURE


class OrphanCustomerError(PersistenceError):
    """
    Raised when a new customer was written but its job was not.

    The customer record is left behind; callers can offer to retry the job
    against ``customer_id`` instead of creating another customer.
    """

    category = ErrorCategory.ORPHAN_CUSTOMER

    def __init__(self, message: str, customer_id: str, original_error: Exception = None):
        super().__init__(message, original_error)
        self.customer_id = customer_id


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with the messages shown to the user.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    @classmethod
    def from_domain_error(
        cls, error: DomainError, context: Optional[Dict[str, Any]] = None
    ) -> "ApplicationError":
        """Wrap a domain error, keeping its text as the technical message."""
        return cls(error.category, str(error), context)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for display.

        Returns:
            Dictionary with error information
        """
        return {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
