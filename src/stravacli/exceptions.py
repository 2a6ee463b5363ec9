"""
Custom exceptions for stravacli.

Defines specific exception types for better error handling and debugging.
"""


class StravaCliError(Exception):
    """Base exception for all stravacli errors."""


class InputError(StravaCliError):
    """Exception raised for problems with the input CSV files."""


class CSVFormatError(InputError):
    """Exception raised when a CSV file cannot be read or parsed."""


class RecordCountMismatchError(InputError):
    """Exception raised when paired CSV files hold a different number of rows."""


class UnknownRecordError(InputError):
    """Exception raised when an updated row's ID is missing from the original file."""


class ValidationError(StravaCliError):
    """Exception raised for data validation errors."""


class MissingFieldError(ValidationError):
    """Exception raised when a required column value is empty."""

    def __init__(self, label: str):
        super().__init__(f"missing {label}")
        self.label = label


class InvalidValueError(ValidationError):
    """Exception raised when a value is not in its allow-list."""


class ImmutableFieldError(ValidationError):
    """Exception raised when an update changes a field that can't be modified."""

    def __init__(self, label: str):
        super().__init__(f"sorry, can't modify {label}")
        self.label = label


class RestrictedFieldError(ValidationError):
    """Exception raised when a row asks for a field the service won't set."""


class APIError(StravaCliError):
    """Exception raised for Strava API errors."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class UploadFailedError(APIError):
    """Exception raised when Strava reports an error while processing an upload."""


class UploadTimeoutError(APIError):
    """Exception raised when an upload is still processing after the configured timeout."""


class AuthenticationError(StravaCliError):
    """Exception raised for OAuth authentication failures."""


class ConfigurationError(StravaCliError):
    """Exception raised for configuration errors."""


class BatchError(StravaCliError):
    """Exception raised when a row fails and the batch stops.

    Carries the 1-based row number and, when earlier rows may already have
    gone through, the flags needed to resume.
    """

    def __init__(self, row: int, description: str, cause: Exception, resume_hint: str = ""):
        message = f"failed to {description} on row {row}: {cause}"
        if resume_hint:
            message = f"{message}\n{resume_hint}"
        super().__init__(message)
        self.row = row
        self.cause = cause
        self.resume_hint = resume_hint
