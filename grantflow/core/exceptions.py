"""Custom exception hierarchy."""


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class PipelineError(AppError):
    """Base exception for parsing pipeline errors."""
    pass


class UnsupportedFormatError(PipelineError):
    """Raised when no text extractor exists for a MIME type."""
    pass


class TextExtractionError(PipelineError):
    """Raised when a text extractor fails on a document."""
    pass


class NotFoundError(AppError):
    """Raised when a requested record does not exist."""
    pass


class ProfileNotFoundError(NotFoundError):
    """Raised when a profile is not found."""
    pass


class DocumentNotFoundError(NotFoundError):
    """Raised when a document is not found."""
    pass


class InvalidDocumentStateError(AppError):
    """Raised when a document is not in a state that allows the operation."""
    pass
