"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
An update or delete that matches no row is not an error: the store
returns 0 rows affected.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class StorageError(ApplicationError):
    """Raised when the note store fails (I/O, constraint, index mismatch)."""

    def __init__(self, message: str = "Storage error") -> None:
        super().__init__(message, code="SYS_STORAGE_ERROR")


class UnsupportedEnvironmentError(ApplicationError):
    """Raised when an operation is requested on an unrecognized platform."""

    def __init__(self, message: str = "Unsupported environment") -> None:
        super().__init__(message, code="SYS_UNSUPPORTED_ENVIRONMENT")


class CompanionProcessError(ApplicationError):
    """Raised when the companion background process cannot be terminated."""

    def __init__(self, message: str = "Companion process error") -> None:
        super().__init__(message, code="SYS_COMPANION_PROCESS_ERROR")
