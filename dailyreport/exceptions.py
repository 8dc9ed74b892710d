"""Custom exceptions for dailyreport.

Provides domain-specific error types for better error handling and debugging.
"""


class DailyReportError(Exception):
    """Base exception for all dailyreport errors."""

    pass


class ConfigurationError(DailyReportError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(DailyReportError):
    """Raised when caller input (dates, times, required fields) is malformed."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class StoreUninitializedError(DailyReportError):
    """Raised when the backing document cannot be loaded, created or written."""

    def __init__(self, message: str, path: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.path = path
        self.cause = cause


class DuplicateReportError(DailyReportError):
    """Raised when a report for the same date already exists."""

    def __init__(self, message: str, date: str | None = None):
        super().__init__(message)
        self.date = date


class EmptyReportSetError(DailyReportError):
    """Raised when a monthly report is requested for a month without entries."""

    def __init__(self, message: str, year_month: str | None = None):
        super().__init__(message)
        self.year_month = year_month


class TemplateNotFoundError(DailyReportError):
    """Raised when a template management operation names an unknown template."""

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class GenerationError(DailyReportError):
    """Raised when the text-generation call fails or returns nothing."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class PromptError(DailyReportError):
    """Raised when a required prompt file is missing or invalid."""

    def __init__(self, message: str, prompt_name: str | None = None):
        super().__init__(message)
        self.prompt_name = prompt_name
