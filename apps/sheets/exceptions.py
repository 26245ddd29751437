"""Domain-specific exceptions for the spreadsheet store."""


class SheetsServiceError(Exception):
    """Base exception for spreadsheet store errors."""
    pass


class UnknownTableError(SheetsServiceError):
    """Raised when a table name is not part of the store."""
    pass


class SheetImportError(SheetsServiceError):
    """Raised when a workbook or sheet cannot be read or applied."""
    pass


class GoogleSheetsConfigError(SheetsServiceError):
    """Raised when the spreadsheet or service account is not configured."""
    pass
