"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class SpreadsheetAPIError(DomainException):
    """Spreadsheet values API returned an error or is unavailable"""

    pass


class InvalidRecordDataError(DomainException):
    """Spreadsheet payload is malformed and cannot be turned into records"""

    pass


class PlanNotFoundError(DomainException):
    """No stored projection plan exists for the requested country"""

    pass
