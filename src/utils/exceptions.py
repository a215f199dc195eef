"""Custom exceptions for Portfolio Tracker.

This module defines the exception hierarchy for the application.
The allocation engine itself never raises; these errors come from the
collaborators around it (configuration, storage, input parsing, list edits).
"""


class PortfolioTrackerError(Exception):
    """Base exception for all Portfolio Tracker errors.

    All custom exceptions in the application should inherit from this class.
    """

    pass


class ConfigurationError(PortfolioTrackerError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Sector targets do not sum to 100
        - Duplicate sector names in the target table
        - Engine thresholds outside their valid range
    """

    pass


class DataError(PortfolioTrackerError):
    """Base exception for data layer errors.

    Parent class for all data-related exceptions.
    """

    pass


class HoldingValidationError(DataError):
    """Raised when user input cannot form a holding.

    Examples:
        - Empty company name
        - Empty ticker
    """

    pass


class StorageError(DataError):
    """Raised when database operations fail.

    Examples:
        - Database connection failed
        - Stored record is not a valid JSON array
    """

    pass


class PortfolioError(PortfolioTrackerError):
    """Base exception for portfolio layer errors.

    Parent class for all portfolio-related exceptions.
    """

    def __str__(self) -> str:
        # KeyError subclasses would otherwise render the message quoted
        return Exception.__str__(self)


class HoldingNotFoundError(PortfolioError, KeyError):
    """Raised when an edit or delete names a holding id that is not in the list."""

    pass


class SectorNotFoundError(PortfolioError, KeyError):
    """Raised when a sector is requested that is not in the target table."""

    pass
