"""Unit tests for custom exceptions."""

import pytest

from src.utils.exceptions import (
    ConfigurationError,
    DataError,
    HoldingNotFoundError,
    HoldingValidationError,
    PortfolioError,
    PortfolioTrackerError,
    SectorNotFoundError,
    StorageError,
)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    def test_configuration_error_inherits_from_base(self) -> None:
        assert issubclass(ConfigurationError, PortfolioTrackerError)

    def test_data_errors(self) -> None:
        """Test data layer errors derive from DataError."""
        assert issubclass(DataError, PortfolioTrackerError)
        assert issubclass(HoldingValidationError, DataError)
        assert issubclass(StorageError, DataError)

    def test_portfolio_errors(self) -> None:
        """Test lookup errors are PortfolioErrors and KeyErrors."""
        for exc in (HoldingNotFoundError, SectorNotFoundError):
            assert issubclass(exc, PortfolioError)
            assert issubclass(exc, PortfolioTrackerError)
            assert issubclass(exc, KeyError)


class TestExceptionRaising:
    """Test raising and catching exceptions."""

    def test_raise_base_error(self) -> None:
        with pytest.raises(PortfolioTrackerError, match="Base error"):
            raise PortfolioTrackerError("Base error")

    def test_raise_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="Config missing"):
            raise ConfigurationError("Config missing")

    def test_raise_storage_error(self) -> None:
        with pytest.raises(StorageError, match="Database failed"):
            raise StorageError("Database failed")


class TestExceptionCatching:
    """Test catching exceptions at different levels."""

    def test_catch_validation_error_as_base(self) -> None:
        """Test HoldingValidationError can be caught as PortfolioTrackerError."""
        with pytest.raises(PortfolioTrackerError):
            raise HoldingValidationError("Missing required fields: name")

    def test_catch_not_found_as_key_error(self) -> None:
        with pytest.raises(KeyError):
            raise HoldingNotFoundError("No holding with id abc")

    def test_not_found_message_is_unquoted(self) -> None:
        """Test lookup errors read like other errors despite being KeyErrors."""
        assert str(SectorNotFoundError("Unknown sector: Real Estate")) == (
            "Unknown sector: Real Estate"
        )
        assert str(HoldingNotFoundError("No holding with id abc")) == "No holding with id abc"

    def test_not_found_does_not_catch_storage(self) -> None:
        """Test sibling branches are distinct."""
        with pytest.raises(StorageError):
            try:
                raise StorageError("disk full")
            except PortfolioError:
                pytest.fail("StorageError should not be a PortfolioError")
