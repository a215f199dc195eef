"""Unit tests for holding input parsing."""

import pytest

from src.data.validation import HoldingInputParser
from src.utils.exceptions import DataError, HoldingValidationError


class TestParseAmount:
    """Test cases for HoldingInputParser.parse_amount."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("10", 10.0),
            (" 12.5 ", 12.5),
            ("0", 0.0),
            ("1e3", 1000.0),
            (7, 7.0),
            (2.25, 2.25),
        ],
    )
    def test_valid_amounts(self, text, expected) -> None:
        assert HoldingInputParser.parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "12abc", None, "nan", "inf", "-5", -1.0])
    def test_invalid_amounts_become_zero(self, text) -> None:
        assert HoldingInputParser.parse_amount(text) == 0.0


class TestParse:
    """Test cases for HoldingInputParser.parse."""

    def test_parse_valid_input(self) -> None:
        holding = HoldingInputParser.parse(
            " Infosys ", "INFY ", "10", "1450.5", "1520", "Indian Equities"
        )

        assert holding.name == "Infosys"
        assert holding.ticker == "INFY"
        assert holding.quantity == 10.0
        assert holding.avg_buy_price == 1450.5
        assert holding.current_price == 1520.0
        assert holding.sector == "Indian Equities"

    def test_unparseable_numbers_are_zero(self) -> None:
        holding = HoldingInputParser.parse("Apple", "AAPL", "ten", "", "n/a", "US Tech Stocks")

        assert holding.quantity == 0.0
        assert holding.avg_buy_price == 0.0
        assert holding.current_price == 0.0

    def test_missing_name(self) -> None:
        with pytest.raises(HoldingValidationError, match="Missing required fields: name"):
            HoldingInputParser.parse("", "AAPL", "1", "1", "1", "US Tech Stocks")

    def test_missing_name_and_ticker(self) -> None:
        with pytest.raises(HoldingValidationError, match="name, ticker"):
            HoldingInputParser.parse("  ", None, "1", "1", "1", "US Tech Stocks")

    def test_validation_error_is_data_error(self) -> None:
        with pytest.raises(DataError):
            HoldingInputParser.parse("Apple", "", "1", "1", "1", "US Tech Stocks")
