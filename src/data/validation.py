"""Input parsing for user-entered holding data."""

import math
from typing import Optional

from src.portfolio.base import Holding
from src.utils.exceptions import HoldingValidationError
from src.utils.logging import get_logger

logger = get_logger(__name__)


class HoldingInputParser:
    """Turns raw form strings into engine primitives.

    Numeric fields are never rejected: anything that does not parse to a
    finite, non-negative number becomes 0. Name and ticker are required.
    """

    REQUIRED_FIELDS = ("name", "ticker")

    @classmethod
    def parse_amount(cls, text: Optional[str]) -> float:
        """Parse a quantity or price, defaulting to 0.0.

        Example:
            >>> HoldingInputParser.parse_amount(" 12.5 ")
            12.5
            >>> HoldingInputParser.parse_amount("abc")
            0.0
        """
        if text is None:
            return 0.0

        if isinstance(text, (int, float)):
            value = float(text)
        else:
            try:
                value = float(str(text).strip())
            except ValueError:
                logger.debug("Unparseable amount %r coerced to 0", text)
                return 0.0

        if not math.isfinite(value) or value < 0:
            logger.debug("Out-of-range amount %r coerced to 0", text)
            return 0.0
        return value

    @classmethod
    def parse(
        cls,
        name: Optional[str],
        ticker: Optional[str],
        quantity: Optional[str],
        avg_buy_price: Optional[str],
        current_price: Optional[str],
        sector: Optional[str],
    ) -> Holding:
        """Build a holding candidate from form input.

        Raises:
            HoldingValidationError: If name or ticker is empty
        """
        fields = {
            "name": (name or "").strip(),
            "ticker": (ticker or "").strip(),
        }
        missing = [f for f in cls.REQUIRED_FIELDS if not fields[f]]
        if missing:
            raise HoldingValidationError(f"Missing required fields: {', '.join(missing)}")

        return Holding(
            name=fields["name"],
            ticker=fields["ticker"],
            quantity=cls.parse_amount(quantity),
            avg_buy_price=cls.parse_amount(avg_buy_price),
            current_price=cls.parse_amount(current_price),
            sector=(sector or "").strip(),
        )
