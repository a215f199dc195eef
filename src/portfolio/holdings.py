"""Holding list operations.

The holdings list is owned by the caller. Every operation here takes the
current list and returns a new one; the input list and its holdings are
left untouched.
"""

from dataclasses import replace
from typing import List, Optional, Sequence

from src.portfolio.base import Holding, new_holding_id
from src.utils.exceptions import HoldingNotFoundError
from src.utils.logging import get_logger

logger = get_logger(__name__)


def find_merge_target(holdings: Sequence[Holding], ticker: str, sector: str) -> Optional[Holding]:
    """Return the first holding with the same ticker and sector, if any."""
    for holding in holdings:
        if holding.ticker == ticker and holding.sector == sector:
            return holding
    return None


def merge_or_add(holdings: Sequence[Holding], candidate: Holding) -> List[Holding]:
    """Insert a holding, merging into an existing (ticker, sector) match.

    On a match the quantities are summed, the buy price becomes the
    quantity-weighted average, and the current price is replaced by the
    candidate's. The existing holding keeps its id, name and list position.
    Without a match the candidate is appended under a fresh id.

    Merging two zero-quantity holdings divides by zero; the resulting average
    buy price is NaN and callers are expected to avoid that case.

    Args:
        holdings: Current holdings
        candidate: Parsed holding to insert

    Returns:
        New holdings list

    Example:
        >>> a = Holding("Infosys", "INFY", 10, 100.0, 120.0, "Indian Equities")
        >>> b = Holding("Infosys", "INFY", 10, 200.0, 130.0, "Indian Equities")
        >>> merged = merge_or_add([a], b)
        >>> merged[0].quantity, merged[0].avg_buy_price, merged[0].id == a.id
        (20, 150.0, True)
    """
    existing = find_merge_target(holdings, candidate.ticker, candidate.sector)

    if existing is None:
        added = replace(candidate, id=new_holding_id())
        logger.debug("Adding new holding %s (%s)", added.ticker, added.sector)
        return list(holdings) + [added]

    new_quantity = existing.quantity + candidate.quantity
    if new_quantity != 0:
        new_avg_price = (
            existing.quantity * existing.avg_buy_price
            + candidate.quantity * candidate.avg_buy_price
        ) / new_quantity
    else:
        logger.warning(
            "Merging zero-quantity holdings for %s; average buy price is undefined",
            existing.ticker,
        )
        new_avg_price = float("nan")

    merged = replace(
        existing,
        quantity=new_quantity,
        avg_buy_price=new_avg_price,
        current_price=candidate.current_price,
    )
    logger.debug(
        "Merged %s into existing holding %s: quantity %s -> %s",
        candidate.ticker,
        existing.id,
        existing.quantity,
        new_quantity,
    )
    return [merged if h.id == existing.id else h for h in holdings]


def edit_holding(
    holdings: Sequence[Holding],
    holding_id: str,
    quantity: float,
    avg_buy_price: float,
    current_price: float,
    name: Optional[str] = None,
    ticker: Optional[str] = None,
    sector: Optional[str] = None,
) -> List[Holding]:
    """Overwrite the numeric fields of one holding.

    Only quantity, average buy price and current price change. ``name``,
    ``ticker`` and ``sector`` are accepted so an edit form can pass every
    field it shows, but they are ignored. No merge logic runs on edit.

    Raises:
        HoldingNotFoundError: If no holding has ``holding_id``
    """
    if not any(h.id == holding_id for h in holdings):
        raise HoldingNotFoundError(f"No holding with id {holding_id}")

    ignored = {
        field_name: value
        for field_name, value in (("name", name), ("ticker", ticker), ("sector", sector))
        if value is not None
    }
    if ignored:
        logger.debug("Ignoring identity field changes on edit of %s: %s", holding_id, ignored)

    return [
        replace(
            h,
            quantity=quantity,
            avg_buy_price=avg_buy_price,
            current_price=current_price,
        )
        if h.id == holding_id
        else h
        for h in holdings
    ]


def delete_holding(holdings: Sequence[Holding], holding_id: str) -> List[Holding]:
    """Remove one holding by id.

    Raises:
        HoldingNotFoundError: If no holding has ``holding_id``
    """
    remaining = [h for h in holdings if h.id != holding_id]
    if len(remaining) == len(holdings):
        raise HoldingNotFoundError(f"No holding with id {holding_id}")
    return remaining


def get_holding(holdings: Sequence[Holding], holding_id: str) -> Holding:
    """Look up one holding by id.

    Raises:
        HoldingNotFoundError: If no holding has ``holding_id``
    """
    for holding in holdings:
        if holding.id == holding_id:
            return holding
    raise HoldingNotFoundError(f"No holding with id {holding_id}")
