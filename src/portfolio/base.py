"""Value objects for the portfolio allocation engine.

This module defines the data the engine consumes and produces. Everything
here is an immutable dataclass: the engine never mutates its inputs, and
list operations build new holdings instead of changing existing ones.

Consumed:
- Holding: one portfolio position
- SectorTarget: desired share of total value for one sector

Produced:
- PortfolioSnapshot: aggregate metrics plus per-sector breakdown
- SectorAllocation: one sector's actual vs target allocation
- Advisory: one rebalancing or concentration recommendation
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


def new_holding_id() -> str:
    """Generate a collision-resistant id for a new holding."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Holding:
    """A single portfolio position.

    Attributes:
        name: Display name (e.g. "Infosys")
        ticker: Short symbol, used together with sector as the merge key
        quantity: Units held
        avg_buy_price: Cost basis per unit
        current_price: Latest manually entered market price per unit
        sector: Free-text sector; only sectors in the target table take
            part in sector aggregation
        id: Opaque identifier, assigned at creation and never changed
    """

    name: str
    ticker: str
    quantity: float
    avg_buy_price: float
    current_price: float
    sector: str
    id: str = field(default_factory=new_holding_id)

    @property
    def invested_amount(self) -> float:
        return self.quantity * self.avg_buy_price

    @property
    def current_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def gain_loss(self) -> float:
        return self.current_value - self.invested_amount

    @property
    def gain_loss_percent(self) -> float:
        """Gain/loss relative to cost basis, 0 when nothing was invested."""
        invested = self.invested_amount
        if invested > 0:
            return (self.gain_loss / invested) * 100
        return 0.0


@dataclass(frozen=True)
class SectorTarget:
    """Target allocation for one sector.

    Attributes:
        sector: Sector name, unique within a target table
        target_percent: Desired percent of total portfolio value (0-100)
    """

    sector: str
    target_percent: float


class SectorStatus(Enum):
    """Display classification of a sector against its target."""

    BALANCED = "balanced"
    OVERWEIGHT = "overweight"
    UNDERWEIGHT = "underweight"


@dataclass(frozen=True)
class SectorAllocation:
    """Actual vs target allocation of one target sector.

    Attributes:
        sector: Sector name from the target table
        current_value: Sum of current values of the sector's holdings
        current_percent: current_value as percent of total portfolio value
        target_percent: Target percent from the table
        holdings: Holdings in this sector, in list order
    """

    sector: str
    current_value: float
    current_percent: float
    target_percent: float
    holdings: Tuple[Holding, ...] = ()

    @property
    def deviation(self) -> float:
        """Percentage-point difference between actual and target."""
        return self.current_percent - self.target_percent


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Aggregate state of the portfolio, recomputed on demand.

    Attributes:
        total_invested: Sum of invested amounts of all holdings
        total_current_value: Sum of current values of all holdings
        total_gain_loss: total_current_value - total_invested
        total_gain_loss_percent: Gain/loss relative to total_invested
        holding_count: Number of holdings
        distinct_sector_count: Distinct sector values among holdings,
            including sectors absent from the target table
        sector_breakdown: Allocation per target sector, in table order
    """

    total_invested: float
    total_current_value: float
    total_gain_loss: float
    total_gain_loss_percent: float
    holding_count: int
    distinct_sector_count: int
    sector_breakdown: Dict[str, SectorAllocation] = field(default_factory=dict)


class AdvisoryKind(Enum):
    """Advisory types."""

    SECTOR_OVERWEIGHT = "sector_overweight"
    SECTOR_UNDERWEIGHT = "sector_underweight"
    SECTOR_BALANCED = "sector_balanced"
    STOCK_CONCENTRATION = "stock_concentration"


@dataclass(frozen=True)
class Advisory:
    """A rebalancing or concentration recommendation.

    Attributes:
        kind: Advisory type
        subject: Sector name, or ticker for concentration advisories
        magnitude: Percentage-point deviation for sector advisories,
            percent of total portfolio value for concentration advisories
        suggested_amount: Money to remove (overweight) or add (underweight);
            None where no adjustment applies
        holding: The concentrated holding for STOCK_CONCENTRATION
        limit: Threshold that was crossed (percent or percentage points)
    """

    kind: AdvisoryKind
    subject: str
    magnitude: float
    suggested_amount: Optional[float] = None
    holding: Optional[Holding] = None
    limit: Optional[float] = None

    @property
    def message(self) -> str:
        """Human-readable recommendation text."""
        if self.kind == AdvisoryKind.SECTOR_OVERWEIGHT:
            return (
                f"{self.subject} is {self.magnitude:.2f}% above target, "
                f"consider reducing by {self.suggested_amount:.2f}"
            )
        if self.kind == AdvisoryKind.SECTOR_UNDERWEIGHT:
            return (
                f"Add {self.suggested_amount:.2f} to {self.subject} "
                f"to reach target ({abs(self.magnitude):.2f}% below)"
            )
        if self.kind == AdvisoryKind.STOCK_CONCENTRATION:
            name = self.holding.name if self.holding is not None else self.subject
            return (
                f"{name} ({self.subject}) exceeds {self.limit or 30.0:g}% of portfolio "
                f"({self.magnitude:.2f}%)"
            )
        return f"{self.subject} is balanced ({self.magnitude:+.2f}% from target)"
