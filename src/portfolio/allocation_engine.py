"""Rule-based allocation engine.

Turns a list of holdings and a sector target table into a portfolio
snapshot, then into rebalancing and concentration advisories.

Algorithm:
1. Aggregate totals over every holding, recognised sector or not
2. Group holdings into target sectors by exact name match, in table order
3. Flag sectors whose deviation from target exceeds the tolerance band
4. Flag single holdings above the concentration limit

All ratios with a zero denominator evaluate to 0 instead of raising.
The engine keeps no state between calls beyond its two thresholds.
"""

from typing import Dict, List, Optional, Sequence

from src.portfolio.base import (
    Advisory,
    AdvisoryKind,
    Holding,
    PortfolioSnapshot,
    SectorAllocation,
    SectorStatus,
    SectorTarget,
)
from src.utils.exceptions import ConfigurationError, SectorNotFoundError


def _percent_of(value: float, total: float) -> float:
    if total > 0:
        return (value / total) * 100
    return 0.0


class AllocationEngine:
    """Sector allocation and rebalancing calculator.

    Configuration Parameters:
        rebalance_tolerance: Percentage points a sector may drift from its
            target before an advisory is emitted (default 2.0)
        concentration_limit: Percent of total value above which a single
            holding is flagged (default 30.0)

    The tolerance is applied with two different comparisons. Advisories are
    emitted when ``|diff| > tolerance``, while ``status_for`` reports
    BALANCED only when ``|diff| < tolerance``. A sector exactly on the
    boundary therefore gets no advisory yet is displayed as over or
    underweight.

    Example:
        >>> engine = AllocationEngine()
        >>> snapshot = engine.compute_snapshot(holdings, targets)
        >>> for advisory in engine.compute_rebalancing_advisories(
        ...     snapshot, targets, holdings
        ... ):
        ...     print(advisory.message)
    """

    def __init__(self, config: Optional[Dict] = None):
        config = config or {}

        self.rebalance_tolerance = float(config.get("rebalance_tolerance", 2.0))
        self.concentration_limit = float(config.get("concentration_limit", 30.0))

        self._validate_config()

    def _validate_config(self) -> None:
        if self.rebalance_tolerance < 0:
            raise ConfigurationError(
                f"rebalance_tolerance must be >= 0, got {self.rebalance_tolerance}"
            )
        if not 0 < self.concentration_limit <= 100:
            raise ConfigurationError(
                f"concentration_limit must be in (0, 100], got {self.concentration_limit}"
            )

    def compute_snapshot(
        self,
        holdings: Sequence[Holding],
        targets: Sequence[SectorTarget],
    ) -> PortfolioSnapshot:
        """Aggregate holdings into a portfolio snapshot.

        Args:
            holdings: Holdings in list order
            targets: Sector target table; its order is the breakdown order

        Returns:
            PortfolioSnapshot with totals and one SectorAllocation per target.
            An empty holdings list yields zero totals and zero percentages.
        """
        total_invested = sum(h.invested_amount for h in holdings)
        total_current = sum(h.current_value for h in holdings)
        total_gain_loss = total_current - total_invested

        breakdown: Dict[str, SectorAllocation] = {}
        for target in targets:
            sector_holdings = tuple(h for h in holdings if h.sector == target.sector)
            sector_value = sum(h.current_value for h in sector_holdings)
            breakdown[target.sector] = SectorAllocation(
                sector=target.sector,
                current_value=sector_value,
                current_percent=_percent_of(sector_value, total_current),
                target_percent=target.target_percent,
                holdings=sector_holdings,
            )

        return PortfolioSnapshot(
            total_invested=total_invested,
            total_current_value=total_current,
            total_gain_loss=total_gain_loss,
            total_gain_loss_percent=_percent_of(total_gain_loss, total_invested),
            holding_count=len(holdings),
            distinct_sector_count=len({h.sector for h in holdings}),
            sector_breakdown=breakdown,
        )

    def compute_rebalancing_advisories(
        self,
        snapshot: PortfolioSnapshot,
        targets: Sequence[SectorTarget],
        holdings: Sequence[Holding],
    ) -> List[Advisory]:
        """Generate sector and concentration advisories.

        Sector advisories come first, in target-table order, followed by
        concentration advisories in holdings order. Sectors inside the
        tolerance band produce nothing.

        Args:
            snapshot: Snapshot computed from the same holdings and targets
            targets: Sector target table
            holdings: Holdings in list order

        Returns:
            Ordered list of advisories
        """
        advisories: List[Advisory] = []

        for target in targets:
            advisory = self._sector_advisory(snapshot, target)
            if advisory is not None:
                advisories.append(advisory)

        advisories.extend(
            self._concentration_advisories(holdings, snapshot.total_current_value)
        )

        return advisories

    def status_for(self, current_percent: float, target_percent: float) -> SectorStatus:
        """Classify a sector for display.

        BALANCED requires a deviation strictly below the tolerance.
        """
        diff = current_percent - target_percent
        if abs(diff) < self.rebalance_tolerance:
            return SectorStatus.BALANCED
        if diff > 0:
            return SectorStatus.OVERWEIGHT
        return SectorStatus.UNDERWEIGHT

    def sector_status_advisories(self, snapshot: PortfolioSnapshot) -> List[Advisory]:
        """One advisory per target sector, balanced sectors included.

        Classification follows ``status_for``. Suggested amounts are the same
        as in ``compute_rebalancing_advisories`` and are None for balanced
        sectors.
        """
        kinds = {
            SectorStatus.BALANCED: AdvisoryKind.SECTOR_BALANCED,
            SectorStatus.OVERWEIGHT: AdvisoryKind.SECTOR_OVERWEIGHT,
            SectorStatus.UNDERWEIGHT: AdvisoryKind.SECTOR_UNDERWEIGHT,
        }

        statuses = []
        for allocation in snapshot.sector_breakdown.values():
            status = self.status_for(allocation.current_percent, allocation.target_percent)
            amount = None
            if status != SectorStatus.BALANCED:
                amount = abs(allocation.deviation / 100 * snapshot.total_current_value)
            statuses.append(
                Advisory(
                    kind=kinds[status],
                    subject=allocation.sector,
                    magnitude=allocation.deviation,
                    suggested_amount=amount,
                    limit=self.rebalance_tolerance,
                )
            )
        return statuses

    def sector_detail(
        self,
        snapshot: PortfolioSnapshot,
        sector: str,
    ) -> Dict:
        """Drill-down view of a single target sector.

        Args:
            snapshot: Snapshot to read the sector from
            sector: Sector name from the target table

        Returns:
            Dictionary with:
                - allocation: the sector's SectorAllocation
                - status: SectorStatus for display
                - holding_percents: list of (Holding, percent of total value)
                - advisories: sector advisory (if outside the band) followed by
                  concentration advisories for this sector's holdings

        Raises:
            SectorNotFoundError: If the sector is not in the snapshot breakdown
        """
        allocation = snapshot.sector_breakdown.get(sector)
        if allocation is None:
            raise SectorNotFoundError(f"Unknown sector: {sector}")

        total = snapshot.total_current_value
        target = SectorTarget(sector=sector, target_percent=allocation.target_percent)

        advisories: List[Advisory] = []
        sector_advisory = self._sector_advisory(snapshot, target)
        if sector_advisory is not None:
            advisories.append(sector_advisory)
        advisories.extend(self._concentration_advisories(allocation.holdings, total))

        return {
            "allocation": allocation,
            "status": self.status_for(allocation.current_percent, allocation.target_percent),
            "holding_percents": [
                (h, _percent_of(h.current_value, total)) for h in allocation.holdings
            ],
            "advisories": advisories,
        }

    def _sector_advisory(
        self,
        snapshot: PortfolioSnapshot,
        target: SectorTarget,
    ) -> Optional[Advisory]:
        allocation = snapshot.sector_breakdown.get(target.sector)
        current_percent = allocation.current_percent if allocation is not None else 0.0
        diff = current_percent - target.target_percent

        if abs(diff) <= self.rebalance_tolerance:
            return None

        amount = (diff / 100) * snapshot.total_current_value
        if diff > 0:
            return Advisory(
                kind=AdvisoryKind.SECTOR_OVERWEIGHT,
                subject=target.sector,
                magnitude=diff,
                suggested_amount=amount,
                limit=self.rebalance_tolerance,
            )
        return Advisory(
            kind=AdvisoryKind.SECTOR_UNDERWEIGHT,
            subject=target.sector,
            magnitude=diff,
            suggested_amount=abs(amount),
            limit=self.rebalance_tolerance,
        )

    def _concentration_advisories(
        self,
        holdings: Sequence[Holding],
        total_current_value: float,
    ) -> List[Advisory]:
        advisories = []
        for holding in holdings:
            stock_percent = _percent_of(holding.current_value, total_current_value)
            # Strictly above the limit
            if stock_percent > self.concentration_limit:
                advisories.append(
                    Advisory(
                        kind=AdvisoryKind.STOCK_CONCENTRATION,
                        subject=holding.ticker,
                        magnitude=stock_percent,
                        holding=holding,
                        limit=self.concentration_limit,
                    )
                )
        return advisories


_default_engine = AllocationEngine()


def compute_snapshot(
    holdings: Sequence[Holding],
    targets: Sequence[SectorTarget],
) -> PortfolioSnapshot:
    """Compute a snapshot with the default thresholds."""
    return _default_engine.compute_snapshot(holdings, targets)


def compute_rebalancing_advisories(
    snapshot: PortfolioSnapshot,
    targets: Sequence[SectorTarget],
    holdings: Sequence[Holding],
) -> List[Advisory]:
    """Compute advisories with the default thresholds."""
    return _default_engine.compute_rebalancing_advisories(snapshot, targets, holdings)


def status_for(current_percent: float, target_percent: float) -> SectorStatus:
    """Classify a sector with the default tolerance."""
    return _default_engine.status_for(current_percent, target_percent)
