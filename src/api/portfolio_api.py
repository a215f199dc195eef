"""User-friendly Portfolio API for tracking holdings and allocation.

This module provides a simple, high-level interface that owns the holdings
list, persists it after every change, and exposes the allocation engine's
results as value objects or pandas DataFrames for display.
"""

from typing import Dict, List, Optional, Sequence

import pandas as pd

from src.data.storage.holdings_store import HoldingsStore
from src.data.validation import HoldingInputParser
from src.portfolio.allocation_engine import AllocationEngine
from src.portfolio.base import Advisory, Holding, PortfolioSnapshot, SectorTarget
from src.portfolio.holdings import (
    delete_holding,
    edit_holding,
    find_merge_target,
    get_holding,
    merge_or_add,
)
from src.portfolio.targets import DEFAULT_SECTOR_TARGETS, load_sector_targets
from src.utils.config import Config, resolve_db_path
from src.utils.exceptions import HoldingValidationError, StorageError
from src.utils.logging import get_logger, log_with_context
from src.utils.logging_enhanced import PortfolioEventLogger, PortfolioEventType

logger = get_logger(__name__)


class PortfolioAPI:
    """High-level API for portfolio tracking.

    Holds the in-memory holdings list, loaded from the store at construction
    and written back in full after every add, edit and delete. Without a
    store the list lives in memory only.

    Example:
        >>> api = PortfolioAPI.from_config(load_config())
        >>> api.add_holding("Infosys", "INFY", "10", "1450", "1520", "Indian Equities")
        >>> snapshot = api.get_snapshot()
        >>> for advisory in api.get_advisories():
        ...     print(advisory.message)
    """

    def __init__(
        self,
        store: Optional[HoldingsStore] = None,
        targets: Optional[Sequence[SectorTarget]] = None,
        engine: Optional[AllocationEngine] = None,
        event_logger: Optional[PortfolioEventLogger] = None,
    ):
        """Initialize PortfolioAPI.

        Args:
            store: HoldingsStore to load from and save to (default: in-memory only)
            targets: Sector target table (defaults to DEFAULT_SECTOR_TARGETS)
            engine: AllocationEngine instance (defaults to default thresholds)
            event_logger: Optional structured event logger for holding changes
        """
        self.store = store
        self.targets: List[SectorTarget] = list(targets or DEFAULT_SECTOR_TARGETS)
        self.engine = engine or AllocationEngine()
        self.event_logger = event_logger

        self._holdings: List[Holding] = store.load() if store is not None else []

        logger.debug(
            "PortfolioAPI initialized with %d holdings and %d sector targets",
            len(self._holdings),
            len(self.targets),
        )

    @classmethod
    def from_config(cls, config: Config) -> "PortfolioAPI":
        """Build an API wired to the store, targets and thresholds in config."""
        store = HoldingsStore(
            resolve_db_path(config),
            namespace=config.get("storage.namespace", "portfolio_data"),
            key=config.get("storage.key", "stocks"),
        )
        engine = AllocationEngine(config.get("allocation", {}))

        event_logger = None
        log_dir = config.get("logging.event_log_dir")
        if log_dir:
            event_logger = PortfolioEventLogger(log_dir=log_dir)

        return cls(
            store=store,
            targets=load_sector_targets(config),
            engine=engine,
            event_logger=event_logger,
        )

    @property
    def holdings(self) -> List[Holding]:
        """Current holdings, in insertion order."""
        return list(self._holdings)

    @property
    def sector_names(self) -> List[str]:
        return [t.sector for t in self.targets]

    def _commit(self, holdings: List[Holding]) -> None:
        """Persist the full list, then make it current."""
        if self.store is not None:
            try:
                self.store.save(holdings)
            except StorageError as e:
                if self.event_logger is not None:
                    self.event_logger.log_error(PortfolioEventType.STORAGE_ERROR, str(e))
                raise
        self._holdings = holdings

    def _record(self, event_type: PortfolioEventType, holding: Holding) -> None:
        log_with_context(
            logger,
            "info",
            event_type.value.replace("_", " ").capitalize(),
            id=holding.id,
            ticker=holding.ticker,
            quantity=holding.quantity,
            sector=holding.sector,
        )
        if self.event_logger is not None:
            self.event_logger.log_holding_event(
                event_type,
                holding_id=holding.id,
                ticker=holding.ticker,
                quantity=holding.quantity,
                avg_buy_price=holding.avg_buy_price,
                current_price=holding.current_price,
                sector=holding.sector,
            )

    def add_holding(
        self,
        name: str,
        ticker: str,
        quantity: str | float,
        avg_buy_price: str | float,
        current_price: str | float,
        sector: str,
    ) -> Holding:
        """Add a holding, merging into an existing one with the same ticker and sector.

        Numeric inputs may be raw strings; unparseable values become 0.

        Returns:
            The resulting holding (the merged one when a merge happened)

        Raises:
            HoldingValidationError: If name or ticker is empty, or a merge would
                leave the holding with zero total quantity
        """
        try:
            candidate = HoldingInputParser.parse(
                name, ticker, quantity, avg_buy_price, current_price, sector
            )
            existing = find_merge_target(self._holdings, candidate.ticker, candidate.sector)
            # A zero total has no weighted average; keep the stored list finite
            if existing is not None and existing.quantity + candidate.quantity == 0:
                raise HoldingValidationError(
                    f"Cannot merge into {existing.ticker} ({existing.sector}): "
                    "total quantity would be zero"
                )
        except HoldingValidationError as e:
            if self.event_logger is not None:
                self.event_logger.log_error(
                    PortfolioEventType.INPUT_REJECTED, str(e), ticker=ticker
                )
            raise

        updated = merge_or_add(self._holdings, candidate)
        self._commit(updated)

        if existing is not None:
            result = get_holding(updated, existing.id)
            self._record(PortfolioEventType.HOLDING_MERGED, result)
        else:
            result = updated[-1]
            self._record(PortfolioEventType.HOLDING_ADDED, result)
        return result

    def edit_holding(
        self,
        holding_id: str,
        quantity: str | float,
        avg_buy_price: str | float,
        current_price: str | float,
        name: Optional[str] = None,
        ticker: Optional[str] = None,
        sector: Optional[str] = None,
    ) -> Holding:
        """Overwrite quantity and prices of one holding.

        ``name``, ``ticker`` and ``sector`` are accepted and ignored. An empty
        name or ticker still blocks the save, as it does when adding.

        Raises:
            HoldingNotFoundError: If no holding has ``holding_id``
            HoldingValidationError: If name or ticker is given but empty
        """
        blank = [
            label
            for label, value in (("name", name), ("ticker", ticker))
            if value is not None and not value.strip()
        ]
        if blank:
            raise HoldingValidationError(f"Missing required fields: {', '.join(blank)}")

        updated = edit_holding(
            self._holdings,
            holding_id,
            quantity=HoldingInputParser.parse_amount(quantity),
            avg_buy_price=HoldingInputParser.parse_amount(avg_buy_price),
            current_price=HoldingInputParser.parse_amount(current_price),
            name=name,
            ticker=ticker,
            sector=sector,
        )
        self._commit(updated)

        result = get_holding(updated, holding_id)
        self._record(PortfolioEventType.HOLDING_EDITED, result)
        return result

    def delete_holding(self, holding_id: str) -> Holding:
        """Remove one holding.

        Returns:
            The removed holding

        Raises:
            HoldingNotFoundError: If no holding has ``holding_id``
        """
        removed = get_holding(self._holdings, holding_id)
        self._commit(delete_holding(self._holdings, holding_id))
        self._record(PortfolioEventType.HOLDING_DELETED, removed)
        return removed

    def get_snapshot(self) -> PortfolioSnapshot:
        """Compute the current portfolio snapshot."""
        return self.engine.compute_snapshot(self._holdings, self.targets)

    def get_advisories(self, snapshot: Optional[PortfolioSnapshot] = None) -> List[Advisory]:
        """Compute rebalancing and concentration advisories."""
        snapshot = snapshot or self.get_snapshot()
        advisories = self.engine.compute_rebalancing_advisories(
            snapshot, self.targets, self._holdings
        )

        logger.info("Generated %d advisories", len(advisories))
        if self.event_logger is not None:
            self.event_logger.log_advisories(
                advisory_count=len(advisories),
                total_current_value=snapshot.total_current_value,
                kinds=[a.kind.value for a in advisories],
            )
        return advisories

    def get_sector_statuses(
        self, snapshot: Optional[PortfolioSnapshot] = None
    ) -> List[Advisory]:
        """Per-sector display status, balanced sectors included."""
        return self.engine.sector_status_advisories(snapshot or self.get_snapshot())

    def get_sector_detail(self, sector: str) -> Dict:
        """Drill-down of one target sector.

        Raises:
            SectorNotFoundError: If ``sector`` is not in the target table
        """
        return self.engine.sector_detail(self.get_snapshot(), sector)

    def format_holdings(self) -> pd.DataFrame:
        """Format holdings as a DataFrame for display."""
        columns = [
            "id",
            "name",
            "ticker",
            "sector",
            "quantity",
            "avg_buy_price",
            "current_price",
            "invested",
            "current_value",
            "gain_loss",
            "gain_loss_pct",
        ]
        if not self._holdings:
            return pd.DataFrame(columns=columns)

        data = [
            {
                "id": h.id,
                "name": h.name,
                "ticker": h.ticker,
                "sector": h.sector,
                "quantity": h.quantity,
                "avg_buy_price": h.avg_buy_price,
                "current_price": h.current_price,
                "invested": h.invested_amount,
                "current_value": h.current_value,
                "gain_loss": h.gain_loss,
                "gain_loss_pct": h.gain_loss_percent,
            }
            for h in self._holdings
        ]
        return pd.DataFrame(data, columns=columns)

    def format_breakdown(self, snapshot: Optional[PortfolioSnapshot] = None) -> pd.DataFrame:
        """Format the sector breakdown as a DataFrame, in target-table order."""
        snapshot = snapshot or self.get_snapshot()

        data = [
            {
                "sector": allocation.sector,
                "current_value": allocation.current_value,
                "current_pct": allocation.current_percent,
                "target_pct": allocation.target_percent,
                "deviation": allocation.deviation,
                "status": self.engine.status_for(
                    allocation.current_percent, allocation.target_percent
                ).value,
                "holding_count": len(allocation.holdings),
            }
            for allocation in snapshot.sector_breakdown.values()
        ]
        return pd.DataFrame(
            data,
            columns=[
                "sector",
                "current_value",
                "current_pct",
                "target_pct",
                "deviation",
                "status",
                "holding_count",
            ],
        )

    def format_advisories(self, advisories: Sequence[Advisory]) -> pd.DataFrame:
        """Format advisories as a DataFrame, preserving emission order."""
        columns = ["kind", "subject", "magnitude", "suggested_amount", "message"]
        if not advisories:
            return pd.DataFrame(columns=columns)

        data = [
            {
                "kind": a.kind.value,
                "subject": a.subject,
                "magnitude": a.magnitude,
                "suggested_amount": a.suggested_amount,
                "message": a.message,
            }
            for a in advisories
        ]
        return pd.DataFrame(data, columns=columns)
