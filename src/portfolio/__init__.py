"""Portfolio Allocation Layer.

This layer turns the user's holdings and a sector target table into
valuation, sector allocation and rebalancing guidance.

Components:
- AllocationEngine: snapshot aggregation, advisories and sector status
- Holding, SectorTarget: engine inputs
- PortfolioSnapshot, SectorAllocation, Advisory: engine outputs
- merge_or_add / edit_holding / delete_holding: holding list operations
- DEFAULT_SECTOR_TARGETS: the shipped target table
"""

from src.portfolio.allocation_engine import (
    AllocationEngine,
    compute_rebalancing_advisories,
    compute_snapshot,
    status_for,
)
from src.portfolio.base import (
    Advisory,
    AdvisoryKind,
    Holding,
    PortfolioSnapshot,
    SectorAllocation,
    SectorStatus,
    SectorTarget,
    new_holding_id,
)
from src.portfolio.holdings import delete_holding, edit_holding, merge_or_add
from src.portfolio.targets import DEFAULT_SECTOR_TARGETS, load_sector_targets

__all__ = [
    "AllocationEngine",
    "compute_snapshot",
    "compute_rebalancing_advisories",
    "status_for",
    "Advisory",
    "AdvisoryKind",
    "Holding",
    "PortfolioSnapshot",
    "SectorAllocation",
    "SectorStatus",
    "SectorTarget",
    "new_holding_id",
    "merge_or_add",
    "edit_holding",
    "delete_holding",
    "DEFAULT_SECTOR_TARGETS",
    "load_sector_targets",
]
