"""Sector target tables.

The default table mirrors the allocation the tracker ships with. A custom
table can be supplied through the ``allocation.targets`` config section.
"""

from typing import Dict, List, Optional, Sequence

from src.portfolio.base import SectorTarget
from src.utils.config import Config
from src.utils.exceptions import ConfigurationError
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Allowed slack when checking that targets sum to 100
TARGET_SUM_TOLERANCE = 0.01

DEFAULT_SECTOR_TARGETS: List[SectorTarget] = [
    SectorTarget("Gold and Silver", 20.0),
    SectorTarget("Indian Equities", 40.0),
    SectorTarget("US Tech Stocks", 15.0),
    SectorTarget("US ETF", 5.0),
    SectorTarget("Crypto", 10.0),
    SectorTarget("Business/Cash", 10.0),
]


def validate_sector_targets(targets: Sequence[SectorTarget]) -> None:
    """Check that a target table is usable.

    Raises:
        ConfigurationError: If the table is empty, has duplicate or blank
            sector names, has a target outside [0, 100], or does not sum to 100
    """
    if not targets:
        raise ConfigurationError("Sector target table must not be empty")

    seen = set()
    for target in targets:
        if not target.sector.strip():
            raise ConfigurationError("Sector name must not be blank")
        if target.sector in seen:
            raise ConfigurationError(f"Duplicate sector in target table: {target.sector}")
        seen.add(target.sector)
        if not 0 <= target.target_percent <= 100:
            raise ConfigurationError(
                f"target_percent for {target.sector} must be in [0, 100], "
                f"got {target.target_percent}"
            )

    total = sum(t.target_percent for t in targets)
    if abs(total - 100.0) > TARGET_SUM_TOLERANCE:
        raise ConfigurationError(f"Sector targets must sum to 100, got {total:.2f}")


def targets_from_records(records: Sequence[Dict]) -> List[SectorTarget]:
    """Build a target table from ``{sector, target_percent}`` mappings.

    Raises:
        ConfigurationError: If a record lacks a field or the table is invalid
    """
    targets = []
    for record in records:
        try:
            targets.append(
                SectorTarget(
                    sector=str(record["sector"]),
                    target_percent=float(record["target_percent"]),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid sector target entry {record!r}: {e}") from e

    validate_sector_targets(targets)
    return targets


def load_sector_targets(config: Optional[Config] = None) -> List[SectorTarget]:
    """Load the sector target table from config.

    Falls back to DEFAULT_SECTOR_TARGETS when no config is given or the
    config has no ``allocation.targets`` section.
    """
    records = config.get("allocation.targets") if config is not None else None
    if not records:
        return list(DEFAULT_SECTOR_TARGETS)

    targets = targets_from_records(records)
    logger.info("Loaded %d sector targets from config", len(targets))
    return targets
