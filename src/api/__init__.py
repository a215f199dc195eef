"""User-friendly APIs for Portfolio Tracker.

This package provides high-level interfaces for the application shell.

Components:
- PortfolioAPI: Holdings management, allocation snapshot and advisories
"""

from src.api.portfolio_api import PortfolioAPI

__all__ = [
    "PortfolioAPI",
]
