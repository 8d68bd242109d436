"""
portfolio.py — Climate-adapted crop portfolio strategies.

A portfolio is a percentage allocation across four crop categories:
heatSpecialists, coolSeason, perennials, experimental.

Strategies (conservative / aggressive / hedge) are picked from an allocation
matrix keyed by climate type:
- hot:    more than 120 heat days
- cold:   hardiness zone below 6
- normal: everything else
Short-season locations (zone < 5) get a larger cool-season share.
"""

import math
from typing import Optional, Dict, Any

from garden_config import (
    CLIMATE_ALLOCATIONS, DEFAULT_STRATEGIES, PORTFOLIO_CATEGORIES,
    PORTFOLIO_DESCRIPTORS, PORTFOLIO_NAMES, SHORT_SEASON_COOL_ALLOCATION
)
from models import LocationConfig

DEFAULT_STRATEGY = 'hedge'

# Risk weight per category and climate type (0 = safe, 1 = risky)
RISK_WEIGHTS = {
    'heatSpecialists': {'hot': 0.1, 'cold': 0.8, 'normal': 0.4},
    'coolSeason': {'hot': 0.9, 'cold': 0.1, 'normal': 0.3},
    'perennials': {'hot': 0.2, 'cold': 0.2, 'normal': 0.2},
    'experimental': {'hot': 0.7, 'cold': 0.7, 'normal': 0.7},
}


def get_climate_type(location: LocationConfig) -> str:
    """Classify a location as 'hot', 'cold' or 'normal'."""
    if location.heat_days > 120:
        return 'hot'
    if location.hardiness_zone_number < 6:
        return 'cold'
    return 'normal'


def get_portfolio_strategies(location: Optional[LocationConfig] = None,
                             custom_portfolio: Optional[Dict[str, Any]] = None) -> Dict[str, Dict[str, Any]]:
    """
    Build the strategy table for a location.

    Without a location the location-independent defaults are returned. A
    custom portfolio, when given, is added under the 'custom' key.
    """
    if location is None:
        strategies = {key: dict(value) for key, value in DEFAULT_STRATEGIES.items()}
    else:
        climate_type = get_climate_type(location)
        short_season = location.hardiness_zone_number < 5

        strategies = {}
        for strategy, allocations in CLIMATE_ALLOCATIONS.items():
            allocation = dict(allocations[climate_type])
            if climate_type == 'cold' and short_season:
                allocation['coolSeason'] = SHORT_SEASON_COOL_ALLOCATION[strategy]

            strategies[strategy] = {
                'name': PORTFOLIO_NAMES[strategy][climate_type],
                'description': PORTFOLIO_DESCRIPTORS[strategy][climate_type],
                **allocation,
            }

    if custom_portfolio:
        strategies['custom'] = create_custom_portfolio(custom_portfolio)
    return strategies


def create_custom_portfolio(allocations: Dict[str, Any]) -> Dict[str, Any]:
    """Custom portfolio with missing categories set to 0."""
    portfolio = {'name': 'Custom Portfolio', 'description': 'User-defined allocation'}
    for category in PORTFOLIO_CATEGORIES:
        portfolio[category] = _as_percentage(allocations.get(category, 0))
    return portfolio


def resolve_portfolio(location: LocationConfig, portfolio: Any = None,
                      custom_portfolio: Optional[Dict[str, Any]] = None) -> Dict[str, float]:
    """
    Turn a stored portfolio setting into a bare {category: percentage} mapping.

    `portfolio` may be a strategy key ('hedge', 'custom', ...), an allocation
    mapping, or None (the default strategy). Unknown keys and values of any
    other type fall back to the default strategy.
    """
    if isinstance(portfolio, dict):
        selected = create_custom_portfolio(portfolio)
    else:
        if not isinstance(custom_portfolio, dict):
            custom_portfolio = None
        strategies = get_portfolio_strategies(location, custom_portfolio)
        key = portfolio if isinstance(portfolio, str) else DEFAULT_STRATEGY
        selected = strategies.get(key) or strategies[DEFAULT_STRATEGY]
    return allocation_only(selected)


def allocation_only(portfolio: Dict[str, Any]) -> Dict[str, float]:
    """Drop name/description, keeping the category percentages."""
    return {cat: _as_percentage(portfolio.get(cat, 0)) for cat in PORTFOLIO_CATEGORIES}


def calculate_portfolio_risk(allocation: Dict[str, Any], climate_type: str) -> int:
    """Risk score 0-100 (lower is less risky)."""
    risk = 0.0
    for category, percentage in allocation_only(allocation).items():
        weight = RISK_WEIGHTS.get(category, {}).get(climate_type, 0.5)
        risk += percentage * weight / 100
    return round(risk * 100)


def _as_percentage(value) -> float:
    """Allocation share clamped to 0-100; unparseable values count as 0."""
    try:
        percentage = float(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(percentage):
        return 0.0
    return min(max(percentage, 0.0), 100.0)
