"""
simulation.py — Monte Carlo simulation of a garden season.

Samples harvest value, investment and weather for a portfolio under a
summer and winter climate scenario, then summarizes net return and ROI.

Per iteration:
- harvestValue ~ Normal(expected harvest, 30%)
- investment   ~ Normal(budget × strategy multiplier, 10%)
- netReturn = harvestValue - investment, roi = netReturn / investment × 100
- stressDays, freezeEvents ~ Poisson; annualRainfall ~ Normal, floored at 10

Samples are drawn column-wise with a numpy Generator, so a fixed seed
reproduces a run exactly.
"""

import logging
import math

import numpy as np

from garden_config import (
    BASE_COSTS, BASE_FREEZE_EVENTS, BASE_STRESS_DAYS, BASE_YIELD_MULTIPLIERS,
    CLIMATE_COST_FACTORS, CLIMATE_SEVERITY_MULTIPLIERS, COST_PRIORITIES,
    DEFAULT_SUMMER_SCENARIO, DEFAULT_WINTER_SCENARIO, MARKET_PRICES,
    PORTFOLIO_COST_FACTORS, PORTFOLIO_MULTIPLIERS, SUMMER_SCENARIOS, WINTER_SCENARIOS
)
from models import LocationConfig

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 1000
MAX_ITERATIONS = 10000
RETURN_BINS = 25
WEATHER_BINS = 15

# Substituted when a sampling parameter is not usable
FALLBACK_MEAN = 100
FALLBACK_STD = 10


# ========================================
# Parameters
# ========================================

def get_climate_severity(summer, winter):
    """Yield multipliers per crop type; unknown scenarios count as 1.0."""
    summer_mult = CLIMATE_SEVERITY_MULTIPLIERS['summer'].get(summer, 1.0)
    winter_mult = CLIMATE_SEVERITY_MULTIPLIERS['winter'].get(winter, 1.0)
    return {
        'heat': summer_mult,
        'cool': summer_mult * winter_mult,
        'perennial': min(summer_mult, winter_mult),
    }


def get_size_multiplier(location: LocationConfig) -> float:
    """Garden area relative to the 100 sq ft reference plot."""
    size = location.number('gardenSizeActual', 100)
    return (size if size > 0 else 100) / 100


def calculate_required_investment(portfolio, summer, winter, size_multiplier):
    """
    Season setup cost by category, scaled to garden size and adjusted for
    the climate scenarios and the portfolio mix.
    """
    costs = {category: cost * size_multiplier for category, cost in BASE_COSTS.items()}

    summer_factor = CLIMATE_COST_FACTORS.get(summer, CLIMATE_COST_FACTORS['normal'])
    winter_factor = CLIMATE_COST_FACTORS.get(winter, CLIMATE_COST_FACTORS['normal'])

    costs['protection'] *= max(summer_factor['protection'], winter_factor['protection'])
    costs['irrigation'] *= summer_factor['irrigation']
    costs['fertilizer'] *= summer_factor['heat']

    for category, allocation in portfolio.items():
        factors = PORTFOLIO_COST_FACTORS.get(category)
        if not factors or allocation <= 0:
            continue
        for cost_category, factor in factors.items():
            costs[cost_category] *= 1 + (factor - 1) * allocation / 100

    return {
        'breakdown': costs,
        'total': sum(costs.values()),
        'climateAdjustments': {
            'summer': summer,
            'winter': winter,
            'summerFactor': summer_factor['protection'],
            'winterFactor': winter_factor['protection'],
        },
    }


def _critical_categories(ratio, breakdown):
    if ratio >= 1.0:
        return []

    critical = []
    for category, importance, description in COST_PRIORITIES:
        if ratio < 0.6 and importance == 'low':
            action = 'consider reducing'
        elif ratio < 0.8 and importance in ('critical', 'high'):
            action = 'prioritize funding'
        else:
            continue
        critical.append({
            'category': category,
            'importance': importance,
            'description': description,
            'action': action,
            'required': breakdown[category],
        })
    return critical


def calculate_investment_sufficiency(actual, required):
    """Compare the planned budget with the required investment."""
    total = required['total']
    ratio = actual / total if total > 0 else 0.0
    gap = total - actual
    shortfall = math.ceil(gap) if math.isfinite(gap) else gap

    if ratio >= 1.2:
        status, level = 'abundant', 'excellent'
        recommendations = [
            'Investment exceeds requirements - consider premium varieties',
            'Opportunity for infrastructure upgrades',
            'Buffer available for unexpected costs',
        ]
    elif ratio >= 1.0:
        status, level = 'adequate', 'good'
        recommendations = [
            'Investment meets requirements',
            'Consider small buffer for contingencies',
            'Well-positioned for planned portfolio',
        ]
    elif ratio >= 0.8:
        status, level = 'marginal', 'caution'
        recommendations = [
            f'Consider increasing investment by ${shortfall}',
            'Focus on essential categories (seeds, soil, protection)',
            'Risk of reduced yields or crop failures',
        ]
    else:
        status, level = 'insufficient', 'warning'
        recommendations = [
            f'Investment shortfall of ${shortfall} may cause significant issues',
            'Prioritize seeds and soil amendments',
            'Consider reducing portfolio complexity',
            'Risk of poor garden performance',
        ]

    return {
        'ratio': ratio,
        'gap': max(0.0, gap),
        'surplus': max(0.0, -gap),
        'status': status,
        'level': level,
        'recommendations': recommendations,
        'criticalCategories': _critical_categories(ratio, required['breakdown']),
    }


def generate_simulation_parameters(portfolio, base_investment, portfolio_multiplier,
                                   location, summer, winter):
    """Distribution parameters for harvest, investment and per-type yields."""
    size_multiplier = get_size_multiplier(location)
    severity = get_climate_severity(summer, winter)

    base_yields = {
        crop_type: portfolio.get(crop_type, 0) * multiplier * size_multiplier
        for crop_type, multiplier in BASE_YIELD_MULTIPLIERS.items()
    }
    heat_value = base_yields['heatSpecialists'] * MARKET_PRICES['heat']
    cool_value = base_yields['coolSeason'] * MARKET_PRICES['cool']
    perennial_value = base_yields['perennials'] * MARKET_PRICES['herbs']

    expected_harvest = (heat_value * severity['heat']
                        + cool_value * severity['cool']
                        + perennial_value * severity['perennial'])
    investment_mean = base_investment * portfolio_multiplier
    required = calculate_required_investment(portfolio, summer, winter, size_multiplier)

    return {
        'harvest': {'mean': expected_harvest, 'std': expected_harvest * 0.3},
        'investment': {'mean': investment_mean, 'std': investment_mean * 0.1},
        'heatYield': {'mean': heat_value, 'std': heat_value * 0.4},
        'coolYield': {'mean': cool_value, 'std': cool_value * 0.4},
        'perennialYield': {'mean': perennial_value, 'std': perennial_value * 0.3},
        'climateSeverity': severity,
        'requiredInvestment': required,
        'investmentSufficiency': calculate_investment_sufficiency(investment_mean, required),
    }


# ========================================
# Sampling
# ========================================

def _normal_samples(rng, params, size):
    mean, std = params['mean'], params['std']
    if not math.isfinite(mean):
        mean = FALLBACK_MEAN
    if not math.isfinite(std) or std <= 0:
        std = FALLBACK_STD
    return rng.normal(mean, std, size)


def _scaled(location, key, base):
    """`base` scaled by a 1-5 location rating, where 3 is typical."""
    rating = location.number(key, 3) or 3
    return max(0.0, base * rating / 3)


def generate_weather_samples(rng, iterations, location, summer, winter):
    """Heat stress days, freeze events and annual rainfall per iteration."""
    stress_lambda = _scaled(location, 'heatIntensity', BASE_STRESS_DAYS.get(summer, 15))
    freeze_lambda = _scaled(location, 'winterSeverity', BASE_FREEZE_EVENTS.get(winter, 8))
    rainfall_mean = location.number('avgRainfall', 40) or 40

    return {
        'stressDays': rng.poisson(stress_lambda, iterations),
        'freezeEvents': rng.poisson(freeze_lambda, iterations),
        'annualRainfall': np.maximum(10, rng.normal(rainfall_mean, abs(rainfall_mean) * 0.2, iterations)),
    }


def run_monte_carlo(params, location, summer, winter, iterations=DEFAULT_ITERATIONS, seed=None):
    """
    Draw `iterations` seasons.

    Returns a dict of equal-length numpy arrays: harvestValue, investment,
    netReturn, roi, heatYield, coolYield, perennialYield plus the weather
    columns from generate_weather_samples().
    """
    rng = np.random.default_rng(seed)

    harvest = _normal_samples(rng, params['harvest'], iterations)
    investment = _normal_samples(rng, params['investment'], iterations)
    net_return = harvest - investment
    roi = np.divide(net_return, investment, out=np.zeros(iterations), where=investment > 0) * 100

    results = {
        'harvestValue': harvest,
        'investment': investment,
        'netReturn': net_return,
        'roi': roi,
        'heatYield': _normal_samples(rng, params['heatYield'], iterations),
        'coolYield': _normal_samples(rng, params['coolYield'], iterations),
        'perennialYield': _normal_samples(rng, params['perennialYield'], iterations),
    }
    results.update(generate_weather_samples(rng, iterations, location, summer, winter))
    return results


# ========================================
# Statistics
# ========================================

def _summary(values):
    return {
        'mean': float(np.mean(values)),
        'median': float(np.median(values)),
        'std': float(np.std(values)),
    }


def calculate_statistics(results):
    """
    Net return, ROI and harvest statistics over the finite iterations.

    successRate is the percentage of iterations with a positive net return.
    """
    empty = {'mean': 0.0, 'median': 0.0, 'std': 0.0, 'percentiles': {}, 'successRate': 0.0}
    if not results or len(results['netReturn']) == 0:
        return empty

    net_return = np.asarray(results['netReturn'], dtype=float)
    roi = np.asarray(results['roi'], dtype=float)
    harvest = np.asarray(results['harvestValue'], dtype=float)

    valid = np.isfinite(net_return) & np.isfinite(roi) & np.isfinite(harvest)
    if not valid.any():
        return empty
    net_return, roi, harvest = net_return[valid], roi[valid], harvest[valid]

    p10, p25, p75, p90 = np.percentile(net_return, [10, 25, 75, 90])
    return {
        **_summary(net_return),
        'percentiles': {'p10': float(p10), 'p25': float(p25), 'p75': float(p75), 'p90': float(p90)},
        'roi': _summary(roi),
        'harvestValue': _summary(harvest),
        'successRate': float(np.mean(net_return > 0) * 100),
    }


def generate_histogram_data(data, bins=RETURN_BINS):
    """Equal-width bins over [min, max] as [{x: bin center, count, value}]."""
    values = np.asarray(data, dtype=float)
    values = values[np.isfinite(values)]
    if values.size == 0:
        return []

    low, high = float(values.min()), float(values.max())
    if low == high:
        return [{'x': low, 'count': int(values.size), 'value': int(values.size)}]

    counts, edges = np.histogram(values, bins=bins, range=(low, high))
    centers = (edges[:-1] + edges[1:]) / 2
    return [
        {'x': float(center), 'count': int(count), 'value': int(count)}
        for center, count in zip(centers, counts)
    ]


def generate_weather_risk_data(results):
    if not results:
        return {}
    return {
        'stressDays': generate_histogram_data(results['stressDays'], WEATHER_BINS),
        'freezeEvents': generate_histogram_data(results['freezeEvents'], WEATHER_BINS),
        'rainfall': generate_histogram_data(results['annualRainfall'], WEATHER_BINS),
    }


# ========================================
# Entry point
# ========================================

def validate_scenarios(summer, winter):
    """Raise ValueError for scenario names outside the known sets."""
    if summer not in SUMMER_SCENARIOS:
        raise ValueError(f"Unknown summer scenario: {summer}")
    if winter not in WINTER_SCENARIOS:
        raise ValueError(f"Unknown winter scenario: {winter}")


def run_simulation(location, portfolio, strategy=None,
                   summer=DEFAULT_SUMMER_SCENARIO, winter=DEFAULT_WINTER_SCENARIO,
                   base_investment=None, iterations=DEFAULT_ITERATIONS, seed=None):
    """
    Simulate a season for a location and portfolio allocation.

    Args:
        location: LocationConfig
        portfolio: {category: percentage} allocation
        strategy: strategy name for the investment multiplier; other
            values (custom portfolios) use 1.0
        base_investment: season budget; defaults to the location's budget
        iterations: 1 to MAX_ITERATIONS
        seed: optional seed for reproducible runs

    Raises:
        ValueError: unknown scenario or iteration count out of range
    """
    validate_scenarios(summer, winter)
    if not 1 <= iterations <= MAX_ITERATIONS:
        raise ValueError(f"iterations must be between 1 and {MAX_ITERATIONS}")

    if base_investment is None:
        base_investment = location.number('budget', 400)
    multiplier = PORTFOLIO_MULTIPLIERS.get(strategy, 1.0)

    params = generate_simulation_parameters(portfolio, base_investment, multiplier,
                                            location, summer, winter)
    results = run_monte_carlo(params, location, summer, winter, iterations, seed)
    logger.debug("Simulated %d seasons (%s summer, %s winter)", iterations, summer, winter)

    winter_min, winter_max = location.winter_low_range
    return {
        'scenario': {
            'summer': summer,
            'winter': winter,
            'strategy': strategy,
            'portfolioMultiplier': multiplier,
            'baseInvestment': base_investment,
            'iterations': iterations,
        },
        'location': {
            'name': location.get('name'),
            'hardiness': location.hardiness,
            'winterLow': {'min': winter_min, 'max': winter_max},
        },
        'portfolio': portfolio,
        **calculate_statistics(results),
        'climateSeverity': params['climateSeverity'],
        'requiredInvestment': params['requiredInvestment'],
        'investmentSufficiency': params['investmentSufficiency'],
        'weatherSummary': {
            'stressDays': float(np.mean(results['stressDays'])),
            'freezeEvents': float(np.mean(results['freezeEvents'])),
            'annualRainfall': float(np.mean(results['annualRainfall'])),
        },
        'returnHistogram': generate_histogram_data(results['netReturn'], RETURN_BINS),
        'roiHistogram': generate_histogram_data(results['roi'], RETURN_BINS),
        'weatherRiskData': generate_weather_risk_data(results),
    }
