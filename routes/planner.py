"""
routes/planner.py — Recommendation and calendar routes.

Provides:
- GET /garden/<garden_id>/recommendations?month= — Monthly focus, weekly actions, top crops, site tips
- GET /garden/<garden_id>/calendar?startMonth= — Twelve-month activity calendar
- GET /recommendations/specific?scenario=|task=&month= — Scenario shopping list
- POST /garden/<garden_id>/simulate — Monte Carlo season simulation

Garden settings (locationConfig, cropStatus, portfolio, customPortfolio)
are read from the saved record; a missing garden plans with the defaults.
"""

from flask import Blueprint, jsonify, request

from garden_calendar import generate_garden_calendar
from models import CropStatusRegistry, LocationConfig
from garden_config import DEFAULT_SUMMER_SCENARIO, DEFAULT_WINTER_SCENARIO
from portfolio import DEFAULT_STRATEGY, get_climate_type, get_portfolio_strategies, resolve_portfolio
from recommendations import (
    SCENARIOS, convert_vague_task, investment_priorities, monthly_focus,
    site_recommendations, specific_recommendations, top_crops, weekly_actions
)
from simulation import DEFAULT_ITERATIONS, run_simulation
from storage import garden_key, get_item
from utils.validators import parse_month, parse_non_negative, validate_garden_id

planner_bp = Blueprint('planner', __name__)


def load_garden(garden_id):
    """Saved garden document, or {} when missing or not an object."""
    garden = get_item(garden_key(garden_id), {})
    return garden if isinstance(garden, dict) else {}


def load_planner_inputs(garden_id):
    """(location, crop status registry, portfolio allocation) for a garden."""
    garden = load_garden(garden_id)

    location = LocationConfig.from_overrides(garden.get('locationConfig'))
    registry = CropStatusRegistry.from_dict(garden.get('cropStatus'))
    portfolio = resolve_portfolio(location, garden.get('portfolio'), garden.get('customPortfolio'))
    return location, registry, portfolio


def _month_arg(name):
    """Month query parameter; raises ValueError when present but not 1-12."""
    return parse_month(request.args.get(name))


@planner_bp.route('/garden/<garden_id>/recommendations')
def garden_recommendations(garden_id):
    """Recommendations for a garden and month (JSON API)."""
    error = validate_garden_id(garden_id)
    if error:
        return jsonify({'error': error}), 400

    try:
        month = _month_arg('month')
    except ValueError:
        return jsonify({'error': 'Invalid month'}), 400

    location, _, portfolio = load_planner_inputs(garden_id)
    focus = monthly_focus(portfolio, month)

    return jsonify({
        'gardenId': garden_id,
        'month': focus['monthNumber'],
        'climateType': get_climate_type(location),
        'portfolio': portfolio,
        'monthlyFocus': focus,
        'weeklyActions': weekly_actions(portfolio, month),
        'topCrops': top_crops(portfolio, month),
        'siteRecommendations': site_recommendations(month),
        'investmentPriorities': investment_priorities(month),
    })


@planner_bp.route('/garden/<garden_id>/calendar')
def garden_calendar(garden_id):
    """Twelve-month calendar for a garden (JSON API)."""
    error = validate_garden_id(garden_id)
    if error:
        return jsonify({'error': error}), 400

    try:
        start_month = _month_arg('startMonth')
    except ValueError:
        return jsonify({'error': 'Invalid month'}), 400

    location, registry, portfolio = load_planner_inputs(garden_id)
    calendar = generate_garden_calendar(location, portfolio, registry, start_month)

    return jsonify({
        'gardenId': garden_id,
        'location': location.get('name'),
        'climateZone': location.climate_zone,
        'calendar': calendar,
    })


@planner_bp.route('/recommendations/specific')
def specific():
    """Shopping recommendations for a scenario or a free-text task (JSON API)."""
    try:
        month = _month_arg('month')
    except ValueError:
        return jsonify({'error': 'Invalid month'}), 400

    scenario = request.args.get('scenario', '')
    task = request.args.get('task', '')

    if scenario:
        items = specific_recommendations(scenario, month)
    elif task:
        items = convert_vague_task(task, month)
    else:
        return jsonify({'error': 'scenario or task is required', 'scenarios': sorted(SCENARIOS)}), 400

    return jsonify({
        'scenario': scenario or None,
        'task': task or None,
        'recommendations': items,
    })


def _strategy_name(location, strategy, custom_portfolio):
    """Strategy key that resolve_portfolio() ends up using for `strategy`."""
    if isinstance(strategy, dict):
        return 'custom'
    if not isinstance(custom_portfolio, dict):
        custom_portfolio = None
    if isinstance(strategy, str) and strategy in get_portfolio_strategies(location, custom_portfolio):
        return strategy
    return DEFAULT_STRATEGY


@planner_bp.route('/garden/<garden_id>/simulate', methods=['POST'])
def simulate(garden_id):
    """
    Monte Carlo season simulation for a garden (JSON API).

    Optional JSON body: summer, winter, strategy, iterations, seed,
    baseInvestment. Location and portfolio come from the saved garden.
    """
    error = validate_garden_id(garden_id)
    if error:
        return jsonify({'error': error}), 400

    options = request.get_json(silent=True)
    if options is None:
        options = {}
    if not isinstance(options, dict):
        return jsonify({'error': 'Invalid simulation options'}), 400

    garden = load_garden(garden_id)
    location = LocationConfig.from_overrides(garden.get('locationConfig'))
    custom_portfolio = garden.get('customPortfolio')
    strategy = options.get('strategy') or garden.get('portfolio')
    portfolio = resolve_portfolio(location, strategy, custom_portfolio)

    try:
        result = run_simulation(
            location,
            portfolio,
            strategy=_strategy_name(location, strategy, custom_portfolio),
            summer=options.get('summer') or DEFAULT_SUMMER_SCENARIO,
            winter=options.get('winter') or DEFAULT_WINTER_SCENARIO,
            base_investment=parse_non_negative(options.get('baseInvestment')),
            iterations=parse_non_negative(options.get('iterations'), DEFAULT_ITERATIONS, integer=True),
            seed=parse_non_negative(options.get('seed'), integer=True),
        )
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({'gardenId': garden_id, **result})
