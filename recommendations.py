"""
recommendations.py — Month-driven gardening recommendations.

Provides:
- monthly_focus — headline and three focus tasks for the month, plus portfolio advice
- weekly_actions — up to 4 prioritized actions for the week
- top_crops — up to 3 in-season crops, ordered by portfolio relevance
- site_recommendations — year-round and seasonal site tips
- investment_priorities — infrastructure spending list
- specific_recommendations — concrete shopping items for a planning scenario
- convert_vague_task — maps free-text tasks ("plan fall garden") to a scenario

All functions are pure: `month` defaults to the current month, `portfolio`
is a {category: percentage} mapping (see portfolio.py) and may be None.
"""

import logging
from datetime import date

from garden_config import CROP_CATALOGUE, MONTH_NAMES, PORTFOLIO_CROP_GROUPS

logger = logging.getLogger(__name__)

# Portfolio share needed before category advice / actions show up
FOCUS_ADVICE_THRESHOLD = 15
WEEKLY_ACTION_THRESHOLD = 10

MAX_WEEKLY_ACTIONS = 4
MAX_TOP_CROPS = 3

MONTHLY_FOCUS = {
    1: ('Planning Season', [
        'Order heat-tolerant seeds while selection is best',
        'Plan bed rotations and new plantings',
        'Harvest any remaining kale and winter greens',
    ]),
    2: ('Early Spring Prep', [
        'Start pepper and tomato seeds indoors with heat mat',
        "Direct sow kale and lettuce if soil isn't muddy",
        "Add compost to beds (only when clay soil isn't sticky)",
    ]),
    3: ('Spring Planting Begins', [
        'Continue cool-season plantings',
        'Harden off indoor seedlings',
        'Prepare irrigation for summer heat',
    ]),
    4: ('Transition Month', [
        'Last chance for cool crops before heat',
        'Transplant warm-season crops after soil warms',
        'Install shade cloth framework',
    ]),
    5: ('Summer Heat Prep', [
        'Plant heat lovers: okra, peppers, sweet potatoes',
        'Heavy mulching and shade cloth installation',
        'Deep watering schedules begin',
    ]),
    6: ('Heat Management', [
        'Harvest spring crops before they bolt',
        'Maintain mulch and watering',
        'Order fall seeds while available',
    ]),
    7: ('Survival Mode', [
        'Daily okra harvest in early morning',
        'Provide extra shade for struggling plants',
        'Keep plants alive through heat waves',
    ]),
    8: ('Fall Planning', [
        'Start fall transplants indoors',
        'Continue summer harvest',
        'Prepare beds for fall crops',
    ]),
    9: ('Fall Transition', [
        'Transplant fall crops',
        'Continue summer harvest',
        'Plan winter garden',
    ]),
    10: ('Fall Harvest', [
        'Harvest sweet potatoes before frost',
        'Plant quick cool crops',
        'Prepare for winter protection',
    ]),
    11: ('Winter Prep', [
        'Harvest kale (sweetest after frost)',
        'Clean up spent summer crops',
        'Install cold protection',
    ]),
    12: ('Planning & Maintenance', [
        "Plan next year's garden",
        'Order early spring seeds',
        'Tool maintenance and planning',
    ]),
}


def _month_or_current(month):
    return month if month else date.today().month


# ========================================
# Monthly focus & weekly actions
# ========================================

def portfolio_advice(category, month):
    """One line of advice for a portfolio category in a given month, or None."""
    if category == 'heatSpecialists':
        if 5 <= month <= 7:
            return 'Perfect time for heat-loving crops'
        if month in (3, 4):
            return 'Start heat crops indoors'
    elif category == 'coolSeason':
        if 2 <= month <= 4:
            return 'Prime cool season planting time'
        if month in (8, 9):
            return 'Fall cool crops can be planted now'
    elif category == 'perennials':
        if month in (3, 4):
            return 'Spring care for established perennials'
    return None


def monthly_focus(portfolio=None, month=None):
    """
    This month's focus.

    Returns:
        {'month': 'March', 'monthNumber': 3, 'title': ..., 'tasks': [3 strings],
         'portfolioAdvice': [strings for categories at >= 15%]}
    """
    month = _month_or_current(month)
    title, tasks = MONTHLY_FOCUS[month]

    advice = []
    for category, percentage in (portfolio or {}).items():
        if percentage >= FOCUS_ADVICE_THRESHOLD:
            line = portfolio_advice(category, month)
            if line:
                advice.append(line)

    return {
        'month': MONTH_NAMES[month - 1],
        'monthNumber': month,
        'title': title,
        'tasks': list(tasks),
        'portfolioAdvice': advice,
    }


def _crop_actions(category, month):
    actions = []
    if category == 'heatSpecialists' and 6 <= month <= 8:
        actions.append({
            'icon': '🌶️',
            'task': 'Daily okra harvest, regular pepper picking',
            'urgency': 'medium',
            'timing': 'Early morning',
        })
    if category == 'coolSeason' and month in (2, 3, 8):
        actions.append({
            'icon': '🥬',
            'task': 'Succession plant lettuce and greens',
            'urgency': 'medium',
            'timing': 'Every 2-3 weeks',
        })
    return actions


def weekly_actions(portfolio=None, month=None):
    """Seasonal action first, then crop actions for categories at >= 10%. At most 4."""
    month = _month_or_current(month)
    actions = []

    if month in (2, 3):
        actions.append({
            'icon': '🌱',
            'task': 'Check soil moisture before working clay soil',
            'urgency': 'high',
            'timing': 'Before any garden work',
        })
    elif month in (5, 6, 7):
        actions.append({
            'icon': '💧',
            'task': 'Deep water in early morning before heat',
            'urgency': 'high',
            'timing': 'Daily during heat waves',
        })
    elif month in (8, 9):
        actions.append({
            'icon': '🌿',
            'task': 'Start fall transplants indoors',
            'urgency': 'medium',
            'timing': 'For fall garden',
        })

    for category, percentage in (portfolio or {}).items():
        if percentage >= WEEKLY_ACTION_THRESHOLD:
            actions.extend(_crop_actions(category, month))

    return actions[:MAX_WEEKLY_ACTIONS]


# ========================================
# Crop recommendations
# ========================================

def is_crop_in_season(group, month):
    """Heat lovers April-August, cool season August-April, perennials always."""
    if group == 'heatLovers':
        return 4 <= month <= 8
    if group == 'coolSeason':
        return month <= 4 or month >= 8
    return True


def _portfolio_relevance(group, portfolio):
    for category, crop_group in PORTFOLIO_CROP_GROUPS.items():
        if crop_group == group:
            return portfolio.get(category, 0)
    return 0


def top_crops(portfolio=None, month=None):
    """Up to 3 in-season crops; with a portfolio, the best-funded categories come first."""
    month = _month_or_current(month)
    candidates = []

    for group, crops in CROP_CATALOGUE.items():
        if not is_crop_in_season(group, month):
            continue
        for crop_key, crop in crops.items():
            candidates.append((group, {
                'cropKey': crop_key,
                'crop': crop['name'],
                'confidence': 'high',
                'reason': 'Perfect timing for Durham Zone 7b',
                'varieties': crop['varieties'][:2],
                'timing': crop.get('timing', 'Check Durham calendar'),
            }))

    if portfolio:
        # sort() is stable: catalogue order is kept within a category
        candidates.sort(key=lambda item: _portfolio_relevance(item[0], portfolio), reverse=True)

    return [rec for _, rec in candidates[:MAX_TOP_CROPS]]


# ========================================
# Site & investment
# ========================================

def site_recommendations(month=None):
    """Durham site tips: clay soil and heat protection all year, plus seasonal extras."""
    month = _month_or_current(month)
    recommendations = [
        {
            'category': 'Clay Soil Management',
            'tip': 'Never work Durham clay soil when wet - wait until it crumbles',
            'priority': 'high',
            'season': 'all',
        },
        {
            'category': 'Heat Protection',
            'tip': '30% shade cloth is essential for Durham summer success',
            'priority': 'high',
            'season': 'summer',
        },
    ]

    if 5 <= month <= 8:
        recommendations.append({
            'category': 'Summer Watering',
            'tip': 'Deep water in early morning, mulch heavily to retain moisture',
            'priority': 'high',
            'season': 'summer',
        })

    if month >= 11 or month <= 2:
        recommendations.append({
            'category': 'Winter Growing',
            'tip': 'Kale and hardy greens can overwinter in Durham with minimal protection',
            'priority': 'medium',
            'season': 'winter',
        })

    recommendations.append({
        'category': 'Durham Climate',
        'tip': 'Plan for extended heat waves - backup shade and extra water capacity',
        'priority': 'medium',
        'season': 'all',
    })
    return recommendations


def investment_priorities(month=None):
    """Infrastructure spending, irrigation first in March-May."""
    month = _month_or_current(month)
    priorities = []

    if 3 <= month <= 5:
        priorities.append({
            'category': 'Irrigation System',
            'amount': 85,
            'timing': 'Before summer heat',
            'urgency': 'high',
            'description': 'Essential for Durham summer survival',
        })

    priorities.extend([
        {
            'category': 'Shade Cloth',
            'amount': 45,
            'timing': 'Early spring setup',
            'urgency': 'high',
            'description': 'Critical for Durham heat protection',
        },
        {
            'category': 'Mulch & Compost',
            'amount': 60,
            'timing': 'Spring application',
            'urgency': 'medium',
            'description': 'Clay soil improvement and moisture retention',
        },
        {
            'category': 'Heat-Tolerant Seeds',
            'amount': 25,
            'timing': 'Early season ordering',
            'urgency': 'medium',
            'description': 'Durham-proven varieties',
        },
    ])
    return priorities


# ========================================
# Scenario-specific shopping recommendations
# ========================================

def _item(item_id, item, price, category, urgency, timing, why, where, specifications):
    return {
        'id': item_id,
        'item': item,
        'price': price,
        'category': category,
        'urgency': urgency,
        'timing': timing,
        'why': why,
        'where': where,
        'quantity': 1,
        'specifications': specifications,
    }


def _spring_layout(month, context):
    if not 1 <= month <= 4:
        return []
    return [
        _item('soil-test-kit', 'Soil pH and Nutrient Test Kit', 12.99, 'Spring Prep', 'medium',
              'Test soil before adding amendments',
              'Know exact soil needs before buying fertilizers and amendments',
              'Home Depot or Amazon', 'Tests pH, nitrogen, phosphorus, potassium levels'),
        _item('measuring-layout-kit', 'Garden Layout Planning Kit', 18.00, 'Planning Tools', 'low',
              'Use during winter planning months',
              'Accurate bed measurements for optimal plant spacing',
              'Harbor Freight or Amazon',
              f"25ft tape measure, stakes, string, grid sheets for beds {', '.join(context['bedSizes'])}"),
        _item('succession-planting-calendar', 'Succession Planting Seed Collection', 32.00, 'Spring Seeds',
              'medium', 'Order now for staggered plantings', 'Continuous harvest with 2-week intervals',
              'True Leaf Market', 'Lettuce, radish, beans in weekly succession packets'),
    ]


def _fall_planning(month, context):
    if not 6 <= month <= 9:
        return []
    late = month >= 8
    return [
        _item('fall-seed-collection', 'Fall Garden Seed Collection', 28.00, 'Fall Seeds',
              'urgent' if late else 'high',
              'Order immediately for September planting' if late else 'Order for August-September planting',
              'Cool-season crops for fall and winter harvest',
              'Southern Exposure or True Leaf Market', 'Kale, spinach, lettuce, radishes, Asian greens'),
        _item('fall-fertilizer', 'Organic Fall Garden Fertilizer', 15.99, 'Fall Prep', 'medium',
              'Apply before fall planting', 'Lower nitrogen blend appropriate for fall growth',
              'Local nursery or Espoma online', '4-6-4 NPK ratio, covers 500 sq ft'),
        _item('row-covers', 'Floating Row Covers for Season Extension', 22.00, 'Season Extension', 'medium',
              'Install before first frost threat', 'Extends fall harvest by 4-6 weeks',
              'Johnny Seeds or local supplier', '10x20ft lightweight fabric, includes hoops'),
    ]


def _winter_planning(month, context):
    if 2 < month < 10:
        return []
    late = month >= 11
    return [
        _item('cold-frame-kit', 'DIY Cold Frame Construction Kit', 89.99, 'Winter Growing',
              'urgent' if late else 'high',
              'Build immediately before hard freeze' if late else 'Build before November freeze',
              'Grow fresh greens through Durham winter',
              'Home Depot or cold frame kit supplier', 'Polycarbonate panels, hinges, automatic vent opener'),
        _item('winter-seeds', 'Winter Hardy Greens Seed Collection', 24.00, 'Winter Seeds', 'medium',
              'Plant in cold frame by early November', 'Fresh greens all winter in protected environment',
              'High Mowing Seeds or Southern Exposure', 'Winter-hardy kale, spinach, mache, winter lettuce'),
    ]


def _next_year_planning(month, context):
    if 2 < month < 11:
        return []
    return [
        _item('next-year-seed-order', 'Early Bird Seed Collection', 55.00, 'Next Year Planning', 'low',
              'Order by January for best selection and prices',
              'Secure popular varieties before they sell out',
              'True Leaf Market or Southern Exposure', 'Full year collection: spring, summer, fall varieties'),
        _item('garden-journal', 'Garden Planning Journal and Tracker', 16.99, 'Planning Tools', 'low',
              'Start tracking this winter', 'Record successes and failures for better next-year planning',
              'Amazon or bookstore', 'Planting tracker, harvest log, weather notes, variety records'),
    ]


def _heat_wave(month, context):
    if not 4 <= month <= 8:
        return []
    peak = month >= 6
    return [
        _item('emergency-cooling-kit', 'Garden Heat Emergency Kit', 45.00, 'Heat Wave Prep',
              'urgent' if peak else 'high',
              'Deploy immediately during heat waves' if peak else 'Prepare before summer heat',
              'Save crops during 95°F+ Durham heat waves',
              'Local garden center for immediate pickup', 'Shade cloth, soaker hoses, mulch, plant cooling spray'),
        _item('backup-water-system', 'Backup Watering System', 67.00, 'Heat Wave Prep', 'high',
              'Install before peak summer', 'Redundant watering when primary irrigation fails',
              'Home Depot or irrigation supplier', 'Portable sprinkler, 100ft hose, timer, backup fittings'),
    ]


def _bed_rotation(month, context):
    # No bed changes during the growing season
    if 3 <= month <= 8:
        return []
    return [
        _item('soil-amendment-rotation', 'Bed Rotation Soil Amendment Kit', 34.00, 'Soil Management', 'medium',
              'Apply during bed transitions', 'Different amendments for different crop families',
              'Local nursery or bulk supplier', 'Compost, bone meal, kelp meal for proper rotation'),
        _item('cover-crop-seeds', 'Cover Crop Seed Mix for Bed Rest', 18.00, 'Soil Improvement', 'low',
              'Plant in unused beds during off-season',
              'Improve soil structure and fertility between main crops',
              'Southern States or seed supplier', 'Crimson clover, winter rye mix for Durham Zone 7b'),
    ]


def _garden_review(month, context):
    return [
        _item('garden-evaluation-tools', 'Garden Assessment and Planning Tools', 24.99, 'Garden Analysis', 'low',
              'Use during any season for evaluation', 'Systematic review of garden performance and needs',
              'Amazon or garden supply', 'pH meter, moisture meter, planning templates, record sheets'),
    ]


SCENARIOS = {
    'spring-garden-layout': _spring_layout,
    'fall-garden-planning': _fall_planning,
    'winter-garden-planning': _winter_planning,
    'next-year-planning': _next_year_planning,
    'heat-wave-preparation': _heat_wave,
    'bed-rotation-planning': _bed_rotation,
    'garden-review': _garden_review,
}

DEFAULT_BED_SIZES = ['3×15', '4×8', '4×5']


def specific_recommendations(scenario, month=None, context=None):
    """Concrete shopping items for a planning scenario. Unknown scenario → []."""
    month = _month_or_current(month)
    builder = SCENARIOS.get(scenario)
    if builder is None:
        return []

    context = dict(context or {})
    context.setdefault('bedSizes', DEFAULT_BED_SIZES)
    context.setdefault('budget', 'moderate')
    return builder(month, context)


# Checked in order; the first pattern contained in the task wins
VAGUE_TASK_PATTERNS = [
    ('plan spring garden layout', 'spring-garden-layout'),
    ('design bed rotations', 'bed-rotation-planning'),
    ('plan succession plantings', 'spring-garden-layout'),
    ('plan fall garden', 'fall-garden-planning'),
    ('plan winter garden', 'winter-garden-planning'),
    ('plan next year', 'next-year-planning'),
    ('heat wave planning', 'heat-wave-preparation'),
    ('review garden status', 'garden-review'),
    ('prepare for season', None),
]


def scenario_for_task(task, month=None):
    """Scenario key for a free-text task, or None if nothing matches."""
    month = _month_or_current(month)
    task_lower = (task or '').lower()

    for pattern, scenario in VAGUE_TASK_PATTERNS:
        if pattern in task_lower:
            if scenario is not None:
                return scenario
            # 'prepare for season' depends on the month
            if month >= 9 or month <= 2:
                return 'winter-garden-planning'
            if 6 <= month <= 8:
                return 'heat-wave-preparation'
            return 'spring-garden-layout'
    return None


def convert_vague_task(task, month=None, context=None):
    """Specific recommendations for a vague planning task; [] when it can't be mapped."""
    scenario = scenario_for_task(task, month)
    if scenario is None:
        logger.info("No specific recommendations for task %r", task)
        return []
    return specific_recommendations(scenario, month, context)
