"""
garden_calendar.py — Twelve-month planting and care calendar.

For each month, starting from `start_month`, activities are collected from:
1. Crop schedules: fixed sow / transplant / care / harvest dates per crop
2. Generic planting: crops whose planting window (by climate zone) includes the month
3. Shopping reminders for seeds, slips and crowns
4. Succession planting reminders
5. Bed rotation tasks at seasonal transitions
6. Seasonal site tasks (soil, irrigation, shade, cold protection)

Only portfolio categories at >= 5% contribute crop activities. Activities are
sorted by priority then type, filtered by the garden's crop status registry
and capped at MAX_ACTIVITIES_PER_MONTH.
"""

from datetime import date

from garden_config import CROP_CATALOGUE, MONTH_NAMES, PORTFOLIO_CROP_GROUPS
from models import CropStatusRegistry, LocationConfig

MIN_CATEGORY_ALLOCATION = 5
MAX_ACTIVITIES_PER_MONTH = 8

PRIORITY_ORDER = {'high': 1, 'medium': 2, 'low': 3}
TYPE_ORDER = {
    'start-transplants': 1,
    'transplant': 2,
    'direct-sow': 3,
    'harvest': 4,
    'succession': 5,
    'care': 6,
    'infrastructure': 7,
    'planning': 8,
}

# Crops with hand-written schedules that skip generic planting reminders
GENERIC_PLANTING_EXCLUDED = {'okra', 'hotPeppers', 'kale', 'sweetPotato', 'cabbage'}


def _activity(activity_type, crop, action, timing, priority='medium'):
    return {'type': activity_type, 'crop': crop, 'action': action, 'timing': timing, 'priority': priority}


# ========================================
# Static schedules: crop key → [(months, activity)]
# ========================================

CROP_SCHEDULES = {
    'okra': [
        ((5,), _activity('direct-sow', 'Okra', 'Direct sow okra seeds in warm soil (65°F+)',
                         'After last frost, soil is warm')),
        ((8,), _activity('harvest', 'Okra', 'Daily okra harvest - cut pods when 3-4 inches long',
                         'Peak production season', 'high')),
    ],
    'hotPeppers': [
        ((7,), _activity('care', 'Hot Peppers', 'Support heavy pepper plants, consistent watering in heat',
                         'Durham summer care')),
        ((7, 8, 9, 10), _activity('harvest', 'Hot Peppers', 'Harvest peppers regularly to encourage production',
                                  'Peak harvest season', 'high')),
    ],
    'kale': [
        ((8,), _activity('direct-sow', 'Kale', 'Direct sow kale for fall harvest',
                         '12-14 weeks before first frost')),
        ((2,), _activity('direct-sow', 'Kale', 'Direct sow kale for spring harvest',
                         '4-6 weeks before last frost')),
        ((10,), _activity('harvest', 'Kale', 'Harvest outer kale leaves, leave center growing',
                          'Sweet after light frost')),
    ],
    'sweetPotato': [
        ((7,), _activity('care', 'Sweet Potato', 'Mulch sweet potato beds, train vines away from paths',
                         'Summer growth management')),
        ((9,), _activity('harvest', 'Sweet Potato', 'Harvest sweet potatoes before first frost',
                         'Before soil gets too cold', 'high')),
    ],
    'cucumber': [
        ((6, 7, 8, 9), _activity('harvest', 'Cucumber', 'Daily cucumber harvest to maintain production',
                                 'Continuous harvest period', 'high')),
        ((7,), _activity('care', 'Cucumber', 'Support vines, deep watering in Durham heat',
                         'Summer vine management')),
    ],
    'squash': [
        ((6,), _activity('cleanup', 'Squash', 'Remove dying squash plants, clear beds for succession planting',
                         'Replace failed summer crops', 'high')),
    ],
    'amaranth': [
        ((4,), _activity('direct-sow', 'Amaranth', 'Direct sow amaranth greens every 3 weeks',
                         'After last frost through summer')),
        ((6,), _activity('succession', 'Amaranth', 'Second succession planting of amaranth',
                         'For continuous greens harvest')),
    ],
    'malabarSpinach': [
        ((5,), _activity('transplant', 'Malabar Spinach', 'Transplant Malabar spinach with trellis support',
                         'After soil is consistently warm')),
        ((7,), _activity('harvest', 'Malabar Spinach', 'Harvest young Malabar spinach leaves',
                         'Cut-and-come-again harvest')),
    ],
    'cabbage': [
        ((8,), _activity('start-transplants', 'Cabbage', 'Start cabbage transplants for fall crop',
                         '12-14 weeks before first frost', 'high')),
        ((2,), _activity('start-transplants', 'Cabbage', 'Start cabbage transplants for spring crop',
                         '6-8 weeks before last frost', 'high')),
    ],
}

# crop key → [(month, crop label, what to buy, timing, priority)]
SHOPPING_SCHEDULES = {
    'hotPeppers': [(2, 'Hot Peppers', 'pepper seeds', 'Start indoors in March', 'medium')],
    'sweetPotato': [(4, 'Sweet Potato', 'sweet potato slips', 'Plant in mid-May', 'medium')],
    'kale': [
        (2, 'Kale (Spring)', 'kale seeds', 'Plant mid-February to March', 'medium'),
        (7, 'Kale (Fall)', 'kale seeds', 'Plant August for fall harvest', 'medium'),
    ],
    'lettuce': [
        (1, 'Lettuce', 'lettuce seeds', 'Start succession planting in February', 'low'),
        (8, 'Lettuce (Fall)', 'lettuce seeds', 'Fall succession planting', 'low'),
    ],
    'asparagus': [(2, 'Asparagus', 'asparagus crowns', 'Plant in March-April', 'low')],
}

SUCCESSION_SCHEDULES = {
    'lettuce': ((2, 3, 4, 9, 10), '2 weeks', 'For continuous fresh harvest'),
    'kale': ((2, 3, 8, 9), '3 weeks', 'Stagger for steady supply'),
    'hotPeppers': ((3, 4), '4 weeks', 'Multiple harvests throughout season'),
}

ROTATION_ACTIVITIES = [
    ((3, 4), _activity('rotation', 'Winter Crops', 'Remove spent winter greens, prepare beds for summer crops',
                       'Before soil warms for summer planting')),
    ((3, 4), _activity('rotation', 'Soil Health', 'Add compost to beds, check soil drainage',
                       'Durham clay needs amendment before summer')),
    ((7, 8), _activity('rotation', 'Spring Crops', 'Clear bolted spring crops, plant fall succession',
                       'Make space for fall plantings')),
    ((7, 8), _activity('rotation', 'Bed Preparation', 'Mulch heavily for fall crops, plan winter garden',
                       'Prepare for fall/winter rotation', 'low')),
    ((10, 11), _activity('rotation', 'Summer Crops', 'Harvest and clear spent summer crops',
                         'Before first frost preparation', 'high')),
    ((10, 11), _activity('rotation', 'Winter Garden', 'Protect overwintering crops, plan spring rotation',
                         'Set up winter garden system', 'low')),
    ((12,), _activity('rotation', 'Rotation Planning',
                      'Plan next year crop rotation: avoid same families in same beds',
                      'Durham crop families: nightshades, brassicas, legumes', 'low')),
]

SEASONAL_ACTIVITIES = {
    1: [_activity('planning', 'Garden Planning', 'Order heat-tolerant seeds for Durham summer',
                  'Best selection available early')],
    2: [_activity('infrastructure', 'Soil Preparation', 'Spread compost on beds, avoid working wet clay soil',
                  'Durham clay needs dry conditions', 'high'),
        _activity('care', 'Overwintered Kale', 'Harvest sweet kale leaves after cold snaps',
                  'Cold makes kale sweeter')],
    3: [_activity('infrastructure', 'Bed Preparation', 'Work beds when clay soil crumbles, not sticky',
                  'Wait for proper moisture level', 'high'),
        _activity('care', 'Perennial Herbs', 'Cut back rosemary, thyme; mulch around plants',
                  'After last hard freeze risk')],
    4: [_activity('infrastructure', 'Irrigation Setup', 'Install drip irrigation, Durham summers are brutal',
                  'Before heat stress begins', 'high'),
        _activity('care', 'Spring Transplants', 'Harden off pepper, tomato transplants gradually',
                  '7-10 days before transplanting', 'high')],
    5: [_activity('infrastructure', 'Summer Heat Prep', 'Install 30% shade cloth over sensitive crops',
                  'Before 90°F+ days arrive', 'high'),
        _activity('care', 'Newly Transplanted Plants', 'Deep water morning, mulch 3-4 inches thick',
                  'Establish before heat stress', 'high')],
    6: [_activity('care', 'Heat-Sensitive Crops', 'Mist kale, lettuce in afternoon heat (85°F+)',
                  'Cool-season crops struggle now', 'high'),
        _activity('harvest', 'Cool-Season Crops', 'Harvest remaining spring crops before they bolt',
                  'Before summer heat ruins quality', 'high')],
    7: [_activity('care', 'Heat-Tolerant Crops', 'Water okra, peppers deeply every 2-3 days',
                  'During 95°F+ Durham heat waves', 'high'),
        _activity('harvest', 'Heat Crops', 'Harvest okra daily, peppers twice weekly',
                  'Early morning before heat', 'high')],
    8: [_activity('infrastructure', 'Fall Prep', 'Plan and prepare fall garden beds', 'Late summer transition'),
        _activity('care', 'Cool-Season Prep', 'Start cool-season transplants indoors',
                  'Prepare for fall planting', 'high')],
    10: [_activity('care', 'Garden Maintenance', 'Harvest and preserve, clean up spent plants',
                   'Fall harvest season', 'high')],
    11: [_activity('infrastructure', 'Winter Prep', 'Install cold frames, protect tender plants',
                   'Winter preparation'),
         _activity('care', 'Perennial Herbs', 'Cut back and mulch around perennials', 'Winter protection')],
    12: [_activity('planning', 'Garden Planning', "Review this year, plan next year's garden",
                   'Year-end reflection', 'low')],
}


# ========================================
# Activity builders
# ========================================

def _active_groups(portfolio):
    """Catalogue groups for portfolio categories at >= 5%."""
    groups = []
    for category, percentage in (portfolio or {}).items():
        group = PORTFOLIO_CROP_GROUPS.get(category)
        if group and percentage >= MIN_CATEGORY_ALLOCATION:
            groups.append(group)
    return groups


def crop_activities(month, groups, climate_zone):
    """Scheduled and generic planting activities for crops in the active groups."""
    activities = []
    for group in groups:
        for crop_key, crop in CROP_CATALOGUE[group].items():
            for months, activity in CROP_SCHEDULES.get(crop_key, []):
                if month in months:
                    activities.append(dict(activity))

            if crop_key in GENERIC_PLANTING_EXCLUDED:
                continue
            planting_months = crop['plantingMonths'].get(climate_zone) or crop['plantingMonths']['temperate']
            if month not in planting_months:
                continue

            name = crop['name']
            if crop.get('transplantWeeks', 0) > 0:
                activities.append(_activity(
                    'start-transplants', name, f'Start {name} transplants indoors',
                    f"{crop['transplantWeeks']} weeks before transplanting"))
            else:
                activities.append(_activity(
                    'direct-sow', name, f'Direct sow {name}', 'Check soil temperature requirements'))
    return activities


def shopping_activities(month, groups, registry):
    activities = []
    for group in groups:
        for crop_key, crop in CROP_CATALOGUE[group].items():
            if not registry.should_show(crop_key, 'shopping'):
                continue
            shopping = crop.get('shopping', {})
            cost = shopping.get('cost', '$3-4')
            quantity = shopping.get('seeds') or shopping.get('slips') or shopping.get('crowns') or shopping.get('plants') or 'seeds'
            for when, label, what, timing, priority in SHOPPING_SCHEDULES.get(crop_key, []):
                if when == month:
                    activities.append(_activity(
                        'shopping', label, f'Buy {what} ({quantity}) - {cost}', timing, priority))
    return activities


def succession_activities(month, groups):
    activities = []
    for group in groups:
        if group not in ('heatLovers', 'coolSeason'):
            continue
        for crop_key, crop in CROP_CATALOGUE[group].items():
            schedule = SUCCESSION_SCHEDULES.get(crop_key)
            if schedule and month in schedule[0]:
                _, interval, note = schedule
                activities.append(_activity(
                    'succession', crop['name'], f"Succession plant {crop['name']} (every {interval})", note))
    return activities


def rotation_activities(month):
    return [dict(activity) for months, activity in ROTATION_ACTIVITIES if month in months]


def seasonal_activities(month):
    return [dict(activity) for activity in SEASONAL_ACTIVITIES.get(month, [])]


def sort_activities(activities):
    """Priority first (high → low), then activity type. Unknown values sort last."""
    return sorted(activities, key=lambda a: (
        PRIORITY_ORDER.get(a.get('priority'), 99),
        TYPE_ORDER.get(a.get('type'), 99),
    ))


# ========================================
# Calendar
# ========================================

def get_month_emphasis(month, location=None):
    """One-line theme for a month, adjusted for cold and subtropical zones."""
    climate_zone = (location or LocationConfig()).climate_zone

    if 3 <= month <= 5:
        return 'Cold protection and indoor starts' if climate_zone == 'cold' else 'Active planting season'
    if 6 <= month <= 8:
        return ('Heat management and succession planting' if climate_zone == 'subtropical'
                else 'Peak growing season')
    if 9 <= month <= 11:
        return 'Fall planting and harvest preservation'
    return 'Planning and indoor growing' if climate_zone == 'cold' else 'Cool season crops'


def month_activities(month, portfolio, location=None, registry=None):
    """Sorted, status-filtered activities for a single month (not yet truncated)."""
    location = location or LocationConfig()
    registry = registry or CropStatusRegistry()
    groups = _active_groups(portfolio)

    activities = []
    activities.extend(crop_activities(month, groups, location.climate_zone))
    activities.extend(shopping_activities(month, groups, registry))
    activities.extend(succession_activities(month, groups))
    activities.extend(rotation_activities(month))
    activities.extend(seasonal_activities(month))

    return [a for a in sort_activities(activities) if registry.should_show(a['crop'], a['type'])]


def generate_garden_calendar(location=None, portfolio=None, registry=None, start_month=None):
    """
    Generate the next twelve months of garden activities.

    Args:
        location: LocationConfig (defaults to Durham, NC)
        portfolio: {category: percentage} allocation; None or empty gives
            only rotation and seasonal tasks
        registry: CropStatusRegistry used to drop unwanted activities
        start_month: First month (1-12); defaults to the current month

    Returns:
        List of 12 dicts: {'month', 'monthNumber', 'emphasis', 'activities'}
    """
    location = location or LocationConfig()
    registry = registry or CropStatusRegistry()
    start_month = start_month or date.today().month

    calendar = []
    for offset in range(12):
        month = (start_month - 1 + offset) % 12 + 1
        activities = month_activities(month, portfolio, location, registry)
        calendar.append({
            'month': MONTH_NAMES[month - 1],
            'monthNumber': month,
            'emphasis': get_month_emphasis(month, location),
            'activities': activities[:MAX_ACTIVITIES_PER_MONTH],
        })
    return calendar
