"""
garden_config.py — Static domain tables for the climate garden planner.

Holds the default location profile (Durham, NC, zone 7b), region presets,
hardiness zones, the crop catalogue used by the calendar and recommendation
services, and the portfolio allocation matrices.

Everything here is read-only reference data; nothing is persisted.
"""

# ========================================
# Location
# ========================================

DEFAULT_MICROCLIMATE = {
    'slope': 'flat',
    'aspect': 'south',
    'windExposure': 'moderate',
    'soilDrainage': 'moderate',
    'buildingHeat': 'minimal',
    'canopyShade': 'partial',
    'elevation': 'average',
    'waterAccess': 'municipal',
    'frostPocket': False,
    'reflectiveHeat': 'minimal',
}

DEFAULT_LOCATION_CONFIG = {
    'name': 'Durham, NC',
    'hardiness': '7b',
    'lat': 35.994,
    'lon': -78.8986,
    'avgRainfall': 46,
    'heatDays': 95,
    'heatIntensity': 3,
    'winterSeverity': 3,
    'gardenSize': 2,
    'investmentLevel': 3,
    'marketMultiplier': 1.0,
    'gardenSizeActual': 100,
    'budget': 400,
    'microclimate': DEFAULT_MICROCLIMATE,
}

REGION_PRESETS = {
    'durham-nc': {
        'name': 'Durham, NC', 'hardiness': '7b', 'lat': 35.994, 'lon': -78.8986,
        'avgRainfall': 46, 'heatDays': 95, 'marketMultiplier': 1.0,
    },
    'phoenix-az': {
        'name': 'Phoenix, AZ', 'hardiness': '9b', 'lat': 33.4484, 'lon': -112.0740,
        'avgRainfall': 8, 'heatDays': 145, 'marketMultiplier': 1.2,
    },
    'minneapolis-mn': {
        'name': 'Minneapolis, MN', 'hardiness': '4b', 'lat': 44.9778, 'lon': -93.2650,
        'avgRainfall': 32, 'heatDays': 15, 'marketMultiplier': 1.1,
    },
    'seattle-wa': {
        'name': 'Seattle, WA', 'hardiness': '9a', 'lat': 47.6062, 'lon': -122.3321,
        'avgRainfall': 38, 'heatDays': 5, 'marketMultiplier': 1.3,
    },
    'miami-fl': {
        'name': 'Miami, FL', 'hardiness': '10b', 'lat': 25.7617, 'lon': -80.1918,
        'avgRainfall': 62, 'heatDays': 200, 'marketMultiplier': 1.1,
    },
}

# Zone → (min °F, max °F)
HARDINESS_ZONES = {
    '3a': (-40, -35), '3b': (-35, -30),
    '4a': (-30, -25), '4b': (-25, -20),
    '5a': (-20, -15), '5b': (-15, -10),
    '6a': (-10, -5), '6b': (-5, 0),
    '7a': (0, 5), '7b': (5, 10),
    '8a': (10, 15), '8b': (15, 20),
    '9a': (20, 25), '9b': (25, 30),
    '10a': (30, 35), '10b': (35, 40),
    '11': (40, 50),
}

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]

# ========================================
# Crop catalogue
# ========================================
# plantingMonths is keyed by climate zone ('cold', 'temperate', 'subtropical').
# transplantWeeks > 0 means the crop is started indoors.

CROP_CATALOGUE = {
    'heatLovers': {
        'okra': {
            'name': 'Okra',
            'varieties': ['Clemson Spineless', 'Red Burgundy', 'Jambalaya'],
            'timing': 'Direct sow mid-May when soil reaches 65°F',
            'plantingMonths': {'cold': [6], 'temperate': [5, 6], 'subtropical': [3, 4, 5, 6, 7]},
            'transplantWeeks': 0,
            'shopping': {'seeds': '1 packet', 'cost': '$3-4'},
        },
        'hotPeppers': {
            'name': 'Hot Peppers',
            'varieties': ['Hungarian Hot Wax', 'Jalapeño', 'Thai Hot'],
            'timing': 'Start indoors in March, transplant early May',
            'plantingMonths': {'cold': [4], 'temperate': [3], 'subtropical': [1, 2, 8]},
            'transplantWeeks': 8,
            'shopping': {'seeds': '1 packet', 'cost': '$3-4'},
        },
        'sweetPotato': {
            'name': 'Sweet Potato',
            'varieties': ['Beauregard', 'Covington', 'Georgia Jet'],
            'timing': 'Plant slips mid-May',
            'plantingMonths': {'cold': [6], 'temperate': [5], 'subtropical': [3, 4, 5]},
            'transplantWeeks': 0,
            'shopping': {'slips': '10-15 slips', 'cost': '$15-20'},
        },
        'amaranth': {
            'name': 'Amaranth',
            'varieties': ['Red Garnet', 'Callaloo'],
            'timing': 'Direct sow after last frost',
            'plantingMonths': {'cold': [6], 'temperate': [4, 5, 6], 'subtropical': [3, 4, 5, 6, 7, 8]},
            'transplantWeeks': 0,
            'shopping': {'seeds': '1 packet', 'cost': '$3'},
        },
        'malabarSpinach': {
            'name': 'Malabar Spinach',
            'varieties': ['Red Stem', 'Green'],
            'timing': 'Transplant in May with trellis',
            'plantingMonths': {'cold': [5], 'temperate': [4], 'subtropical': [3, 4]},
            'transplantWeeks': 6,
            'shopping': {'seeds': '1 packet', 'cost': '$4'},
        },
        'cucumber': {
            'name': 'Cucumber',
            'varieties': ['Suyo Long', 'Marketmore 76'],
            'timing': 'Direct sow May through June',
            'plantingMonths': {'cold': [6], 'temperate': [5, 6], 'subtropical': [3, 4, 9]},
            'transplantWeeks': 0,
            'shopping': {'seeds': '1 packet', 'cost': '$3'},
        },
        'squash': {
            'name': 'Squash',
            'varieties': ['Tromboncino', 'Seminole'],
            'timing': 'Direct sow in May',
            'plantingMonths': {'cold': [6], 'temperate': [5], 'subtropical': [3, 9]},
            'transplantWeeks': 0,
            'shopping': {'seeds': '1 packet', 'cost': '$3'},
        },
    },
    'coolSeason': {
        'kale': {
            'name': 'Kale',
            'varieties': ['Red Russian', 'Lacinato', 'Winterbor'],
            'timing': 'Plant mid-February and August',
            'plantingMonths': {'cold': [4, 7], 'temperate': [2, 3, 8, 9], 'subtropical': [10, 11, 12]},
            'transplantWeeks': 0,
            'shopping': {'seeds': '1 packet', 'cost': '$3'},
        },
        'lettuce': {
            'name': 'Lettuce',
            'varieties': ['Jericho', 'Black Seeded Simpson', 'Salad Bowl'],
            'timing': 'Succession sow February-April and September-October',
            'plantingMonths': {'cold': [4, 5, 8], 'temperate': [2, 3, 4, 9, 10], 'subtropical': [10, 11, 12, 1]},
            'transplantWeeks': 0,
            'shopping': {'seeds': '2 packets', 'cost': '$3-4'},
        },
        'cabbage': {
            'name': 'Cabbage',
            'varieties': ['Early Jersey Wakefield', 'Copenhagen Market'],
            'timing': 'Start transplants February and August',
            'plantingMonths': {'cold': [3, 6], 'temperate': [2, 8], 'subtropical': [9, 10]},
            'transplantWeeks': 6,
            'shopping': {'seeds': '1 packet', 'cost': '$3'},
        },
    },
    'perennials': {
        'asparagus': {
            'name': 'Asparagus',
            'varieties': ['Jersey Knight', 'Purple Passion'],
            'timing': 'Plant crowns March-April',
            'plantingMonths': {'cold': [4, 5], 'temperate': [3, 4], 'subtropical': [1, 2]},
            'transplantWeeks': 0,
            'shopping': {'crowns': '1-year crowns', 'cost': '$20-25'},
        },
        'rosemary': {
            'name': 'Rosemary',
            'varieties': ['Arp', 'Tuscan Blue'],
            'timing': 'Plant transplants in spring',
            'plantingMonths': {'cold': [5], 'temperate': [4], 'subtropical': [3, 10]},
            'transplantWeeks': 10,
            'shopping': {'plants': '2 plants', 'cost': '$8-10'},
        },
        'thyme': {
            'name': 'Thyme',
            'varieties': ['English', 'Lemon'],
            'timing': 'Plant transplants in spring',
            'plantingMonths': {'cold': [5], 'temperate': [4], 'subtropical': [3, 10]},
            'transplantWeeks': 8,
            'shopping': {'plants': '2 plants', 'cost': '$6-8'},
        },
    },
}

# Portfolio category → catalogue group
PORTFOLIO_CROP_GROUPS = {
    'heatSpecialists': 'heatLovers',
    'coolSeason': 'coolSeason',
    'perennials': 'perennials',
}

# ========================================
# Portfolio strategies
# ========================================

PORTFOLIO_CATEGORIES = ('heatSpecialists', 'coolSeason', 'perennials', 'experimental')

DEFAULT_STRATEGIES = {
    'conservative': {
        'name': 'Conservative Portfolio', 'description': '60% success rate',
        'heatSpecialists': 40, 'coolSeason': 35, 'perennials': 15, 'experimental': 10,
    },
    'aggressive': {
        'name': 'Aggressive Portfolio', 'description': '80% upside, 40% downside',
        'heatSpecialists': 25, 'coolSeason': 50, 'perennials': 15, 'experimental': 10,
    },
    'hedge': {
        'name': 'Hedge Portfolio', 'description': '70% success rate',
        'heatSpecialists': 30, 'coolSeason': 40, 'perennials': 20, 'experimental': 10,
    },
}

CLIMATE_ALLOCATIONS = {
    'conservative': {
        'hot': {'heatSpecialists': 60, 'coolSeason': 20, 'perennials': 15, 'experimental': 5},
        'cold': {'heatSpecialists': 20, 'coolSeason': 35, 'perennials': 15, 'experimental': 5},
        'normal': {'heatSpecialists': 40, 'coolSeason': 35, 'perennials': 15, 'experimental': 10},
    },
    'aggressive': {
        'hot': {'heatSpecialists': 50, 'coolSeason': 30, 'perennials': 10, 'experimental': 10},
        'cold': {'heatSpecialists': 15, 'coolSeason': 50, 'perennials': 10, 'experimental': 15},
        'normal': {'heatSpecialists': 25, 'coolSeason': 50, 'perennials': 15, 'experimental': 10},
    },
    'hedge': {
        'hot': {'heatSpecialists': 45, 'coolSeason': 30, 'perennials': 20, 'experimental': 5},
        'cold': {'heatSpecialists': 25, 'coolSeason': 40, 'perennials': 20, 'experimental': 5},
        'normal': {'heatSpecialists': 30, 'coolSeason': 40, 'perennials': 20, 'experimental': 10},
    },
}

# Short-season (zone < 5) cool-season override, by strategy
SHORT_SEASON_COOL_ALLOCATION = {'conservative': 60, 'aggressive': 70, 'hedge': 50}

PORTFOLIO_NAMES = {
    'conservative': {'hot': 'Heat-Adapted Conservative', 'cold': 'Cold-Hardy Conservative',
                     'normal': 'Conservative Portfolio'},
    'aggressive': {'hot': 'Desert Specialist', 'cold': 'Season Extension',
                   'normal': 'Aggressive Portfolio'},
    'hedge': {'hot': 'Heat-Balanced', 'cold': 'Climate-Hedged', 'normal': 'Hedge Portfolio'},
}

PORTFOLIO_DESCRIPTORS = {
    'conservative': {'hot': '60% success rate - adapted to local conditions',
                     'cold': '60% success rate - adapted to local conditions',
                     'normal': '60% success rate - adapted to local conditions'},
    'aggressive': {'hot': 'High heat tolerance focus', 'cold': 'Maximum season length',
                   'normal': '80% upside, 40% downside'},
    'hedge': {'hot': '70% success rate - climate-balanced approach',
              'cold': '70% success rate - climate-balanced approach',
              'normal': '70% success rate - climate-balanced approach'},
}

# ========================================
# Yield simulation
# ========================================

SUMMER_SCENARIOS = ('mild', 'normal', 'extreme', 'catastrophic')
WINTER_SCENARIOS = ('traditional', 'mild', 'warm', 'none')
DEFAULT_SUMMER_SCENARIO = 'extreme'
DEFAULT_WINTER_SCENARIO = 'warm'

# $ per unit of yield
MARKET_PRICES = {'heat': 1.2, 'cool': 0.8, 'herbs': 2.5}

# Yield units per allocation percent, for a 100 sq ft garden
BASE_YIELD_MULTIPLIERS = {'heatSpecialists': 4, 'coolSeason': 3, 'perennials': 6}

PORTFOLIO_MULTIPLIERS = {'conservative': 0.85, 'aggressive': 1.15, 'hedge': 1.0}

CLIMATE_SEVERITY_MULTIPLIERS = {
    'summer': {'mild': 1.2, 'normal': 1.0, 'extreme': 0.7, 'catastrophic': 0.4},
    'winter': {'traditional': 0.9, 'mild': 1.0, 'warm': 1.1, 'none': 1.2},
}

# Poisson means at heatIntensity / winterSeverity 3
BASE_STRESS_DAYS = {'mild': 5, 'normal': 15, 'extreme': 35, 'catastrophic': 60}
BASE_FREEZE_EVENTS = {'traditional': 20, 'mild': 8, 'warm': 3, 'none': 0}

# Season setup costs for a 100 sq ft garden
BASE_COSTS = {
    'seeds': 80, 'soil': 45, 'fertilizer': 35, 'protection': 25,
    'infrastructure': 15, 'tools': 10, 'containers': 12, 'irrigation': 8,
}

CLIMATE_COST_FACTORS = {
    'mild': {'heat': 0.9, 'protection': 0.8, 'irrigation': 0.7},
    'normal': {'heat': 1.0, 'protection': 1.0, 'irrigation': 1.0},
    'extreme': {'heat': 1.4, 'protection': 1.6, 'irrigation': 1.8},
    'catastrophic': {'heat': 1.8, 'protection': 2.2, 'irrigation': 2.5},
}

PORTFOLIO_COST_FACTORS = {
    'heatSpecialists': {'protection': 1.3, 'irrigation': 1.4},
    'coolSeason': {'protection': 0.9, 'soil': 1.1},
    'perennials': {'infrastructure': 1.2, 'tools': 1.1},
}

# (category, importance, description), most important first
COST_PRIORITIES = [
    ('seeds', 'critical', 'Essential for any harvest'),
    ('soil', 'critical', 'Foundation of plant health'),
    ('protection', 'high', 'Weather and pest protection'),
    ('fertilizer', 'high', 'Sustained plant nutrition'),
    ('irrigation', 'medium', 'Water delivery systems'),
    ('infrastructure', 'medium', 'Support structures'),
    ('containers', 'low', 'Additional growing space'),
    ('tools', 'low', 'Garden maintenance equipment'),
]
