"""
tests/test_garden_calendar.py — Tests for the twelve-month garden calendar.

Tests cover:
- Month ordering from the start month
- Activity cap and sort order
- Crop status filtering (notWanted, dying)
- Small portfolio categories skipped
- Month emphasis by climate zone
"""

import pytest

from garden_calendar import (
    MAX_ACTIVITIES_PER_MONTH,
    PRIORITY_ORDER,
    generate_garden_calendar,
    get_month_emphasis,
    month_activities,
)
from models import CropStatusRegistry, LocationConfig, normalize_crop_key

HEDGE = {'heatSpecialists': 30, 'coolSeason': 40, 'perennials': 20, 'experimental': 10}


def test_twelve_months_from_start():
    calendar = generate_garden_calendar(portfolio=HEDGE, start_month=11)
    assert len(calendar) == 12
    assert [entry['monthNumber'] for entry in calendar] == [11, 12, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
    assert calendar[0]['month'] == 'November'
    assert set(calendar[0]) == {'month', 'monthNumber', 'emphasis', 'activities'}


def test_activity_cap_and_sorting():
    calendar = generate_garden_calendar(portfolio=HEDGE, start_month=1)
    for entry in calendar:
        activities = entry['activities']
        assert len(activities) <= MAX_ACTIVITIES_PER_MONTH
        ranks = [PRIORITY_ORDER[a['priority']] for a in activities]
        assert ranks == sorted(ranks)

    # February is busy enough to hit the cap
    february = calendar[1]
    assert len(month_activities(2, HEDGE)) > MAX_ACTIVITIES_PER_MONTH
    assert len(february['activities']) == MAX_ACTIVITIES_PER_MONTH


def test_not_wanted_crop_never_appears():
    registry = CropStatusRegistry.from_dict({'notWanted': ['kale', 'lettuce']})
    calendar = generate_garden_calendar(portfolio=HEDGE, registry=registry, start_month=1)

    for entry in calendar:
        for activity in entry['activities']:
            assert normalize_crop_key(activity['crop']) not in ('kale', 'lettuce')


def test_dying_crop_keeps_cleanup_only():
    registry = CropStatusRegistry.from_dict({'dying': ['squash']})

    june = month_activities(6, HEDGE, registry=registry)
    squash_june = [a for a in june if a['crop'] == 'Squash']
    assert [a['type'] for a in squash_june] == ['cleanup']

    may = month_activities(5, HEDGE, registry=registry)
    assert not [a for a in may if a['crop'] == 'Squash']


def test_growing_crop_unfiltered():
    registry = CropStatusRegistry.from_dict({'growing': ['squash']})
    may = month_activities(5, HEDGE, registry=registry)
    assert any(a['crop'] == 'Squash' and a['type'] == 'direct-sow' for a in may)


def test_small_categories_skipped():
    portfolio = {'heatSpecialists': 4, 'coolSeason': 96, 'perennials': 0, 'experimental': 0}
    for month in range(1, 13):
        crops = {a['crop'] for a in month_activities(month, portfolio)}
        assert 'Okra' not in crops
        assert 'Asparagus' not in crops


def test_empty_portfolio_has_only_site_tasks():
    activities = month_activities(4, {})
    assert activities
    assert {a['type'] for a in activities} <= {'rotation', 'infrastructure', 'care', 'planning', 'harvest'}
    assert not any(a['crop'] in ('Kale', 'Okra', 'Lettuce') for a in activities)


def test_climate_zone_changes_planting_months():
    subtropical = LocationConfig.from_overrides({'hardiness': '10b'})
    january = month_activities(1, HEDGE, location=subtropical)
    assert any(a['crop'] == 'Lettuce' and a['type'] == 'direct-sow' for a in january)

    temperate = month_activities(1, HEDGE)
    assert not any(a['crop'] == 'Lettuce' and a['type'] == 'direct-sow' for a in temperate)


@pytest.mark.parametrize('hardiness, month, expected', [
    ('7b', 4, 'Active planting season'),
    ('4b', 4, 'Cold protection and indoor starts'),
    ('7b', 7, 'Peak growing season'),
    ('10b', 7, 'Heat management and succession planting'),
    ('7b', 10, 'Fall planting and harvest preservation'),
    ('7b', 1, 'Cool season crops'),
    ('4b', 12, 'Planning and indoor growing'),
])
def test_month_emphasis(hardiness, month, expected):
    location = LocationConfig.from_overrides({'hardiness': hardiness})
    assert get_month_emphasis(month, location) == expected
