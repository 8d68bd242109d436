"""
tests/test_recommendations.py — Tests for the recommendation services.

Tests cover:
- Monthly focus and portfolio advice thresholds
- Weekly action cap
- Top crop seasonality and ordering
- Site and investment lists
- Scenario recommendations and vague task conversion
"""

import pytest

from recommendations import (
    MAX_TOP_CROPS,
    MAX_WEEKLY_ACTIONS,
    SCENARIOS,
    convert_vague_task,
    investment_priorities,
    monthly_focus,
    scenario_for_task,
    site_recommendations,
    specific_recommendations,
    top_crops,
    weekly_actions,
)

HEAT_HEAVY = {'heatSpecialists': 60, 'coolSeason': 20, 'perennials': 15, 'experimental': 5}


# ========================================
# Monthly focus
# ========================================

@pytest.mark.parametrize('month', range(1, 13))
def test_monthly_focus_has_three_tasks(month):
    focus = monthly_focus(month=month)
    assert focus['monthNumber'] == month
    assert len(focus['tasks']) == 3
    assert focus['title']
    assert focus['portfolioAdvice'] == []


def test_portfolio_advice_threshold():
    focus = monthly_focus({'heatSpecialists': 15, 'coolSeason': 14}, month=3)
    assert focus['portfolioAdvice'] == ['Start heat crops indoors']

    focus = monthly_focus(HEAT_HEAVY, month=6)
    assert 'Perfect time for heat-loving crops' in focus['portfolioAdvice']


# ========================================
# Weekly actions
# ========================================

def test_weekly_actions_capped():
    portfolio = {'heatSpecialists': 40, 'coolSeason': 40, 'perennials': 20}
    for month in range(1, 13):
        assert len(weekly_actions(portfolio, month)) <= MAX_WEEKLY_ACTIONS


def test_weekly_actions_seasonal_first():
    actions = weekly_actions(HEAT_HEAVY, 7)
    assert actions[0]['task'] == 'Deep water in early morning before heat'
    assert any('okra' in a['task'].lower() for a in actions)


def test_weekly_actions_ignore_small_categories():
    actions = weekly_actions({'heatSpecialists': 9}, 7)
    assert len(actions) == 1


# ========================================
# Top crops
# ========================================

def test_top_crops_in_season():
    crops = top_crops(month=1)
    assert len(crops) == MAX_TOP_CROPS
    names = {c['crop'] for c in crops}
    assert 'Okra' not in names


def test_top_crops_follow_portfolio():
    crops = top_crops({'heatSpecialists': 10, 'coolSeason': 10, 'perennials': 80}, month=6)
    assert [c['crop'] for c in crops] == ['Asparagus', 'Rosemary', 'Thyme']

    crops = top_crops(HEAT_HEAVY, month=6)
    assert crops[0]['cropKey'] == 'okra'
    assert len(crops[0]['varieties']) <= 2


# ========================================
# Site & investment
# ========================================

def test_site_recommendations_seasonal():
    summer = [r['category'] for r in site_recommendations(7)]
    winter = [r['category'] for r in site_recommendations(12)]
    assert 'Summer Watering' in summer
    assert 'Winter Growing' not in summer
    assert 'Winter Growing' in winter


def test_investment_priorities_irrigation_in_spring():
    assert investment_priorities(4)[0]['category'] == 'Irrigation System'
    assert 'Irrigation System' not in [p['category'] for p in investment_priorities(9)]


# ========================================
# Scenarios
# ========================================

def test_unknown_scenario_is_empty():
    assert specific_recommendations('moon-garden', 5) == []


@pytest.mark.parametrize('scenario', sorted(SCENARIOS))
def test_scenario_items_have_fields(scenario):
    for month in range(1, 13):
        for item in specific_recommendations(scenario, month):
            assert {'id', 'item', 'price', 'urgency', 'timing', 'why'} <= set(item)


def test_spring_layout_uses_bed_sizes():
    items = specific_recommendations('spring-garden-layout', 2, {'bedSizes': ['4×4']})
    layout = next(i for i in items if i['id'] == 'measuring-layout-kit')
    assert '4×4' in layout['specifications']

    items = specific_recommendations('spring-garden-layout', 2)
    layout = next(i for i in items if i['id'] == 'measuring-layout-kit')
    assert '3×15' in layout['specifications']


def test_fall_seeds_urgent_in_august():
    items = specific_recommendations('fall-garden-planning', 8)
    assert items[0]['urgency'] == 'urgent'
    assert specific_recommendations('fall-garden-planning', 3) == []


@pytest.mark.parametrize('task, month, expected', [
    ('Plan fall garden beds', 5, 'fall-garden-planning'),
    ('DESIGN BED ROTATIONS', 5, 'bed-rotation-planning'),
    ('Prepare for season', 10, 'winter-garden-planning'),
    ('prepare for season', 7, 'heat-wave-preparation'),
    ('prepare for season', 4, 'spring-garden-layout'),
    ('water the tomatoes', 4, None),
])
def test_scenario_for_task(task, month, expected):
    assert scenario_for_task(task, month) == expected


def test_convert_vague_task():
    assert convert_vague_task('water the tomatoes', 4) == []
    items = convert_vague_task('plan fall garden', 7)
    assert items == specific_recommendations('fall-garden-planning', 7)
