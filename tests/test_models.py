"""
tests/test_models.py — Tests for models, garden ids and validators.

Tests cover:
- Crop key normalization
- Garden record metadata handling
- Location config merging, region presets, climate zones and winter lows
- Crop status precedence
- Garden id generation and validation
- Month and simulation number parsing
"""

import pytest

from models import (
    CropStatusRegistry,
    GardenRecord,
    LocationConfig,
    normalize_crop_key,
    utc_timestamp,
)
from utils.garden_id import (
    create_shareable_url,
    generate_garden_id,
    is_acceptable_garden_id,
    is_valid_garden_id,
)
from utils.validators import (
    parse_month,
    parse_non_negative,
    validate_garden_id,
    validate_garden_payload,
)


# ========================================
# Normalization
# ========================================

@pytest.mark.parametrize('name, expected', [
    ('hotPeppers', 'hotpeppers'),
    ('Hot Peppers', 'hotpeppers'),
    ('Kale (Fall)', 'kale'),
    ('Épinard', 'epinard'),
    ('', ''),
    (None, ''),
])
def test_normalize_crop_key(name, expected):
    assert normalize_crop_key(name) == expected


def test_utc_timestamp_format():
    stamp = utc_timestamp()
    assert stamp.endswith('Z')
    assert len(stamp) == len('2026-05-01T12:00:00.000Z')


# ========================================
# Garden record
# ========================================

def test_garden_record_strips_metadata():
    record = GardenRecord.from_stored('garden-1234567890', {
        'beds': 3,
        'lastModified': 'then',
        'lastAccessed': 'earlier',
        'gardenId': 'someone-else',
    })
    assert record.payload == {'beds': 3}
    assert record.last_modified == 'then'

    data = record.to_dict()
    assert data['gardenId'] == 'garden-1234567890'
    assert data['lastAccessed'] == 'earlier'


def test_garden_record_touch():
    record = GardenRecord('garden-1234567890', {'beds': 3})
    assert 'lastModified' not in record.to_dict()
    record.touch_modified()
    assert record.to_dict()['lastModified'].endswith('Z')


# ========================================
# Location config
# ========================================

def test_location_defaults():
    location = LocationConfig()
    assert location.get('name') == 'Durham, NC'
    assert location.hardiness_zone_number == 7
    assert location.climate_zone == 'temperate'


def test_location_microclimate_merge():
    location = LocationConfig.from_overrides({
        'name': 'Back lot',
        'microclimate': {'frostPocket': True},
    })
    micro = location.get('microclimate')
    assert location.get('name') == 'Back lot'
    assert micro['frostPocket'] is True
    assert micro['aspect'] == 'south'


def test_location_overrides_do_not_leak():
    LocationConfig.from_overrides({'microclimate': {'aspect': 'north'}})
    assert LocationConfig().get('microclimate')['aspect'] == 'south'


@pytest.mark.parametrize('hardiness, number, zone', [
    ('4b', 4, 'cold'),
    ('5a', 5, 'cold'),
    ('6b', 6, 'temperate'),
    ('9a', 9, 'subtropical'),
    ('10b', 10, 'subtropical'),
    ('unknown', 7, 'temperate'),
])
def test_climate_zone(hardiness, number, zone):
    location = LocationConfig.from_overrides({'hardiness': hardiness})
    assert location.hardiness_zone_number == number
    assert location.climate_zone == zone


def test_non_dict_overrides_use_defaults():
    assert LocationConfig.from_overrides('Durham').to_dict() == LocationConfig().to_dict()


def test_region_preset_under_overrides():
    location = LocationConfig.from_overrides({'region': 'phoenix-az', 'budget': 250})
    assert location.get('name') == 'Phoenix, AZ'
    assert location.heat_days == 145
    assert location.get('budget') == 250

    location = LocationConfig.from_overrides({'region': 'seattle-wa', 'name': 'Allotment 4'})
    assert location.get('name') == 'Allotment 4'
    assert location.hardiness == '9a'

    assert LocationConfig.from_overrides({'region': 'atlantis'}).get('name') == 'Durham, NC'


@pytest.mark.parametrize('hardiness, expected', [
    ('7b', (5, 10)),
    ('10A', (30, 35)),
    ('11', (40, 50)),
    ('12c', (5, 10)),
    ('', (5, 10)),
])
def test_winter_low_range(hardiness, expected):
    assert LocationConfig.from_overrides({'hardiness': hardiness}).winter_low_range == expected


@pytest.mark.parametrize('value, expected', [
    (40, 40.0),
    ('12.5', 12.5),
    (float('inf'), 3.0),
    (True, 3.0),
    ([2], 3.0),
    (None, 3.0),
])
def test_location_number(value, expected):
    assert LocationConfig.from_overrides({'avgRainfall': value}).number('avgRainfall', 3.0) == expected


@pytest.mark.parametrize('value', [float('inf'), float('nan'), 'many', [95]])
def test_heat_days_unusable_values(value):
    assert LocationConfig.from_overrides({'heatDays': value}).heat_days == 0


# ========================================
# Crop status
# ========================================

def test_crop_status_filtering():
    registry = CropStatusRegistry.from_dict({
        'growing': ['okra'],
        'dying': ['squash'],
        'notWanted': 'kale',
    })
    assert registry.should_show('Okra', 'direct-sow')
    assert registry.should_show('Squash', 'cleanup')
    assert registry.should_show('Squash', 'harvest')
    assert not registry.should_show('Squash', 'direct-sow')
    assert not registry.should_show('Kale (Spring)', 'harvest')
    assert registry.should_show('Tomatillo', 'shopping')


def test_crop_status_precedence():
    registry = CropStatusRegistry.from_dict({
        'growing': ['kale', 'squash'],
        'dying': ['kale', 'squash'],
        'notWanted': ['kale'],
    })
    assert registry.status_of('kale') == 'notWanted'
    assert registry.status_of('squash') == 'dying'
    assert registry.status_of('okra') is None


def test_crop_status_from_garbage():
    assert CropStatusRegistry.from_dict(None).to_dict() == {'growing': [], 'dying': [], 'notWanted': []}
    assert CropStatusRegistry.from_dict({'dying': [None, 3, 'Okra']}).dying == {'okra'}
    registry = CropStatusRegistry.from_dict({'notWanted': 5, 'dying': {'kale': True}, 'growing': ('okra',)})
    assert registry.not_wanted == set()
    assert registry.dying == set()
    assert registry.growing == {'okra'}


# ========================================
# Garden ids & validators
# ========================================

def test_generated_ids_are_valid_and_unique():
    ids = {generate_garden_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(is_valid_garden_id(i) for i in ids)


@pytest.mark.parametrize('garden_id, strict, lenient', [
    ('123e4567-e89b-42d3-a456-426614174000', True, True),
    ('garden-1234567890', False, True),
    ('abcdefghij', False, True),
    ('abcdefghi', False, False),
    ('', False, False),
    (None, False, False),
    (1234567890123, False, False),
])
def test_id_checks(garden_id, strict, lenient):
    assert is_valid_garden_id(garden_id) is strict
    assert is_acceptable_garden_id(garden_id) is lenient
    assert (validate_garden_id(garden_id) is None) is lenient


def test_shareable_url():
    assert create_shareable_url('abc', 'https://example.org/') == 'https://example.org/garden/abc'
    assert create_shareable_url('abc') == '/garden/abc'


def test_validate_payload():
    assert validate_garden_payload({}) is None
    assert validate_garden_payload([]) == 'Invalid garden data'
    assert validate_garden_payload(None) == 'Invalid garden data'


def test_parse_month():
    assert parse_month('3') == 3
    assert parse_month(None, 5) == 5
    assert parse_month('') is None
    for bad in ('0', '13', 'March'):
        with pytest.raises(ValueError):
            parse_month(bad)


def test_parse_non_negative():
    assert parse_non_negative(None, 400) == 400
    assert parse_non_negative('', 400) == 400
    assert parse_non_negative('12.5') == 12.5
    assert parse_non_negative(0) == 0.0
    assert parse_non_negative(300.0, integer=True) == 300
    for bad in (-1, True, 'lots', float('inf'), float('nan'), [3]):
        with pytest.raises(ValueError):
            parse_non_negative(bad)
    with pytest.raises(ValueError):
        parse_non_negative(2.5, integer=True)
