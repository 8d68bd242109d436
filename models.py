"""
models.py — Python dataclasses for the climate garden planner.

- GardenRecord: a saved garden configuration blob plus its metadata
- LocationConfig: climate/site attributes with defaults merged under overrides
- CropStatusRegistry: growing / dying / notWanted crop sets
"""

import copy
import math
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Set

from garden_config import (
    DEFAULT_LOCATION_CONFIG,
    DEFAULT_MICROCLIMATE,
    HARDINESS_ZONES,
    REGION_PRESETS,
)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2026-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def normalize_crop_key(name: str) -> str:
    """
    Normalize a crop key or display name for status matching.

    Examples:
        "hotPeppers" -> "hotpeppers"
        "Hot Peppers" -> "hotpeppers"
        "Kale (Fall)" -> "kale"
        "Épinard" -> "epinard"
    """
    if not name:
        return ""

    # Drop parenthetical qualifiers: "Kale (Spring)" is still kale
    result = re.sub(r'\(.*?\)', '', name)

    result = unicodedata.normalize('NFD', result.lower())
    result = ''.join(c for c in result if unicodedata.category(c) != 'Mn')

    return re.sub(r'[^a-z0-9]+', '', result)


@dataclass
class GardenRecord:
    """A user's saved garden configuration."""
    garden_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    last_modified: Optional[str] = None
    last_accessed: Optional[str] = None

    @classmethod
    def from_stored(cls, garden_id: str, data: Dict[str, Any]) -> 'GardenRecord':
        """Split a stored JSON document into payload and metadata."""
        payload = {k: v for k, v in data.items()
                   if k not in ('lastModified', 'lastAccessed', 'gardenId')}
        return cls(
            garden_id=garden_id,
            payload=payload,
            last_modified=data.get('lastModified'),
            last_accessed=data.get('lastAccessed'),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flatten back to the persisted shape: {...payload, timestamps, gardenId}."""
        data = dict(self.payload)
        if self.last_modified is not None:
            data['lastModified'] = self.last_modified
        if self.last_accessed is not None:
            data['lastAccessed'] = self.last_accessed
        data['gardenId'] = self.garden_id
        return data

    def touch_modified(self):
        self.last_modified = utc_timestamp()

    def touch_accessed(self):
        self.last_accessed = utc_timestamp()


@dataclass
class LocationConfig:
    """
    Climate and site attributes for a garden location.

    `values` holds the merged JSON document (camelCase keys, as stored).
    """
    values: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_LOCATION_CONFIG))

    @classmethod
    def from_overrides(cls, overrides: Optional[Dict[str, Any]] = None) -> 'LocationConfig':
        """
        Merge stored overrides over the default location.

        A known `region` key (e.g. "phoenix-az") applies that preset first.
        Top-level keys replace defaults; the microclimate block is merged key
        by key so a partial override keeps the remaining default flags.
        """
        merged = copy.deepcopy(DEFAULT_LOCATION_CONFIG)
        if not isinstance(overrides, dict):
            return cls(values=merged)

        region = overrides.get('region')
        if isinstance(region, str) and region in REGION_PRESETS:
            merged.update(REGION_PRESETS[region])

        for key, value in overrides.items():
            if key == 'microclimate' and isinstance(value, dict):
                merged['microclimate'] = {**DEFAULT_MICROCLIMATE, **value}
            else:
                merged[key] = value
        return cls(values=merged)

    def get(self, key, default=None):
        return self.values.get(key, default)

    def number(self, key, default: float = 0.0) -> float:
        """Numeric attribute, or `default` when missing, non-numeric or not finite."""
        value = self.values.get(key)
        if isinstance(value, bool):
            return default
        try:
            value = float(value)
        except (TypeError, ValueError, OverflowError):
            return default
        return value if math.isfinite(value) else default

    @property
    def hardiness(self) -> str:
        return str(self.values.get('hardiness') or '')

    @property
    def heat_days(self) -> int:
        try:
            return int(self.values.get('heatDays') or 0)
        except (TypeError, ValueError, OverflowError):
            return 0

    @property
    def hardiness_zone_number(self) -> int:
        """Leading number of the hardiness zone ('10b' → 10); 7 when unparseable."""
        match = re.match(r'\d+', self.hardiness)
        return int(match.group()) if match else 7

    @property
    def winter_low_range(self):
        """(min °F, max °F) of the average annual extreme low; zone 7b when unknown."""
        zone = self.hardiness.strip().lower()
        return HARDINESS_ZONES.get(zone) or HARDINESS_ZONES.get(zone[:-1]) or HARDINESS_ZONES['7b']

    @property
    def climate_zone(self) -> str:
        """Coarse planting zone: cold (≤5), subtropical (≥9), otherwise temperate."""
        zone = self.hardiness_zone_number
        if zone <= 5:
            return 'cold'
        if zone >= 9:
            return 'subtropical'
        return 'temperate'

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.values)


# Activity types a dying crop may still produce
DYING_ACTIVITY_TYPES = frozenset({'harvest', 'cleanup', 'rotation'})


@dataclass
class CropStatusRegistry:
    """
    Garden status for tracked crops.

    The three sets are expected to be disjoint. When a crop appears in
    several, notWanted wins over dying, and dying over growing.
    """
    growing: Set[str] = field(default_factory=set)
    dying: Set[str] = field(default_factory=set)
    not_wanted: Set[str] = field(default_factory=set)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'CropStatusRegistry':
        """Build from the stored {growing: [...], dying: [...], notWanted: [...]} shape."""
        if not isinstance(data, dict):
            return cls()

        def _keys(name):
            values = data.get(name) or []
            if isinstance(values, str):
                values = [values]
            elif not isinstance(values, (list, tuple)):
                return set()
            return {normalize_crop_key(v) for v in values if isinstance(v, str) and v}

        return cls(
            growing=_keys('growing'),
            dying=_keys('dying'),
            not_wanted=_keys('notWanted'),
        )

    def status_of(self, crop: str) -> Optional[str]:
        key = normalize_crop_key(crop)
        if key in self.not_wanted:
            return 'notWanted'
        if key in self.dying:
            return 'dying'
        if key in self.growing:
            return 'growing'
        return None

    def should_show(self, crop: str, activity_type: str) -> bool:
        """Whether an activity of `activity_type` should be emitted for `crop`."""
        status = self.status_of(crop)
        if status == 'notWanted':
            return False
        if status == 'dying':
            return activity_type in DYING_ACTIVITY_TYPES
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'growing': sorted(self.growing),
            'dying': sorted(self.dying),
            'notWanted': sorted(self.not_wanted),
        }
