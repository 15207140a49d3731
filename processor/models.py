"""Data models for event processing."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


RAW_EVENT_FIELDS = (
    'date_display',
    'month',
    'weekday',
    'title',
    'url',
    'event_id',
    'location',
    'start_date',
    'end_date',
    'description',
    'organizer',
)


@dataclass
class RawEvent:
    """Raw event record as published in the release asset."""
    date_display: str = ''
    month: str = ''
    weekday: str = ''
    title: str = ''
    url: str = ''
    event_id: str = ''
    location: str = ''
    start_date: str = ''
    end_date: str = ''
    description: str = ''
    organizer: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawEvent':
        """
        Build a RawEvent from a decoded JSON object.

        Missing or null fields become empty strings; other scalars are
        converted with str().
        """
        values = {}
        for name in RAW_EVENT_FIELDS:
            value = data.get(name)
            values[name] = '' if value is None else str(value)
        return cls(**values)


@dataclass(frozen=True)
class Event:
    """Normalized event served by the API."""
    id: str
    title: str
    date_display: str
    start_date: str
    end_date: str
    location: str
    organizer: str
    description: str
    url: str
    is_upcoming: bool

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used on the wire."""
        return {
            'id': self.id,
            'title': self.title,
            'dateDisplay': self.date_display,
            'startDate': self.start_date,
            'endDate': self.end_date,
            'location': self.location,
            'organizer': self.organizer,
            'description': self.description,
            'url': self.url,
            'isUpcoming': self.is_upcoming
        }


@dataclass(frozen=True)
class CacheSnapshot:
    """Events plus the time they were loaded. Replaced, never mutated."""
    events: Tuple[Event, ...] = ()
    last_refresh: Optional[datetime] = None


@dataclass
class ReleaseAsset:
    """Downloadable file attached to a release."""
    id: int
    name: str
    browser_download_url: str
    size: int = 0
    content_type: str = ''


@dataclass
class Release:
    """Latest release as returned by the releases API."""
    id: int
    name: str
    tag_name: str
    assets: List[ReleaseAsset] = field(default_factory=list)
    published_at: str = ''

    def find_asset(self, asset_name: str) -> Optional[ReleaseAsset]:
        """Return the asset whose name matches exactly, if any."""
        for asset in self.assets:
            if asset.name == asset_name:
                return asset
        return None


@dataclass
class RefreshResult:
    """Result of a cache refresh cycle."""
    success: bool
    total_events: int = 0
    upcoming_events: int = 0
    error_type: Optional[str] = None
    error_message: Optional[str] = None
