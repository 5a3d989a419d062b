"""Wall-clock helpers in the hospital's local timezone.

The SIMRS stores DATE/TIME columns as naive local values, so "today" and
every timestamp written back to the database use the configured zone.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from wardrounds.config import Settings


def local_now(settings: Settings) -> datetime:
    """Return the current local time as a naive ``datetime``."""
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)


def local_today(settings: Settings) -> date:
    return local_now(settings).date()


def zone_label(settings: Settings, at: datetime) -> str:
    """Abbreviation of the local zone at ``at`` (``WIB`` for Asia/Jakarta)."""
    return ZoneInfo(settings.timezone).tzname(at) or settings.timezone
