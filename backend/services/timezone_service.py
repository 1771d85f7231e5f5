import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from models.timezone import ConvertedTime, Timezone, TimezoneAbbreviation, TimezoneInfo
from services import paths
from services.country_service import build_models
from services.document_loader import DocumentLoader
from utils.errors import NotFoundError, TimezoneNotFoundError

logger = logging.getLogger(__name__)


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise TimezoneNotFoundError(f"Timezone {name} not found") from e


def format_gmt_offset(offset_seconds: int) -> str:
    """Format an offset in seconds as 'UTC+HH:MM'."""
    magnitude = abs(int(offset_seconds))
    hours, remainder = divmod(magnitude, 3600)
    sign = "+" if offset_seconds >= 0 else "-"
    return f"UTC{sign}{hours:02d}:{remainder // 60:02d}"


def is_daylight_saving(timezone_name: str, when: datetime | None = None) -> bool:
    zone = _zone(timezone_name)
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return bool(when.astimezone(zone).dst())


def convert_time(time: str | datetime, from_timezone: str, to_timezone: str) -> ConvertedTime:
    """Express one instant in two timezones.

    Naive input is read as wall-clock time in ``from_timezone``.
    """
    source, target = _zone(from_timezone), _zone(to_timezone)
    if isinstance(time, str):
        instant = datetime.fromisoformat(time.strip().replace("Z", "+00:00"))
    else:
        instant = time
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=source)

    from_time = instant.astimezone(source)
    to_time = instant.astimezone(target)
    difference = (to_time.utcoffset() - from_time.utcoffset()).total_seconds() / 3600
    return ConvertedTime(
        originalTime=from_time.isoformat(),
        fromTimezone=from_timezone,
        convertedTime=to_time.isoformat(),
        toTimezone=to_timezone,
        timeDifference=difference,
    )


class TimezoneService:
    def __init__(self, loader: DocumentLoader):
        self.loader = loader

    async def get_timezones(self) -> list[Timezone]:
        path = paths.timezones_list()
        try:
            document = await self.loader.load(path)
        except NotFoundError:
            return []
        return build_models(Timezone, document, path)

    async def get_timezones_by_country(self, country_code: str) -> list[Timezone]:
        path = paths.timezones_of(country_code.upper())
        try:
            document = await self.loader.load(path)
        except NotFoundError:
            logger.debug("No timezones for country %s", country_code)
            return []
        return build_models(Timezone, document, path)

    async def get_timezone_abbreviations(self) -> list[TimezoneAbbreviation]:
        path = paths.abbreviations_list()
        try:
            document = await self.loader.load(path)
        except NotFoundError:
            return []
        return build_models(TimezoneAbbreviation, document, path)

    async def get_timezones_by_abbreviation(self, abbreviation: str) -> list[Timezone]:
        wanted = abbreviation.lower()
        abbreviations = await self.get_timezone_abbreviations()
        match = next((a for a in abbreviations if a.abbreviation.lower() == wanted), None)
        if not match:
            return []
        zones = set(match.timezones)
        return [tz for tz in await self.get_timezones() if tz.zoneName in zones]

    async def _find(self, timezone_name: str) -> Timezone | None:
        timezones = await self.get_timezones()
        return next((tz for tz in timezones if tz.zoneName == timezone_name), None)

    async def get_timezone_info(self, timezone_name: str) -> TimezoneInfo | None:
        """Current time and DST state for a zone known to the dataset."""
        found = await self._find(timezone_name)
        if found is None:
            return None
        try:
            now = datetime.now(_zone(timezone_name))
        except TimezoneNotFoundError:
            # Zone listed in the dataset but absent from the local tz database
            logger.warning("No tz rules for %s, using its fixed offset", timezone_name)
            now = datetime.now(timezone(timedelta(seconds=found.gmtOffset)))
        return TimezoneInfo(
            timezone=found.zoneName,
            currentTime=now.isoformat(),
            utcOffset=found.gmtOffsetName,
            isDST=bool(now.dst()),
            gmtOffset=found.gmtOffset,
        )

    async def get_current_time(self, timezone_name: str) -> str:
        info = await self.get_timezone_info(timezone_name)
        if info is None:
            raise TimezoneNotFoundError(f"Timezone {timezone_name} not found")
        return info.currentTime

    async def get_gmt_offset(self, timezone_name: str) -> int:
        found = await self._find(timezone_name)
        if found is None:
            raise TimezoneNotFoundError(f"Timezone {timezone_name} not found")
        return found.gmtOffset

    async def is_valid_timezone(self, timezone_name: str) -> bool:
        return await self._find(timezone_name) is not None

    async def search_timezones(self, search_term: str) -> list[Timezone]:
        term = search_term.lower()
        return [
            tz for tz in await self.get_timezones()
            if term in tz.zoneName.lower()
            or term in tz.tzName.lower()
            or term in tz.abbreviation.lower()
        ]

    async def get_unique_abbreviations(self) -> list[str]:
        timezones = await self.get_timezones()
        return sorted({tz.abbreviation for tz in timezones if tz.abbreviation})

    async def get_timezones_by_offset(self, offset_seconds: int) -> list[Timezone]:
        return [tz for tz in await self.get_timezones() if tz.gmtOffset == offset_seconds]
