from pydantic import BaseModel, ConfigDict


class Timezone(BaseModel):
    model_config = ConfigDict(extra="ignore")

    zoneName: str
    countryCode: str
    abbreviation: str = ""
    gmtOffset: int = 0
    gmtOffsetName: str = ""
    tzName: str = ""


class TimezoneAbbreviation(BaseModel):
    abbreviation: str
    name: str = ""
    timezones: list[str] = []


class TimezoneInfo(BaseModel):
    timezone: str
    currentTime: str
    utcOffset: str
    isDST: bool
    gmtOffset: int


class ConvertedTime(BaseModel):
    originalTime: str
    fromTimezone: str
    convertedTime: str
    toTimezone: str
    timeDifference: float
