from pydantic import BaseModel, ConfigDict


class CountryTimezone(BaseModel):
    zoneName: str
    gmtOffset: int = 0
    gmtOffsetName: str = ""
    abbreviation: str = ""
    tzName: str = ""


class Country(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    iso2: str
    iso3: str = ""
    numeric_code: str | None = None
    phonecode: str | None = None
    capital: str | None = None
    currency: str | None = None
    currency_name: str | None = None
    currency_symbol: str | None = None
    tld: str | None = None
    native: str | None = None
    region: str | None = None
    subregion: str | None = None
    nationality: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    emoji: str | None = None
    emojiU: str | None = None

    @property
    def code(self) -> str:
        return self.iso2


class CountryMeta(Country):
    timezones: list[CountryTimezone] = []
    translations: dict[str, str] = {}


class State(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    country_id: int | None = None
    country_code: str
    fips_code: str | None = None
    iso2: str
    type: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    native: str | None = None
    timezone: str | None = None
    translations: dict[str, str] = {}

    @property
    def code(self) -> str:
        return self.iso2


class City(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    state_id: int | None = None
    state_code: str
    country_id: int | None = None
    country_code: str
    latitude: str | None = None
    longitude: str | None = None
    native: str | None = None
    timezone: str | None = None
    translations: dict[str, str] = {}
