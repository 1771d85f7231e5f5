from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from models.country import City, Country, CountryMeta, State
from services.geodata import GeoData, get_geodata

router = APIRouter(prefix="/countries", tags=["countries"])

limiter = Limiter(key_func=get_remote_address)


@router.get("", response_model=list[Country])
async def list_countries(geo: GeoData = Depends(get_geodata)):
    return await geo.countries.get_countries()


@router.get("/{code}", response_model=CountryMeta)
async def get_country(code: str, geo: GeoData = Depends(get_geodata)):
    country = await geo.countries.get_country_by_code(code)
    if not country:
        raise HTTPException(status_code=404, detail="Country not found")
    return country


@router.get("/{code}/timezones", response_model=list[str])
async def get_country_timezones(code: str, geo: GeoData = Depends(get_geodata)):
    return await geo.countries.get_country_timezones(code)


@router.get("/{code}/states", response_model=list[State])
async def list_states(code: str, geo: GeoData = Depends(get_geodata)):
    return await geo.countries.get_states_of_country(code)


@router.get("/{code}/states/{state_code}", response_model=State)
async def get_state(code: str, state_code: str, geo: GeoData = Depends(get_geodata)):
    state = await geo.countries.get_state_by_code(code, state_code)
    if not state:
        raise HTTPException(status_code=404, detail="State not found")
    return state


@router.get("/{code}/states/{state_code}/cities", response_model=list[City])
async def list_cities(
    code: str,
    state_code: str,
    q: str = "",
    geo: GeoData = Depends(get_geodata),
):
    if q.strip():
        return await geo.countries.search_cities_by_name(code, state_code, q.strip())
    return await geo.countries.get_cities_of_state(code, state_code)


@router.get("/{code}/states/{state_code}/cities/{city_id}", response_model=City)
async def get_city(
    code: str, state_code: str, city_id: int, geo: GeoData = Depends(get_geodata)
):
    city = await geo.countries.get_city_by_id(code, state_code, city_id)
    if not city:
        raise HTTPException(status_code=404, detail="City not found")
    return city


# Loads one document per state
@router.get("/{code}/cities", response_model=list[City])
@limiter.limit("10/minute")
async def list_country_cities(
    request: Request, code: str, geo: GeoData = Depends(get_geodata)
):
    return await geo.countries.get_all_cities_of_country(code)
