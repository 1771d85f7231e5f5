from fastapi import APIRouter, Depends, HTTPException

from models.timezone import Timezone, TimezoneAbbreviation, TimezoneInfo
from services.geodata import GeoData, get_geodata
from services.timezone_service import format_gmt_offset

router = APIRouter(prefix="/timezones", tags=["timezones"])


@router.get("", response_model=list[Timezone])
async def list_timezones(geo: GeoData = Depends(get_geodata)):
    return await geo.timezones.get_timezones()


@router.get("/search", response_model=list[Timezone])
async def search_timezones(q: str, geo: GeoData = Depends(get_geodata)):
    if not q.strip():
        raise HTTPException(status_code=400, detail="Query cannot be empty")
    return await geo.timezones.search_timezones(q.strip())


@router.get("/abbreviations", response_model=list[TimezoneAbbreviation])
async def list_abbreviations(geo: GeoData = Depends(get_geodata)):
    return await geo.timezones.get_timezone_abbreviations()


@router.get("/country/{code}", response_model=list[Timezone])
async def timezones_of_country(code: str, geo: GeoData = Depends(get_geodata)):
    return await geo.timezones.get_timezones_by_country(code)


@router.get("/abbreviation/{abbreviation}", response_model=list[Timezone])
async def timezones_by_abbreviation(abbreviation: str, geo: GeoData = Depends(get_geodata)):
    return await geo.timezones.get_timezones_by_abbreviation(abbreviation)


@router.get("/offset/{seconds}")
async def timezones_by_offset(seconds: int, geo: GeoData = Depends(get_geodata)):
    return {
        "offset": format_gmt_offset(seconds),
        "timezones": await geo.timezones.get_timezones_by_offset(seconds),
    }


@router.get("/info/{zone:path}", response_model=TimezoneInfo)
async def timezone_info(zone: str, geo: GeoData = Depends(get_geodata)):
    info = await geo.timezones.get_timezone_info(zone)
    if not info:
        raise HTTPException(status_code=404, detail="Timezone not found")
    return info
