import time
from fastapi import APIRouter, Depends

from services.geodata import GeoData, get_geodata

router = APIRouter()

_start_time = time.time()


@router.get("/health")
async def health_check(geo: GeoData = Depends(get_geodata)):
    return {
        "status": "ok",
        "uptime_seconds": round(time.time() - _start_time),
        "version": "0.1.0",
        "environment": geo.environment.describe(),
        "cache_entries": len(geo.cache),
    }


@router.post("/cache/clear")
async def clear_cache(geo: GeoData = Depends(get_geodata)):
    geo.clear_cache()
    return {"status": "cleared"}
