import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from config import settings
from routers import health, countries, timezones
from services.geodata import close_geodata
from utils.errors import (
    GeoDataError,
    LoadTimeoutError,
    NotFoundError,
    TimezoneNotFoundError,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title="worldgeo", version="0.1.0")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(countries.router)
app.include_router(timezones.router)


@app.exception_handler(GeoDataError)
async def geodata_error_handler(request: Request, exc: GeoDataError):
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, LoadTimeoutError):
        status_code = 504
    else:
        status_code = 502
    logger.error("%s failed at %s stage: %s", request.url.path, exc.stage, exc)
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


@app.exception_handler(TimezoneNotFoundError)
async def timezone_not_found_handler(request: Request, exc: TimezoneNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.get("/")
async def root():
    return {
        "name": "worldgeo API",
        "version": "0.1.0",
        "endpoints": ["/health", "/countries", "/timezones"],
    }


@app.on_event("shutdown")
async def shutdown():
    await close_geodata()
