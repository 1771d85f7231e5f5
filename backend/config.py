import json
from pathlib import Path
from typing import Annotated, Literal

from pydantic_settings import BaseSettings, NoDecode
from pydantic import field_validator


class Settings(BaseSettings):
    data_dir: Path | None = None
    install_root: Path = Path("/opt/worldgeo/data")
    base_url: str = ""
    source: Literal["auto", "filesystem", "network"] = "auto"
    cache_enabled: bool = True
    request_timeout: float = 5.0
    request_headers: Annotated[dict[str, str], NoDecode] = {}
    max_concurrency: int = 8
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Accept JSON array or comma-separated string
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("request_headers", mode="before")
    @classmethod
    def parse_request_headers(cls, v):
        if isinstance(v, str):
            # Accept a JSON object or "Name: value; Other: value"
            v = v.strip()
            if not v:
                return {}
            if v.startswith("{"):
                return json.loads(v)
            headers = {}
            for pair in v.split(";"):
                name, sep, value = pair.partition(":")
                if sep and name.strip():
                    headers[name.strip()] = value.strip()
            return headers
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be positive")
        return v

    @field_validator("max_concurrency")
    @classmethod
    def positive_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v

    model_config = {
        "env_prefix": "WORLDGEO_",
        "env_file": str(Path(__file__).resolve().parent.parent / ".env"),
        "env_file_encoding": "utf-8",
    }


settings = Settings()
