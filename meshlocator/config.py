import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "MESH_LOCATOR_"

CLIENT_CACHE_TTL_SECONDS = 86400  # 1 day
GEO_CACHE_TTL_SECONDS = 86400 * 30  # 30 days


class Settings(BaseModel):
    """Immutable service configuration.

    Built once from the environment and handed to every component at
    construction time, so nothing reads feature flags from module globals.
    """

    model_config = ConfigDict(frozen=True)

    cache_dir: str = "./cache"
    client_cache_ttl_seconds: int = Field(default=CLIENT_CACHE_TTL_SECONDS, ge=0)
    geo_cache_ttl_seconds: int = Field(default=GEO_CACHE_TTL_SECONDS, ge=0)

    enable_rdns: bool = True
    enable_geocoding: bool = True
    geoapify_api_key: str = ""
    geoapify_base_url: str = "https://api.geoapify.com"

    mesh_network: str = "10.0.0.0/8"
    probe_timeout_seconds: float = Field(default=1.5, gt=0)
    geocoder_timeout_seconds: float = Field(default=3.0, gt=0)
    sysinfo_path: str = "/cgi-bin/sysinfo.json"

    cors_origins: tuple[str, ...] = ()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Accept a comma separated string as well as a sequence of origins."""
        if isinstance(value, str):
            return tuple(origin.strip() for origin in value.split(",") if origin.strip())
        return value

    @property
    def geocoding_available(self) -> bool:
        return self.enable_geocoding and bool(self.geoapify_api_key)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from MESH_LOCATOR_* environment variables.

        Unset variables fall back to the field defaults; pydantic takes care of
        coercing the raw strings ("false", "1.5", ...) into the field types.
        """
        env = os.environ if environ is None else environ
        mapping = {
            "CACHE_DIR": "cache_dir",
            "CLIENT_CACHE_TTL": "client_cache_ttl_seconds",
            "GEO_CACHE_TTL": "geo_cache_ttl_seconds",
            "ENABLE_RDNS": "enable_rdns",
            "ENABLE_GEOCODING": "enable_geocoding",
            "GEOAPIFY_API_KEY": "geoapify_api_key",
            "GEOAPIFY_BASE_URL": "geoapify_base_url",
            "MESH_NETWORK": "mesh_network",
            "PROBE_TIMEOUT": "probe_timeout_seconds",
            "GEOCODER_TIMEOUT": "geocoder_timeout_seconds",
            "SYSINFO_PATH": "sysinfo_path",
            "CORS_ORIGINS": "cors_origins",
        }
        values = {field: env[ENV_PREFIX + name] for name, field in mapping.items() if ENV_PREFIX + name in env}
        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    """Dependency returning the process-wide settings."""
    return Settings.from_env()
