from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orgpilot.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_COOKIE_DOMAIN,
    DEFAULT_FETCH_TIMEOUT_S,
    DEFAULT_REQUEST_TIMEOUT_S,
    VIEW_MODE_POLL_INTERVAL_S,
)
from orgpilot.paths import COOKIE_JAR_PATH, LOCAL_STORAGE_PATH


class ApiConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = Field(default=DEFAULT_REQUEST_TIMEOUT_S, gt=0)
    # None disables the per-node fetch timeout
    fetch_timeout_s: Optional[Annotated[float, Field(gt=0)]] = DEFAULT_FETCH_TIMEOUT_S

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got: {v}")
        return v.rstrip("/")


class StorageConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    cookie_path: str = str(COOKIE_JAR_PATH)
    legacy_path: str = str(LOCAL_STORAGE_PATH)
    cookie_domain: str = DEFAULT_COOKIE_DOMAIN
    legacy_enabled: bool = True
    # False keeps both channels in memory for the lifetime of the process
    persist: bool = True


class ViewModeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    poll_interval_s: float = Field(default=VIEW_MODE_POLL_INTERVAL_S, gt=0)


class OrgPilotConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    api: ApiConfig = Field(default_factory=ApiConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    view_mode: ViewModeConfig = Field(default_factory=ViewModeConfig)
