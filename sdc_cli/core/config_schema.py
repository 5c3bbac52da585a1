"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    ConcurrencySchema  → concurrency.yaml
    DatacentersSchema  → datacenters.yaml
    ProfilesSchema     → profiles.yaml
    LoggingSchema      → logging.yaml
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class TimeoutsSchema(_StrictBase):
    request: float = Field(gt=0)


class RetriesSchema(_StrictBase):
    attempts: int = Field(ge=1)
    wait_min: float = Field(ge=0)
    wait_max: float = Field(ge=0)


class FanoutSchema(_StrictBase):
    timeout: float | None = Field(default=None, gt=0)


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    api_version: str
    timeouts: TimeoutsSchema
    retries: RetriesSchema
    fanout: FanoutSchema


# =============================================================================
# concurrency.yaml
# =============================================================================


class ThreadPoolSchema(_StrictBase):
    max_workers: int | None = Field(default=None, ge=1)


class ConcurrencySchema(_StrictBase):
    thread_pool: ThreadPoolSchema


# =============================================================================
# datacenters.yaml
# =============================================================================


class DatacentersSchema(_StrictBase):
    datacenters: dict[str, str]

    @field_validator("datacenters")
    @classmethod
    def _urls_are_http(cls, value: dict[str, str]) -> dict[str, str]:
        for name, url in value.items():
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"datacenter {name!r} has a non-HTTP url: {url!r}")
        return value


# =============================================================================
# profiles.yaml
# =============================================================================


class ProfileSchema(_StrictBase):
    name: str
    user: str
    key_id: str
    dcs: list[str] | None = Field(default=None, min_length=1)


class ProfilesSchema(_StrictBase):
    default: str
    profiles: list[ProfileSchema]

    @model_validator(mode="after")
    def _default_is_declared(self) -> "ProfilesSchema":
        names = [p.name for p in self.profiles]
        if len(names) != len(set(names)):
            raise ValueError("profile names must be unique")
        if self.default not in names:
            raise ValueError(f"default profile {self.default!r} is not declared")
        return self


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
