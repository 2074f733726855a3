"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    DatabaseSchema     → database.yaml
    LoggingSchema      → logging.yaml
    SecuritySchema     → security.yaml
    EventsSchema       → events.yaml
    ClientSchema       → client.yaml
"""

from pydantic import BaseModel, ConfigDict


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class TimeoutsSchema(_StrictBase):
    database: int
    external_api: int


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    docs_enabled: bool
    server: ServerSchema
    cors: CorsSchema
    timeouts: TimeoutsSchema


# =============================================================================
# database.yaml
# =============================================================================


class DatabaseSchema(_StrictBase):
    url: str
    echo: bool
    create_tables_on_startup: bool


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


# =============================================================================
# security.yaml
# =============================================================================


class JwtSchema(_StrictBase):
    algorithm: str
    access_token_expire_minutes: int
    audience: str


class SecretsValidationSchema(_StrictBase):
    jwt_secret_min_length: int


class SecuritySchema(_StrictBase):
    jwt: JwtSchema
    secrets_validation: SecretsValidationSchema


# =============================================================================
# events.yaml
# =============================================================================


class ChangeFeedSchema(_StrictBase):
    queue_size: int
    heartbeat_seconds: float


class EventsSchema(_StrictBase):
    publish_enabled: bool
    feed: ChangeFeedSchema


# =============================================================================
# client.yaml
# =============================================================================


class ClientServerSchema(_StrictBase):
    base_url: str
    timeout_seconds: float


class LayoutSchema(_StrictBase):
    small_width: int
    tui_small_width: int


class NoteDefaultsSchema(_StrictBase):
    default_title: str
    seed_body_with_id: bool


class ClientSchema(_StrictBase):
    server: ClientServerSchema
    layout: LayoutSchema
    notes: NoteDefaultsSchema
    root_redirect_to_first_note: bool
