"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    StoreSchema        → store.yaml
    AISchema           → ai.yaml
    NotesSchema        → notes.yaml
    LoggingSchema      → logging.yaml
"""

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class TimeoutsSchema(_StrictBase):
    store: float
    ai: float


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    timeouts: TimeoutsSchema


# =============================================================================
# store.yaml
# =============================================================================


class StoreRetrySchema(_StrictBase):
    max_attempts: int
    backoff_multiplier: float
    backoff_max: float


class StoreSchema(_StrictBase):
    url: str
    notes_table: str
    retry: StoreRetrySchema


# =============================================================================
# ai.yaml
# =============================================================================


class AISchema(_StrictBase):
    model: str
    search_model: str
    quiz_question_count: int = Field(gt=0)
    quiz_context_chars: int = Field(gt=0)
    speech_language: str


# =============================================================================
# notes.yaml
# =============================================================================


class NotesSchema(_StrictBase):
    debounce_seconds: float = Field(ge=0)
    flush_on_close: bool


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
    quiet_loggers: list[str] = Field(default_factory=list)
