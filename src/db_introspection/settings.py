from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Introspection settings backed by environment variables."""

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(
        default=False,
        validation_alias="LOG_JSON",
        description="Emit JSON log lines instead of text."
    )
    profiles_path: str = Field(
        default="configs/datasources.yaml",
        validation_alias="INTROSPECTION_PROFILES",
        description="Path to the YAML file listing connector profiles."
    )
    statement_timeout_ms: int = Field(
        default=30000,  # 30s
        validation_alias="STATEMENT_TIMEOUT_MS",
        description="Default statement timeout for catalog queries, where the engine supports one."
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")
