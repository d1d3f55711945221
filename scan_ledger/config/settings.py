# scan_ledger/config/settings.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Se construye una sola vez en create_app() y se pasa a cada componente
    model_config = SettingsConfigDict(
        env_prefix="SCAN_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(
        default="scan-ledger-sync",
        description="Service name for FastAPI.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for the scan_ledger loggers.",
    )

    # Google Sheets integration
    google_spreadsheet_id: str | None = Field(
        default=None,
        description="ID of the spreadsheet that acts as the scan ledger.",
    )
    google_service_account_key: str | None = Field(
        default=None,
        description="Service account JSON content. Takes precedence over the key path.",
    )
    google_service_account_key_path: str | None = Field(
        default=None,
        description="Path to the service account JSON credentials file.",
    )

    # Relational store
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL of the database holding scanned_data.",
    )

    # Sync behaviour
    sync_batch_limit: int = Field(
        default=50,
        ge=1,
        description="How many of the most recent scans one sync run pushes.",
    )
    recent_scans_limit: int = Field(
        default=10,
        ge=1,
        description="How many ledger rows the overview shows.",
    )
    display_timezone: str = Field(
        default="Asia/Taipei",
        description="IANA timezone used when rendering timestamps into the ledger.",
    )
