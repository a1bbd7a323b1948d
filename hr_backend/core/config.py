"""Environment-driven configuration and logging setup."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv(override=False)


DEFAULT_LARK_API_BASE = "https://open.larksuite.com/open-apis"
DEFAULT_APP_BASE_URL = "http://localhost:3000"

TABLE_ENV_MAP: dict[str, str] = {
    "employee": "LARK_TABLE_EMPLOYEE",
    "manpower": "LARK_TABLE_MANPOWER",
    "recruitment": "LARK_TABLE_RECRUITMENT",
    "candidate": "LARK_TABLE_CANDIDATE",
    "onboarding": "LARK_TABLE_ONBOARDING",
    "offboarding": "LARK_TABLE_OFFBOARDING",
}


class ConfigurationError(RuntimeError):
    """Raised when a required environment variable is missing."""


@dataclass
class Settings:
    lark_app_id: str = ""
    lark_app_secret: str = ""
    lark_app_token: str = ""
    lark_api_base: str = DEFAULT_LARK_API_BASE
    tables: dict[str, str] = field(default_factory=dict)
    xero_client_id: str = ""
    xero_client_secret: str = ""
    xero_redirect_uri: str = ""
    app_base_url: str = DEFAULT_APP_BASE_URL
    xero_database_path: str | None = None
    cors_origins: list[str] = field(default_factory=list)
    log_level: str = "INFO"

    @property
    def lark_configured(self) -> bool:
        return bool(self.lark_app_id and self.lark_app_secret and self.lark_app_token)

    @property
    def xero_configured(self) -> bool:
        return bool(self.xero_client_id and self.xero_client_secret)

    def table_id(self, table_name: str) -> str:
        """Resolve a logical table name to the Lark table identifier."""

        env_var = TABLE_ENV_MAP.get(table_name)
        if env_var is None:
            raise ConfigurationError(f'Unknown table "{table_name}"')
        value = self.tables.get(table_name)
        if not value:
            raise ConfigurationError(f'Missing env var {env_var} for table "{table_name}"')
        return value


def load_settings() -> Settings:
    tables: dict[str, str] = {}
    for name, env_var in TABLE_ENV_MAP.items():
        value = (os.getenv(env_var) or "").strip()
        if value:
            tables[name] = value
    # LARK_TABLE_ID predates the per-table variables and only ever meant the employee table.
    legacy = (os.getenv("LARK_TABLE_ID") or "").strip()
    if legacy and "employee" not in tables:
        tables["employee"] = legacy

    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

    return Settings(
        lark_app_id=os.getenv("LARK_APP_ID", ""),
        lark_app_secret=os.getenv("LARK_APP_SECRET", ""),
        lark_app_token=os.getenv("LARK_BASE_APP_TOKEN", ""),
        lark_api_base=os.getenv("LARK_API_BASE") or DEFAULT_LARK_API_BASE,
        tables=tables,
        xero_client_id=os.getenv("XERO_CLIENT_ID", ""),
        xero_client_secret=os.getenv("XERO_CLIENT_SECRET", ""),
        xero_redirect_uri=os.getenv("XERO_REDIRECT_URI", ""),
        app_base_url=(os.getenv("APP_BASE_URL") or DEFAULT_APP_BASE_URL).rstrip("/"),
        xero_database_path=os.getenv("XERO_DATABASE_PATH") or None,
        cors_origins=origins,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process settings, loading them from the environment once."""

    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def configure_settings(settings: Settings | None) -> None:
    """Install explicit settings (``None`` forces a reload on next access)."""

    global _settings
    _settings = settings


def setup_logging(level: str | None = None) -> None:
    """Configure root logging; the level defaults to ``Settings.log_level``."""
    final_level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, final_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("hr.config").debug("Logging configured at %s", final_level)
