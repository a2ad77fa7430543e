"""
Configuration for platform-autoconfig.

Two layers:
- `Settings` (Pydantic Settings) reads environment variables and `.env` for
  process level knobs: logging, the properties file location, and overrides
  for the test platform properties.
- `build_properties()` produces the string keyed property map the resolver
  and coordinator consume: the properties file overlaid by env overrides.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

import javaproperties
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PLATFORM_KEY = "ebean.test.platform"
DB_NAME_KEY = "ebean.test.dbName"
DEBUG_KEY = "ebean.test.debug"
DOCKER_PLATFORM_KEY = "ebean.test.dockerPlatform"


class Settings(BaseSettings):
    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Property sources
    properties_file: str = Field("application-test.properties", alias="EBEAN_TEST_PROPERTIES_FILE")
    test_platform: Optional[str] = Field(None, alias="EBEAN_TEST_PLATFORM")
    test_db_name: Optional[str] = Field(None, alias="EBEAN_TEST_DBNAME")
    test_debug: Optional[str] = Field(None, alias="EBEAN_TEST_DEBUG")

    # Containers
    startup_timeout_seconds: float = Field(120.0, alias="STARTUP_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


def load_properties(path: Path | str) -> Dict[str, str]:
    """
    Parse a Java ``.properties`` file.

    The full format is accepted: ``=``, ``:`` or whitespace separators,
    backslash line continuations and escapes. A missing file yields an empty
    dict.
    """
    path = Path(path)
    if not path.is_file():
        return {}

    with path.open("r", encoding="utf-8") as f:
        return dict(javaproperties.load(f))


def build_properties(settings: Optional[Settings] = None) -> Dict[str, str]:
    """
    Build the effective property map: file properties, then env overrides.
    """
    settings = settings or get_settings()
    properties = load_properties(settings.properties_file)
    overrides = {
        PLATFORM_KEY: settings.test_platform,
        DB_NAME_KEY: settings.test_db_name,
        DEBUG_KEY: settings.test_debug,
    }
    properties.update({key: value for key, value in overrides.items() if value})
    return properties


def is_debug(properties: Dict[str, str]) -> bool:
    """Return True when ``ebean.test.debug`` is ``true`` (any case)."""
    value = properties.get(DEBUG_KEY)
    return value is not None and value.lower() == "true"


__all__ = [
    "DB_NAME_KEY",
    "DEBUG_KEY",
    "DOCKER_PLATFORM_KEY",
    "PLATFORM_KEY",
    "Settings",
    "build_properties",
    "get_settings",
    "is_debug",
    "load_properties",
]
