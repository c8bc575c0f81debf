"""
Runtime configuration for learnpath.

Settings come from the environment, optionally seeded from a project .env:
- LEARNPATH_API_URL: base URL of the course API
- LEARNPATH_API_TIMEOUT: request timeout in seconds
- LEARNPATH_HOME: directory holding the on-device storage database
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from learnpath.errors import ConfigError


PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 10.0
DEFAULT_DATA_DIR = Path.home() / ".learnpath"

# Remote endpoints
COURSES_LIST = "/api/courses"
COURSE_DETAIL = "/api/courses/{course_id}"
COURSE_LESSONS = "/api/courses/{course_id}/lessons"


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_URL
    request_timeout: float = DEFAULT_TIMEOUT
    data_dir: Path = DEFAULT_DATA_DIR

    @property
    def storage_path(self) -> Path:
        return self.data_dir / "storage.db"


def _read_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigError(f"LEARNPATH_API_TIMEOUT must be a number, got {raw!r}")
    if timeout <= 0:
        raise ConfigError(f"LEARNPATH_API_TIMEOUT must be positive, got {raw!r}")
    return timeout


def settings_from_env() -> Settings:
    """Build settings from the current environment."""
    timeout_raw = os.environ.get("LEARNPATH_API_TIMEOUT")
    data_dir_raw = os.environ.get("LEARNPATH_HOME")
    return Settings(
        api_base_url=os.environ.get("LEARNPATH_API_URL", DEFAULT_API_URL).rstrip("/"),
        request_timeout=_read_timeout(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT,
        data_dir=Path(data_dir_raw).expanduser() if data_dir_raw else DEFAULT_DATA_DIR,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load .env once and return the process-wide settings."""
    load_dotenv(PROJECT_ROOT / ".env")
    return settings_from_env()
