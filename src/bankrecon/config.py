"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

ENV_PREFIX = "BANKRECON_"


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Every value can be overridden with a ``BANKRECON_*`` environment variable;
    CLI options override the environment.
    """

    db_path: Optional[str] = None
    log_level: str = "WARNING"
    mapping_cache_ttl: float = 60.0
    directory_cache_ttl: float = 300.0
    debounce_seconds: float = 0.5
    max_suggestions: int = 3

    def resolved_db_path(self) -> str:
        """Return the database path, defaulting to ~/.bankrecon/bankrecon.db."""
        if self.db_path:
            return self.db_path
        db_dir = Path.home() / ".bankrecon"
        db_dir.mkdir(exist_ok=True)
        return str(db_dir / "bankrecon.db")

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with non-None overrides applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


def _env_float(environ, name: str, default: float) -> float:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got '{raw}'")


def load_settings(environ=None) -> Settings:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    if environ is None:
        environ = os.environ

    return Settings(
        db_path=environ.get(ENV_PREFIX + "DB_PATH") or None,
        log_level=environ.get(ENV_PREFIX + "LOG_LEVEL", "WARNING"),
        mapping_cache_ttl=_env_float(environ, "MAPPING_CACHE_TTL", 60.0),
        directory_cache_ttl=_env_float(environ, "DIRECTORY_CACHE_TTL", 300.0),
        debounce_seconds=_env_float(environ, "DEBOUNCE_SECONDS", 0.5),
        max_suggestions=int(_env_float(environ, "MAX_SUGGESTIONS", 3)),
    )
