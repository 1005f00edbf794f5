"""TOML configuration loader for connection profiles."""

import os
import tomllib
from pathlib import Path

from pydantic import ValidationError

from db_compare.config.models import CompareConfig, ConnectionProfile
from db_compare.errors import ProfileNotFoundError

# Environment variable overriding the default config path
CONFIG_ENV_VAR = "DB_COMPARE_CONFIG"


def load_db_config(config_path: Path | None = None) -> CompareConfig:
    """Load comparison configuration from TOML file.

    Args:
        config_path: Path to db.toml. Defaults to ``$DB_COMPARE_CONFIG`` when
            set, otherwise ``db.toml`` in the current working directory.

    Returns:
        CompareConfig with all profiles

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is invalid
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        config_path = Path(env_path) if env_path else Path.cwd() / "db.toml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"Database config not found: {config_path}\n"
            f"Create db.toml with one [profiles.<name>] table per database."
        )

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path.name}: {e}") from e

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        try:
            profiles[name] = ConnectionProfile(name=name, **profile_data)
        except (TypeError, ValidationError) as e:
            raise ValueError(f"Invalid profile '{name}' in {config_path.name}: {e}") from e

    # Parse comparison settings
    compare_settings = data.get("compare", {})

    return CompareConfig(
        profiles=profiles,
        excluded_tables=frozenset(compare_settings.get("exclude_tables", [])),
    )


def get_profile(config: CompareConfig, profile_name: str) -> ConnectionProfile:
    """Look up a profile by name.

    Raises:
        ProfileNotFoundError: If the profile is not in the config
    """
    if profile_name not in config.profiles:
        available = ", ".join(config.profiles.keys()) or "(none)"
        raise ProfileNotFoundError(
            f"Profile '{profile_name}' not found in db.toml. "
            f"Available: {available}"
        )
    return config.profiles[profile_name]
