"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from db_compare.config import load_db_config, ConnectionProfile, CompareConfig
"""

from db_compare.config.loader import get_profile, load_db_config
from db_compare.config.models import CompareConfig, ConnectionProfile

__all__ = ["load_db_config", "get_profile", "CompareConfig", "ConnectionProfile"]
