"""db-compare: structural schema drift detection across databases.

Compares the tables, columns and indexes of N target databases against one
source database and reports every difference in a single result.

Usage:
    from db_compare import ComparisonEngine, PostgresSchemaReader
    from db_compare import load_db_config, get_profile
    from db_compare import ComparisonResult, ConnectivityError
"""

__version__ = "0.1.0"

# Config
from db_compare.config.loader import get_profile, load_db_config
from db_compare.config.models import CompareConfig, ConnectionProfile

# Engine
from db_compare.engine import ComparisonEngine

# Errors
from db_compare.errors import (
    ConnectivityError,
    InvalidRequestError,
    ProfileNotFoundError,
)

# Schema
from db_compare.schema.introspector import PostgresSchemaReader
from db_compare.schema.models import ComparisonResult, SummaryCounters
from db_compare.schema.reader import SchemaReader

__all__ = [
    # Config
    "load_db_config",
    "get_profile",
    "CompareConfig",
    "ConnectionProfile",
    # Engine
    "ComparisonEngine",
    # Errors
    "ConnectivityError",
    "InvalidRequestError",
    "ProfileNotFoundError",
    # Schema
    "SchemaReader",
    "PostgresSchemaReader",
    "ComparisonResult",
    "SummaryCounters",
]
