"""Pydantic models for database connection configuration."""

from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Configuration Models
# ============================================================================


class ConnectionProfile(BaseModel):
    """Database connection profile from db.toml.

    Either ``url`` is given, or the URL is assembled from the individual
    connection fields.

    Example:
        >>> profile = ConnectionProfile(name="staging", database="app", user="app")
        >>> profile.resolve_url()
        'postgresql://app@localhost:5432/app'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    host: str = "localhost"
    port: int = 5432
    database: str
    user: str = ""
    password: str | None = None
    db_schema: str = Field(default="public", alias="schema")
    description: str = ""
    url: str | None = None  # [YOUR-PASSWORD] placeholder is substituted

    @property
    def label(self) -> str:
        """Label used to tag difference records produced for this profile."""
        return self.name

    def resolve_url(self) -> str:
        """Resolve the connection URL, substituting the password placeholder."""
        if self.url:
            url = self.url
            if self.password and "[YOUR-PASSWORD]" in url:
                url = url.replace("[YOUR-PASSWORD]", quote(self.password, safe=""))
            return url

        credentials = quote(self.user, safe="")
        if self.password:
            credentials = f"{credentials}:{quote(self.password, safe='')}"
        if credentials:
            credentials = f"{credentials}@"
        return f"postgresql://{credentials}{self.host}:{self.port}/{self.database}"


class CompareConfig(BaseModel):
    """Complete comparison configuration from db.toml."""

    profiles: dict[str, ConnectionProfile]
    excluded_tables: frozenset[str] = frozenset()
