"""Exceptions raised by db-compare.

Usage:
    from db_compare.errors import ConnectivityError, InvalidRequestError
"""


class InvalidRequestError(Exception):
    """Raised when a comparison request is malformed (no source, no targets)."""

    pass


class ProfileNotFoundError(Exception):
    """Raised when a profile name is not present in db.toml."""

    pass


class ConnectivityError(Exception):
    """Raised when a database cannot be reached or its schema does not exist.

    Attributes:
        host: Database host of the offending profile.
        port: Database port of the offending profile.
        database: Database name of the offending profile.
        target: Label of the target being compared when the failure
            happened, or ``None`` for the source / standalone reads.

    The underlying driver error, if any, is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        target: str | None = None,
    ) -> None:
        super().__init__(message)
        self.host = host
        self.port = port
        self.database = database
        self.target = target

    @property
    def cause(self) -> BaseException | None:
        """The driver error that triggered this failure, if any."""
        return self.__cause__
