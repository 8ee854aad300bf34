"""
Engine exceptions.

Raised by the data source and persistence layers.  Builder and viewer
code catches them and turns them into notices or inline widget errors;
the HTTP layer maps them to status codes.
"""


class DashboardEngineError(Exception):
    """Base class for every error raised by the engine."""


class InvalidDataSourceError(DashboardEngineError):
    """A data source descriptor failed validation on create."""


class UnsafeQueryError(DashboardEngineError):
    """A query config references an identifier or statement we refuse to run."""


class PersistenceError(DashboardEngineError):
    """The backing store could not complete a read or write."""
