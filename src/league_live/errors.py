"""
Domain errors raised by the store and the services.

The API layer maps each class onto an HTTP status; nothing in here knows
about HTTP. Store exceptions from psycopg are translated at the transaction
boundary by translate_db_error() so callers only ever see this family.
"""

from __future__ import annotations

import logging
from typing import Any

import psycopg
from psycopg import errors as pg_errors

logger = logging.getLogger(__name__)


class LeagueError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidInput(LeagueError):
    """Malformed or inconsistent input (validation failure)."""


class NotFound(LeagueError):
    """A referenced entity does not exist."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} not found", f"{resource} with ID {identifier}")
        self.resource = resource
        self.identifier = identifier


class Conflict(LeagueError):
    """Duplicate unique key or a disallowed state change."""


class ReferenceMissing(LeagueError):
    """A foreign key points at a row that does not exist."""


class StoreUnavailable(LeagueError):
    """The relational store cannot be reached or no pool slot freed in time."""


class StoreError(LeagueError):
    """Unclassified store failure."""


def translate_db_error(exc: psycopg.Error) -> LeagueError:
    """
    Map a psycopg exception onto the domain taxonomy.

    The original error text is logged here and never returned to callers.
    """
    if isinstance(exc, pg_errors.UniqueViolation):
        logger.warning("Unique constraint violated: %s", exc)
        return Conflict("Duplicate entry not allowed")

    if isinstance(exc, pg_errors.ForeignKeyViolation):
        logger.warning("Foreign key violated: %s", exc)
        return ReferenceMissing("Referenced record does not exist")

    if isinstance(exc, (pg_errors.CheckViolation, pg_errors.NotNullViolation)):
        logger.warning("Constraint violated: %s", exc)
        return InvalidInput("Validation failed")

    if isinstance(exc, pg_errors.UndefinedTable):
        logger.error("Database table not found: %s", exc)
        return StoreError("Database table not found")

    # PoolTimeout is an OperationalError too
    if isinstance(exc, psycopg.OperationalError):
        logger.error("Database unavailable: %s", exc)
        return StoreUnavailable("Database connection failed")

    logger.error("Database error: %s", exc, exc_info=exc)
    return StoreError("Database error")
