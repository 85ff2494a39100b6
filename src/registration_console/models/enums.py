"""Enumeration definitions for the Registration Console.

This module contains the Enum classes shared by the query layer, the
mutation layer and the console controllers.
"""

from enum import Enum


class QueryStatus(str, Enum):
    """Defines the data status of a cached query.

    Attributes:
        PENDING: No data has been fetched successfully yet.
        SUCCESS: The last fetch resolved with data.
        ERROR: The last fetch raised; previous data, if any, is kept.
    """

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class MutationStatus(str, Enum):
    """Defines the lifecycle status of a mutation.

    Attributes:
        IDLE: The mutation has not been dispatched yet.
        PENDING: A request is in flight and its result is not yet known.
        SUCCESS: The last request resolved.
        ERROR: The last request raised.
    """

    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class FormMode(str, Enum):
    """Defines what a form submission does.

    Attributes:
        CREATE: Submitting registers a new user.
        EDIT: Submitting updates the user currently being edited.
    """

    CREATE = "create"
    EDIT = "edit"


class GateState(str, Enum):
    """Defines the state of the deletion confirmation gate."""

    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class UsersBackend(str, Enum):
    """Selects the implementation of the users API used by the console."""

    SQL = "sql"
    MEMORY = "memory"
    HTTP = "http"
