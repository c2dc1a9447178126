from __future__ import annotations


class TaskEditError(Exception):
    """Base class for errors scoped to a single edit or save operation."""


class ValidationError(TaskEditError):
    pass


class PersistenceError(TaskEditError):
    pass
