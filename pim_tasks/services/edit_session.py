from __future__ import annotations

import logging
from typing import Any

from pim_tasks.domain.draft import TaskDraft
from pim_tasks.domain.entities import Task
from pim_tasks.domain.enums import SaveState
from pim_tasks.domain.errors import ValidationError

from .task_service import TaskService

logger = logging.getLogger(__name__)

SAVE_FAILED = "Could not save task"
DELETE_FAILED = "Could not delete task"

_TRANSITIONS: dict[SaveState, frozenset[SaveState]] = {
    SaveState.EDITING: frozenset({SaveState.VALIDATING}),
    SaveState.VALIDATING: frozenset({SaveState.REJECTED, SaveState.COMMITTING}),
    SaveState.COMMITTING: frozenset({SaveState.CASCADING, SaveState.FAILED}),
    SaveState.CASCADING: frozenset({SaveState.DONE, SaveState.FAILED}),
    SaveState.REJECTED: frozenset({SaveState.VALIDATING, SaveState.EDITING}),
    SaveState.FAILED: frozenset({SaveState.VALIDATING, SaveState.EDITING}),
    SaveState.DONE: frozenset(),
}


class EditSession:
    """One edit of one task, from the first keystroke to a finished save.

    The draft is replaced on every edit and never touched by a failed
    submit, so a rejected or failed save can simply be submitted again.
    """

    def __init__(
        self,
        service: TaskService,
        original: Task | None = None,
        default_collection_uid: str | None = None,
    ) -> None:
        self._service = service
        self.original = original
        if original is not None:
            self.draft: TaskDraft = service.draft_from(original)
        else:
            self.draft = service.new_draft(default_collection_uid)
        self.state = SaveState.EDITING
        self.error: str | None = None
        self.primary_saved = False
        self.saved: Task | None = None
        self.successor: Task | None = None
        self.delete_requested = False
        self.deleted = False

    @property
    def is_new(self) -> bool:
        return self.original is None

    @property
    def is_recurring(self) -> bool:
        # editing any instance of a recurring task edits the whole series
        return self.original is not None and self.original.is_recurring

    def _transition(self, target: SaveState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Cannot move from {self.state} to {target}")
        self.state = target

    def _ensure_editable(self) -> None:
        if self.state == SaveState.DONE:
            raise RuntimeError("Session already saved")
        if self.state in (SaveState.REJECTED, SaveState.FAILED):
            self._transition(SaveState.EDITING)

    def update(self, **fields: Any) -> TaskDraft:
        self._ensure_editable()
        self.draft = self.draft.with_changes(**fields)
        return self.draft

    def toggle_time(self) -> TaskDraft:
        self._ensure_editable()
        self.draft = self.draft.with_time_toggled()
        return self.draft

    def toggle_recurring(self) -> TaskDraft:
        self._ensure_editable()
        self.draft = self.draft.with_recurrence_toggled()
        return self.draft

    def dismiss_error(self) -> None:
        self.error = None

    def submit(self) -> SaveState:
        self._transition(SaveState.VALIDATING)
        self.error = None
        self.primary_saved = False
        self.saved = None
        self.successor = None

        try:
            task = self._service.commit(self.draft, self.original)
        except ValidationError as exc:
            self.error = str(exc)
            self._transition(SaveState.REJECTED)
            return self.state

        self._transition(SaveState.COMMITTING)
        try:
            self.saved = self._service.save(task, self.original)
        except Exception:  # noqa: BLE001
            logger.exception("Saving task %s failed", task.uid)
            return self._fail(SAVE_FAILED)
        self.primary_saved = True

        self._transition(SaveState.CASCADING)
        successor = self._service.successor(task)
        if successor is not None:
            try:
                self.successor = self._service.save(successor)
            except Exception:  # noqa: BLE001
                logger.exception("Saving the next occurrence of task %s failed", task.uid)
                return self._fail(SAVE_FAILED)

        self._transition(SaveState.DONE)
        return self.state

    def _fail(self, message: str) -> SaveState:
        self.error = message
        self._transition(SaveState.FAILED)
        return self.state

    def request_delete(self) -> None:
        if self.original is None:
            raise RuntimeError("Only saved tasks can be deleted")
        self.delete_requested = True

    def cancel_delete(self) -> None:
        self.delete_requested = False

    def confirm_delete(self) -> bool:
        if not self.delete_requested:
            raise RuntimeError("Delete was not requested")
        self.delete_requested = False
        try:
            self._service.delete(self.original, self.draft.collection_uid)
        except Exception:  # noqa: BLE001
            logger.exception("Deleting task %s failed", self.draft.uid)
            self.error = DELETE_FAILED
            return False
        self.deleted = True
        return True
