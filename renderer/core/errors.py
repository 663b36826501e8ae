"""Error taxonomy shared by the editor core and the UI."""

from __future__ import annotations

from typing import Optional


class EditorError(Exception):
    """Base class for errors the user gets notified about."""

    code = "editor_error"
    title = "Error"
    level = "error"

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self):
        text = super().__str__()
        if self.cause is not None:
            return f"{text} (caused by: {type(self.cause).__name__}: {self.cause})"
        return text


class InvalidInput(EditorError):
    """Selected file is not an image payload."""

    code = "invalid_input"
    title = "Invalid file"


class LoadFailure(EditorError):
    """Image decode or template fetch failed."""

    code = "load_failure"
    title = "Load failed"


class ConstraintViolation(EditorError):
    """Operation would break a state invariant (e.g. removing the last person)."""

    code = "constraint_violation"
    title = "Cannot Remove"
    level = "warning"


class SaveFailure(EditorError):
    """Persistence call rejected; local edits are kept."""

    code = "save_failure"
    title = "Save failed"
