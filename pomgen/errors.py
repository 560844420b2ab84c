"""Error taxonomy shared by the analysis and generation pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

NO_TESTABLE_ELEMENTS = "no-testable-elements"


class PomGenError(RuntimeError):
    """Base class for recoverable pipeline failures."""

    def __init__(self, message: str, *, path: Optional[Path | str] = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class InputNotFound(PomGenError):
    """The target path is not an Angular application, library, or workspace."""


class ManifestMissing(PomGenError):
    """A project or workspace descriptor that should exist is absent."""


class MalformedSource(PomGenError):
    """A component or route file could not be minimally parsed."""


class PersistenceFailure(PomGenError):
    """The file-access collaborator failed to write an artifact."""


class OperationCancelled(PomGenError):
    """Raised at a stage boundary once cancellation has been requested."""


__all__ = [
    "InputNotFound",
    "MalformedSource",
    "ManifestMissing",
    "NO_TESTABLE_ELEMENTS",
    "OperationCancelled",
    "PersistenceFailure",
    "PomGenError",
]
