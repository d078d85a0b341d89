# errors.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


REGENERATE_HINT = "Run `wacgen generate` and commit the result."


class WacgenError(Exception):
    """Base class for every error wacgen reports at the process boundary."""

    title = "wacgen error"
    hint: Optional[str] = None


@dataclass(eq=False)
class MalformedWorkflow(WacgenError, ValueError):
    """
    A Step/Job/Workflow breaks a structural rule (both or neither of
    uses/run, duplicate ids, empty required collection, bad needs).
    """
    message: str
    slug: str | None = None

    title = "Malformed workflow"

    def __str__(self) -> str:
        if self.slug:
            return f"[{self.slug}] {self.message}"
        return self.message


@dataclass(eq=False)
class MissingArtifact(WacgenError):
    """`check` found no committed file at the expected path."""
    slug: str
    path: Path

    title = "Workflow out of sync"
    hint = REGENERATE_HINT

    def __str__(self) -> str:
        return f"Workflow '{self.slug}' is out of sync: {self.path} does not exist"


@dataclass(eq=False)
class DriftDetected(WacgenError):
    """Rendered output differs from the committed file."""
    slug: str
    path: Path
    diff: str = ""

    title = "Workflow out of sync"
    hint = REGENERATE_HINT

    def __str__(self) -> str:
        return f"Workflow '{self.slug}' is out of sync with {self.path}"


@dataclass(eq=False)
class IOFailure(WacgenError):
    """Read/write error unrelated to content (permissions, disk, ...)."""
    path: Path
    operation: str
    reason: str

    title = "I/O failure"

    def __str__(self) -> str:
        return f"Could not {self.operation} {self.path}: {self.reason}"


@dataclass(eq=False)
class UsageError(WacgenError):
    """Bad invocation: unknown slug, nothing to process, bad definition file."""
    message: str

    title = "Usage error"

    def __str__(self) -> str:
        return self.message
