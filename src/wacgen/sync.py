# sync.py
from __future__ import annotations

import difflib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple

from .errors import DriftDetected, IOFailure, MissingArtifact, UsageError, WacgenError
from .model import Workflow
from .render import render
from .ui.console import get_console


DEFAULT_OUT_DIR = ".github/workflows"

GENERATE = "generate"
CHECK = "check"
COMMANDS = (GENERATE, CHECK)


@dataclass(frozen=True)
class SyncResult:
    slug: str
    path: Path
    status: str  # "generated" | "ok"


@dataclass
class SyncReport:
    """Outcome of one generate/check pass over many workflows."""
    mode: str
    results: List[SyncResult] = field(default_factory=list)
    failures: List[Tuple[str, WacgenError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def statuses(self) -> Dict[str, str]:
        out = {r.slug: r.status for r in self.results}
        for slug, _err in self.failures:
            out[slug] = "failed"
        return out


def target_path(workflow: Workflow, out_dir: str | Path = DEFAULT_OUT_DIR) -> Path:
    return Path(out_dir) / workflow.filename


# ----------------------------------------------------------------------
# Generate
# ----------------------------------------------------------------------

def _atomic_write(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOFailure(path=path, operation="write", reason=e.strerror or str(e)) from e

    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp_path, "wb") as handle:
            handle.write(data)
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise IOFailure(path=path, operation="write", reason=e.strerror or str(e)) from e


def generate(workflow: Workflow, out_dir: str | Path = DEFAULT_OUT_DIR) -> SyncResult:
    """Render `workflow` and replace `<out_dir>/<slug>.yml` with the result."""
    content = render(workflow)
    path = target_path(workflow, out_dir)
    get_console().print_debug(f"writing {workflow.slug} -> {path}")
    _atomic_write(path, content.encode("utf-8"))
    return SyncResult(slug=workflow.slug, path=path, status="generated")


# ----------------------------------------------------------------------
# Check
# ----------------------------------------------------------------------

def _read_artifact(workflow: Workflow, path: Path) -> bytes:
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except FileNotFoundError as e:
        raise MissingArtifact(slug=workflow.slug, path=path) from e
    except OSError as e:
        raise IOFailure(path=path, operation="read", reason=e.strerror or str(e)) from e


def unified_diff(actual: bytes, expected: str, path: Path) -> str:
    lines = difflib.unified_diff(
        actual.decode("utf-8", errors="replace").splitlines(keepends=True),
        expected.splitlines(keepends=True),
        fromfile=f"{path} (committed)",
        tofile=f"{path} (rendered)",
    )
    return "".join(lines)


def check(workflow: Workflow, out_dir: str | Path = DEFAULT_OUT_DIR) -> SyncResult:
    """
    Render `workflow` and compare it byte-for-byte with the committed file.

    Raises MissingArtifact if the file is absent and DriftDetected if the
    contents differ. Never writes.
    """
    expected = render(workflow)
    path = target_path(workflow, out_dir)
    get_console().print_debug(f"checking {workflow.slug} against {path}")

    actual = _read_artifact(workflow, path)
    if actual != expected.encode("utf-8"):
        raise DriftDetected(slug=workflow.slug, path=path, diff=unified_diff(actual, expected, path))

    return SyncResult(slug=workflow.slug, path=path, status="ok")


# ----------------------------------------------------------------------
# Batch
# ----------------------------------------------------------------------

_OPERATIONS: Dict[str, Callable[[Workflow, str | Path], SyncResult]] = {
    GENERATE: generate,
    CHECK: check,
}


def run_all(
    mode: str,
    workflows: Iterable[Workflow],
    out_dir: str | Path = DEFAULT_OUT_DIR,
) -> SyncReport:
    """
    Run `mode` over every workflow and collect all failures, so one
    invocation reports every out-of-sync workflow at once.
    """
    op = _OPERATIONS.get(mode)
    if op is None:
        raise UsageError(f"Invalid command: {mode!r}. Expected one of: {', '.join(COMMANDS)}")

    report = SyncReport(mode=mode)
    for w in workflows:
        try:
            report.results.append(op(w, out_dir))
        except WacgenError as e:
            report.failures.append((w.slug, e))
    return report
