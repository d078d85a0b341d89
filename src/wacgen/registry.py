# registry.py
from __future__ import annotations

import runpy
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .errors import MalformedWorkflow, UsageError
from .model import Workflow


DEFAULT_WORKFLOW_FILE = "wacgen_workflow.py"


# ----------------------------------------------------------------------
# Discovery
# ----------------------------------------------------------------------

def find_workflow_files(directory: str | Path = ".") -> List[Path]:
    """
    Find workflow definition files in `directory`:
    wacgen_workflow.py first, then any other *_workflow.py in name order.
    """
    root = Path(directory)
    found: List[Path] = []

    default = root / DEFAULT_WORKFLOW_FILE
    if default.exists():
        found.append(default)

    for path in sorted(root.glob("*_workflow.py")):
        if path != default:
            found.append(path)

    return found


# ----------------------------------------------------------------------
# Loading
# ----------------------------------------------------------------------

def _as_workflow_list(value: object, source: Path) -> List[Workflow]:
    if isinstance(value, Workflow):
        return [value]
    if isinstance(value, (list, tuple)) and all(isinstance(w, Workflow) for w in value):
        return list(value)
    raise UsageError(
        f"{source.name} must provide Workflow values, got {type(value).__name__}. "
        "Define workflows() -> list[Workflow], WORKFLOWS = [...] or workflow = wf(...)."
    )


def load_workflows(path: str | Path) -> List[Workflow]:
    """
    Load workflows from a python file.

    The file must define one of:
      - workflows() -> list[Workflow]
      - WORKFLOWS = [Workflow, ...]
      - workflow = Workflow(...)
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise UsageError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise UsageError(f"Workflow definitions must be a .py file, got: {wf_path.name}")

    module_name = f"wacgen_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    if callable(globals_dict.get("workflows")):
        return _as_workflow_list(globals_dict["workflows"](), wf_path)
    if "WORKFLOWS" in globals_dict:
        return _as_workflow_list(globals_dict["WORKFLOWS"], wf_path)
    if "workflow" in globals_dict:
        return _as_workflow_list(globals_dict["workflow"], wf_path)

    raise UsageError(
        f"{wf_path.name} defines no workflows. "
        "Define workflows() -> list[Workflow], WORKFLOWS = [...] or workflow = wf(...)."
    )


# ----------------------------------------------------------------------
# Registry
# ----------------------------------------------------------------------

def collect(workflows: Iterable[Workflow]) -> Dict[str, Workflow]:
    """
    Index workflows by slug, preserving registration order.

    Two workflows under one slug would render to the same file, so a
    duplicate slug is rejected rather than letting one silently win.
    """
    by_slug: Dict[str, Workflow] = {}
    for w in workflows:
        if w.slug in by_slug:
            raise MalformedWorkflow(
                f"Workflow slug '{w.slug}' is registered more than once", slug=w.slug
            )
        by_slug[w.slug] = w
    return by_slug


def load_all(paths: Sequence[str | Path]) -> Dict[str, Workflow]:
    loaded: List[Workflow] = []
    for p in paths:
        loaded.extend(load_workflows(p))
    return collect(loaded)


def select(by_slug: Dict[str, Workflow], only: Sequence[str] = ()) -> List[Workflow]:
    if not only:
        return list(by_slug.values())

    unknown = [s for s in only if s not in by_slug]
    if unknown:
        raise UsageError(
            f"Unknown workflow slug(s): {', '.join(unknown)}. "
            f"Known: {', '.join(by_slug) or '(none)'}"
        )
    wanted = set(only)
    return [w for slug, w in by_slug.items() if slug in wanted]
