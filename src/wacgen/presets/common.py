# presets/common.py
from __future__ import annotations

from typing import List, Optional

from ..dsl import sh, uses
from ..model import Step


# ---------------------------------------------------------------------
# Repository / toolchain setup
# ---------------------------------------------------------------------

def checkout(version: str = "v4", name: str | None = "Checkout") -> Step:
    return uses(f"actions/checkout@{version}", name)


def setup_node(node_version: str = "20", *, version: str = "v4", name: str | None = "Setup Node") -> Step:
    return uses(f"actions/setup-node@{version}", name, with_={"node-version": node_version})


def setup_python(python_version: str = "3.12", *, version: str = "v5", name: str | None = "Setup Python") -> Step:
    return uses(f"actions/setup-python@{version}", name, with_={"python-version": python_version})


# ---------------------------------------------------------------------
# Self-check: keep committed workflow files in sync with their source
# ---------------------------------------------------------------------

def check_workflows_step(
    name: str = "Validate workflows",
    *,
    install: Optional[List[str]] = None,
) -> Step:
    """
    Shell step that fails the job when the committed workflow files no
    longer match their python definitions.
    """
    lines = list(install if install is not None else ["pip install -e ."])
    lines.append("wacgen check")
    return sh(name, *lines)
