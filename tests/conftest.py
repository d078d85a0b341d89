"""Shared test fixtures for wacgen tests."""

from collections.abc import Generator

import pytest
from click.testing import CliRunner

from wacgen import Workflow, job, on_pull_request, on_push, sh, uses, wf
from wacgen.ui.console import Console, set_console


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def plain_console() -> Generator[None, None, None]:
    """Reset the global console so debug state does not leak between tests."""
    set_console(Console())
    yield
    set_console(Console())


@pytest.fixture
def ci_workflow() -> Workflow:
    """Workflow `ci` with one job `Test`: checkout, then `echo hi`."""
    return wf(
        "ci",
        job("Test", uses("actions/checkout@v4"), sh(None, "echo hi")),
        name="CI",
        on=[on_push("main"), on_pull_request("main")],
    )


WORKFLOW_FILE_SOURCE = '''
from wacgen import wf, job, sh, uses, on_push


def workflows():
    return [
        wf(
            "ci",
            job("Test", uses("actions/checkout@v4", "Checkout"), sh("Say hi", "echo hi")),
            name="CI",
            on=[on_push("main")],
        ),
        wf(
            "lint",
            job("Lint", sh("Lint", "ruff check .")),
            on=[on_push("main")],
        ),
    ]
'''


@pytest.fixture
def workflow_file(tmp_path):
    """A definition file providing the `ci` and `lint` workflows."""
    path = tmp_path / "project_workflow.py"
    path.write_text(WORKFLOW_FILE_SOURCE)
    return path
