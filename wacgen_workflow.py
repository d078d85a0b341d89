# wacgen_workflow.py
# Workflow definitions for wacgen itself; rendered to .github/workflows/
from __future__ import annotations

from wacgen import wf, job, sh, on_push, on_pull_request
from wacgen.presets.common import checkout, setup_python, check_workflows_step


def workflows():
    # Test job - installs the package and runs pytest
    test = job(
        "Test",
        checkout(),
        setup_python("3.12"),
        sh("Install", "pip install -e . pytest"),
        sh("Run pytest", "pytest -q"),
    )

    # Validate job - committed workflow files must match this file
    validate = job(
        "Validate",
        checkout(),
        setup_python("3.12"),
        check_workflows_step(),
        needs=["Test"],
    )

    return [
        wf(
            "ci",
            test,
            validate,
            name="CI",
            on=[on_push("main"), on_pull_request("main")],
        ),
    ]
