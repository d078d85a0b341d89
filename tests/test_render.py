"""Tests for rendering workflows to canonical YAML."""

import pytest
import yaml

from wacgen import Workflow, job, on_dispatch, on_push, sh, uses, wf
from wacgen.dag import topo_levels
from wacgen.errors import MalformedWorkflow
from wacgen.render import render, workflow_to_dict


class TestExampleScenario:
    """The `ci` workflow: one job `Test`, checkout then `echo hi`."""

    def test_exact_output(self) -> None:
        w = wf(
            "ci",
            job("Test", uses("actions/checkout@v4"), sh(None, "echo hi")),
            name="CI",
            on=[on_push("main")],
        )
        assert render(w) == (
            "name: CI\n"
            "'on':\n"
            "  push:\n"
            "    branches:\n"
            "    - main\n"
            "jobs:\n"
            "  Test:\n"
            "    runs-on: ubuntu-latest\n"
            "    steps:\n"
            "    - uses: actions/checkout@v4\n"
            "    - run: echo hi\n"
        )

    def test_structure(self, ci_workflow: Workflow) -> None:
        doc = yaml.safe_load(render(ci_workflow))
        assert list(doc["jobs"]) == ["Test"]
        steps = doc["jobs"]["Test"]["steps"]
        assert len(steps) == 2
        assert steps[0] == {"uses": "actions/checkout@v4"}
        assert steps[1] == {"run": "echo hi"}
        assert doc["on"] == {"push": {"branches": ["main"]}, "pull_request": {"branches": ["main"]}}


class TestDeterminism:
    def test_render_twice_identical(self, ci_workflow: Workflow) -> None:
        assert render(ci_workflow) == render(ci_workflow)

    def test_equal_graphs_render_identically(self) -> None:
        def make() -> Workflow:
            return wf(
                "ci",
                job("A", uses("actions/setup-node@v4", with_={"b": "2", "a": "1"})),
                on=[on_push("main")],
            )

        assert render(make()) == render(make())

    def test_newline_terminated(self, ci_workflow: Workflow) -> None:
        text = render(ci_workflow)
        assert text.endswith("\n")
        assert not text.endswith("\n\n")


class TestKeyOrder:
    def test_top_level_and_job_keys(self) -> None:
        w = wf(
            "ci",
            job("Build", sh(None, "make")),
            job(
                "Deploy",
                sh(None, "make deploy"),
                name="Deploy it",
                needs=["Build"],
                if_="github.ref == 'refs/heads/main'",
                timeout_minutes=10,
                env={"STAGE": "prod"},
            ),
            name="CI",
            on=[on_push("main")],
            env={"CI": "true"},
        )
        d = workflow_to_dict(w)
        assert list(d) == ["name", "on", "env", "jobs"]
        assert list(d["jobs"]["Deploy"]) == [
            "name", "runs-on", "needs", "if", "timeout-minutes", "env", "steps",
        ]

    def test_step_keys(self) -> None:
        w = wf(
            "ci",
            job(
                "Test",
                uses("actions/cache@v4", "Cache", id="cache", with_={"path": "target"}, if_="always()"),
                sh("Build", "make", shell="bash", cwd="src", env={"X": "1"}, continue_on_error=True),
            ),
            on=[on_push()],
        )
        steps = workflow_to_dict(w)["jobs"]["Test"]["steps"]
        assert list(steps[0]) == ["id", "name", "if", "uses", "with"]
        assert list(steps[1]) == ["name", "run", "shell", "working-directory", "env", "continue-on-error"]

    def test_with_keeps_insertion_order(self) -> None:
        w = wf("ci", job("A", uses("x/y@v1", with_={"zeta": "1", "alpha": "2"})), on=[on_push()])
        text = render(w)
        assert text.index("zeta") < text.index("alpha")

    def test_step_order_preserved(self) -> None:
        names = ["one", "two", "three", "four"]
        w = wf("ci", job("A", *[sh(n, f"echo {n}") for n in names]), on=[on_push()])
        doc = yaml.safe_load(render(w))
        assert [s["name"] for s in doc["jobs"]["A"]["steps"]] == names


class TestScalars:
    def test_multiline_run_is_literal_block(self) -> None:
        w = wf("ci", job("A", sh("Validate", "npm i", "npm run check")), on=[on_push()])
        text = render(w)
        assert "run: |-\n        npm i\n        npm run check\n" in text
        doc = yaml.safe_load(text)
        assert doc["jobs"]["A"]["steps"][0]["run"] == "npm i\nnpm run check"

    def test_trailing_spaces_survive(self) -> None:
        w = wf("ci", job("A", sh(None, "echo a  ", "echo b")), on=[on_push()])
        doc = yaml.safe_load(render(w))
        assert doc["jobs"]["A"]["steps"][0]["run"] == "echo a  \necho b"

    def test_boolean_and_version_params_round_trip(self) -> None:
        w = wf(
            "ci",
            job("A", uses("actions-rs/toolchain@v1", with_={"override": True, "python": "3.10"})),
            on=[on_push()],
        )
        doc = yaml.safe_load(render(w))
        assert doc["jobs"]["A"]["steps"][0]["with"] == {"override": True, "python": "3.10"}

    def test_runs_on_labels_render_as_list(self) -> None:
        w = wf("ci", job("A", sh(None, "x"), runs_on=["self-hosted", "linux"]), on=[on_push()])
        doc = yaml.safe_load(render(w))
        assert doc["jobs"]["A"]["runs-on"] == ["self-hosted", "linux"]

    def test_trigger_without_filters(self) -> None:
        w = wf("ci", job("A", sh(None, "x")), on=[on_dispatch()])
        assert "'on':\n  workflow_dispatch: {}\n" in render(w)


class TestRejects:
    def test_no_jobs(self) -> None:
        with pytest.raises(MalformedWorkflow, match="no jobs"):
            render(wf("ci", on=[on_push()]))

    def test_no_triggers(self) -> None:
        with pytest.raises(MalformedWorkflow, match="no triggers"):
            render(wf("ci", job("A", sh(None, "x"))))

    def test_job_without_steps(self) -> None:
        with pytest.raises(MalformedWorkflow, match="'A' has no steps") as exc:
            render(wf("ci", job("A"), on=[on_push()]))
        assert exc.value.slug == "ci"

    def test_needs_missing_job(self) -> None:
        w = wf("ci", job("A", sh(None, "x"), needs=["B"]), on=[on_push()])
        with pytest.raises(MalformedWorkflow, match="missing job 'B'"):
            render(w)

    def test_needs_cycle(self) -> None:
        w = wf(
            "ci",
            job("A", sh(None, "x"), needs=["B"]),
            job("B", sh(None, "y"), needs=["A"]),
            on=[on_push()],
        )
        with pytest.raises(MalformedWorkflow, match="cycle"):
            render(w)


class TestTopoLevels:
    def test_levels(self) -> None:
        w = wf(
            "ci",
            job("Lint", sh(None, "x")),
            job("Test", sh(None, "x"), needs=["Lint"]),
            job("Build", sh(None, "x")),
            job("Release", sh(None, "x"), needs=["Test", "Build"]),
            on=[on_push()],
        )
        assert topo_levels(w) == [["Build", "Lint"], ["Test"], ["Release"]]
