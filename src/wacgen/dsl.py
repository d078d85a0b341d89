# dsl.py
from __future__ import annotations

import re
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .errors import MalformedWorkflow
from .model import Job, Scalar, Step, Trigger, Workflow


DEFAULT_RUNNER = "ubuntu-latest"

_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------

def uses(
    ref: str,
    name: str | None = None,
    *,
    with_: Optional[Mapping[str, Scalar]] = None,
    id: str | None = None,
    if_: str | None = None,
    env: Optional[Mapping[str, Scalar]] = None,
    continue_on_error: bool | None = None,
) -> Step:
    """Action step: uses("actions/checkout@v4", "Checkout")."""
    return Step(
        name=name,
        uses=ref,
        with_=with_ or {},
        id=id,
        if_=if_,
        env=env or {},
        continue_on_error=continue_on_error,
    )


def sh(
    name: str | None,
    *lines: str,
    shell: str | None = None,
    cwd: str | None = None,
    id: str | None = None,
    if_: str | None = None,
    env: Optional[Mapping[str, Scalar]] = None,
    continue_on_error: bool | None = None,
) -> Step:
    """Shell step: sh("Run tests", "cargo test --workspace"). Lines join with newlines."""
    return Step(
        name=name,
        run=tuple(lines),
        shell=shell,
        working_directory=cwd,
        id=id,
        if_=if_,
        env=env or {},
        continue_on_error=continue_on_error,
    )


# ---------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------

def job(
    id: str,
    *steps: Step,  # allow job("x", sh(...), sh(...))
    steps_list: Optional[List[Step]] = None,  # still allow job(..., steps_list=[...])
    runs_on: Union[str, Sequence[str]] = DEFAULT_RUNNER,
    name: str | None = None,
    needs: Optional[List[str]] = None,
    env: Optional[Dict[str, Scalar]] = None,
    if_: str | None = None,
    timeout_minutes: int | None = None,
    cwd: str | None = None,  # default working directory for shell steps
) -> Job:
    steps_final = list(steps_list or []) + list(steps)

    if cwd is not None:
        steps_final = [
            s if s.kind != "shell" or s.working_directory is not None
            else replace(s, working_directory=cwd)
            for s in steps_final
        ]

    return Job(
        id=id,
        runs_on=runs_on if isinstance(runs_on, str) else tuple(runs_on),
        steps=tuple(steps_final),
        name=name,
        needs=tuple(needs or ()),
        env=env or {},
        if_=if_,
        timeout_minutes=timeout_minutes,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, id: str):
        self.id = id
        self._runs_on: Union[str, tuple] = DEFAULT_RUNNER
        self._name: Optional[str] = None
        self._needs: list[str] = []
        self._steps: list[Step] = []
        self._env: dict[str, Scalar] = {}
        self._if: Optional[str] = None
        self._timeout: Optional[int] = None

    def runs_on(self, *labels: str):
        self._runs_on = labels[0] if len(labels) == 1 else tuple(labels)
        return self

    def named(self, name: str):
        self._name = name
        return self

    def depends_on(self, *job_ids: str):
        self._needs.extend(job_ids)
        return self

    def step(self, name: str | None, *lines: str, shell: str | None = None, cwd: str | None = None):
        self._steps.append(sh(name, *lines, shell=shell, cwd=cwd))
        return self

    def action(
        self,
        ref: str,
        name: str | None = None,
        with_: Optional[Mapping[str, Scalar]] = None,
        **params: Scalar,
    ):
        """Action step; hyphenated keys (`node-version`) go in `with_`, merged before `params`."""
        self._steps.append(uses(ref, name, with_={**(with_ or {}), **params}))
        return self

    def add(self, *steps: Step):
        self._steps.extend(steps)
        return self

    def with_env(self, **env: Scalar):
        self._env.update(env)
        return self

    def when(self, condition: str):
        self._if = condition
        return self

    def timeout(self, minutes: int):
        self._timeout = minutes
        return self

    def build(self) -> Job:
        if not self._steps:
            raise MalformedWorkflow(f"Job '{self.id}' has no steps")

        return Job(
            id=self.id,
            runs_on=self._runs_on,
            steps=tuple(self._steps),
            name=self._name,
            needs=tuple(self._needs),
            env=self._env,
            if_=self._if,
            timeout_minutes=self._timeout,
        )


def build(id: str) -> JobBuilder:
    """Convenience: build('test').step(...).build()"""
    return JobBuilder(id)


# ---------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------

class Matrix:
    """
    Expand one job definition over a list of values.

    Example:
        m = matrix("os", ["ubuntu-latest", "macos-latest"])
        m.jobs(lambda v: job(m.job_id("test", v), sh(...), runs_on=v))

    `job_id("test", "macos-latest")` gives "test-os-macos-latest".
    """
    def __init__(self, key: str, values: Iterable[Any]):
        self.key = key
        self.values = list(values)

    def job_id(self, base: str, value: Any) -> str:
        """Job id for one expansion: `<base>-<key>-<value>`, made id-safe."""
        return _ID_UNSAFE.sub("-", f"{base}-{self.key}-{value}")

    def jobs(self, builder: Callable[[Any], Job]) -> List[Job]:
        return [builder(v) for v in self.values]


def matrix(key: str, values: Iterable[Any]) -> Matrix:
    return Matrix(key, values)


# ---------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------

def on(
    event: str,
    *,
    branches: Optional[Sequence[str]] = None,
    tags: Optional[Sequence[str]] = None,
    paths: Optional[Sequence[str]] = None,
) -> Trigger:
    """
    Trigger for any event. `branches`/`paths` filters apply to push and
    pull_request(_target), `tags` to push only; other events render as an
    empty mapping. `schedule` and `workflow_run` need settings a Trigger
    does not carry and are rejected.
    """
    return Trigger(
        event=event,
        branches=tuple(branches or ()),
        tags=tuple(tags or ()),
        paths=tuple(paths or ()),
    )


def on_push(*branches: str, tags: Optional[Sequence[str]] = None, paths: Optional[Sequence[str]] = None) -> Trigger:
    return on("push", branches=branches, tags=tags, paths=paths)


def on_pull_request(*branches: str, paths: Optional[Sequence[str]] = None) -> Trigger:
    return on("pull_request", branches=branches, paths=paths)


def on_dispatch() -> Trigger:
    return on("workflow_dispatch")


# ---------------------------------------------------------------------
# Workflow helper (single-file story)
# ---------------------------------------------------------------------

def wf(
    slug: str,
    *jobs: Union[Job, List[Job]],
    name: str | None = None,
    on: Optional[Sequence[Trigger]] = None,
    env: Optional[Dict[str, Scalar]] = None,
) -> Workflow:
    """
    Workflow definition helper.

    Users can write:
        from wacgen import wf, job, sh, uses, on_push

        def workflows():
            return [
                wf("ci", job("Test", uses("actions/checkout@v4"), sh(None, "make test")),
                   name="CI", on=[on_push("main")]),
            ]

    Lists of jobs (e.g. from matrix(...).jobs(...)) are flattened in place.
    """
    return Workflow(
        slug=slug,
        display_name=name,
        triggers=tuple(on or ()),
        env=env or {},
    ).add_jobs(*jobs)
