# model.py
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from .errors import MalformedWorkflow


Scalar = Union[str, int, float, bool]

SLUG_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
JOB_ID_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")
EVENT_RE = re.compile(r"^[a-z][a-z_]*$")

# filters each event accepts; any other event renders as an empty mapping
EVENT_FILTERS = {
    "push": ("branches", "tags", "paths"),
    "pull_request": ("branches", "paths"),
    "pull_request_target": ("branches", "paths"),
}
# events whose mapping needs settings Trigger does not carry (cron list, workflow names)
UNSUPPORTED_EVENTS = ("schedule", "workflow_run")


def _as_tuple(value: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _frozen_map(value: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    # copy so the caller's dict cannot alias into the model
    return MappingProxyType(dict(value or {}))


def _check_scalars(mapping: Mapping[str, Any], what: str) -> None:
    for k, v in mapping.items():
        if not isinstance(k, str):
            raise MalformedWorkflow(f"{what} keys must be strings, got {k!r}")
        if not isinstance(v, (str, int, float, bool)):
            raise MalformedWorkflow(
                f"{what}[{k!r}] must be a string, number or boolean, got {type(v).__name__}"
            )


def _flatten(items: Iterable[Any]) -> list:
    out = []
    for item in items:
        if isinstance(item, (list, tuple)):
            out.extend(item)
        else:
            out.append(item)
    return out


@dataclass(frozen=True)
class Trigger:
    """A repository event that starts a workflow, optionally filtered."""
    event: str
    branches: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    paths: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.event, str) or not EVENT_RE.match(self.event):
            raise MalformedWorkflow(f"Invalid trigger event: {self.event!r}")
        if self.event in UNSUPPORTED_EVENTS:
            raise MalformedWorkflow(f"Trigger event '{self.event}' is not supported")
        for attr in ("branches", "tags", "paths"):
            object.__setattr__(self, attr, _as_tuple(getattr(self, attr)))

        allowed = EVENT_FILTERS.get(self.event, ())
        for attr in ("branches", "tags", "paths"):
            if getattr(self, attr) and attr not in allowed:
                raise MalformedWorkflow(f"Trigger event '{self.event}' does not accept `{attr}` filters")


@dataclass(frozen=True)
class Step:
    """
    Smallest unit of a job: either an action invocation (`uses` + `with_`)
    or an inline shell command (`run`, optionally with `shell`).

    `run` accepts a string or a sequence of lines; lines are joined with
    newlines when rendered.
    """
    name: Optional[str] = None
    uses: Optional[str] = None
    with_: Mapping[str, Scalar] = field(default_factory=dict, hash=False)
    run: Optional[Tuple[str, ...]] = None
    shell: Optional[str] = None

    id: Optional[str] = None
    if_: Optional[str] = None
    env: Mapping[str, Scalar] = field(default_factory=dict, hash=False)
    working_directory: Optional[str] = None
    continue_on_error: Optional[bool] = None

    def __post_init__(self) -> None:
        label = self.name or self.uses or "<unnamed step>"

        if self.uses is not None and self.run is not None:
            raise MalformedWorkflow(f"Step '{label}' sets both `uses` and `run`")
        if self.uses is None and self.run is None:
            raise MalformedWorkflow(f"Step '{label}' sets neither `uses` nor `run`")

        if self.uses is not None:
            if not isinstance(self.uses, str) or not self.uses.strip():
                raise MalformedWorkflow(f"Step '{label}' has an empty `uses` reference")
            if self.shell is not None:
                raise MalformedWorkflow(f"Step '{label}' sets `shell` on an action step")
        else:
            lines = _as_tuple(self.run)
            if not lines or not any(line.strip() for line in lines):
                raise MalformedWorkflow(f"Step '{label}' has an empty `run` command")
            object.__setattr__(self, "run", lines)
            if self.with_:
                raise MalformedWorkflow(f"Step '{label}' sets `with` on a shell step")

        object.__setattr__(self, "with_", _frozen_map(self.with_))
        object.__setattr__(self, "env", _frozen_map(self.env))
        _check_scalars(self.with_, f"Step '{label}' with")
        _check_scalars(self.env, f"Step '{label}' env")

    @property
    def kind(self) -> str:
        return "action" if self.uses is not None else "shell"

    @property
    def command(self) -> Optional[str]:
        """The `run` lines joined as rendered, or None for action steps."""
        if self.run is None:
            return None
        return "\n".join(self.run)


@dataclass(frozen=True)
class Job:
    """
    A CI job: ordered steps bound to a runner.

    `id` is the key under `jobs:` in the rendered file, so it must be unique
    within a workflow.
    """
    id: str
    runs_on: Union[str, Tuple[str, ...]]
    steps: Tuple[Step, ...] = ()

    name: Optional[str] = None
    needs: Tuple[str, ...] = ()
    env: Mapping[str, Scalar] = field(default_factory=dict, hash=False)
    if_: Optional[str] = None
    timeout_minutes: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not JOB_ID_RE.match(self.id):
            raise MalformedWorkflow(f"Invalid job id: {self.id!r}")

        runs_on = self.runs_on
        if not isinstance(runs_on, str):
            runs_on = tuple(runs_on or ())
        if not runs_on:
            raise MalformedWorkflow(f"Job '{self.id}' has no `runs_on` label")
        object.__setattr__(self, "runs_on", runs_on)

        steps = tuple(self.steps)
        for s in steps:
            if not isinstance(s, Step):
                raise MalformedWorkflow(
                    f"Job '{self.id}' got {type(s).__name__} where a Step was expected"
                )
        object.__setattr__(self, "steps", steps)

        needs = _as_tuple(self.needs)
        if self.id in needs:
            raise MalformedWorkflow(f"Job '{self.id}' needs itself")
        object.__setattr__(self, "needs", needs)

        if self.timeout_minutes is not None and self.timeout_minutes <= 0:
            raise MalformedWorkflow(f"Job '{self.id}' timeout_minutes must be positive")

        object.__setattr__(self, "env", _frozen_map(self.env))
        _check_scalars(self.env, f"Job '{self.id}' env")

    def add_steps(self, *steps: Union[Step, Iterable[Step]]) -> "Job":
        """Return a copy of this job with `steps` appended in order."""
        return replace(self, steps=self.steps + tuple(_flatten(steps)))


@dataclass(frozen=True)
class Workflow:
    """
    A named pipeline: triggers plus ordered jobs.

    `slug` names the rendered file (`<slug>.yml`); `display_name` is the
    title the CI system shows.
    """
    slug: str
    display_name: Optional[str] = None
    triggers: Tuple[Trigger, ...] = ()
    jobs: Tuple[Job, ...] = ()
    env: Mapping[str, Scalar] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.slug, str) or not SLUG_RE.match(self.slug):
            raise MalformedWorkflow(f"Invalid workflow slug: {self.slug!r}")

        triggers = tuple(self.triggers)
        seen_events: set[str] = set()
        for t in triggers:
            if not isinstance(t, Trigger):
                raise MalformedWorkflow(
                    f"Expected a Trigger, got {type(t).__name__}", slug=self.slug
                )
            if t.event in seen_events:
                raise MalformedWorkflow(
                    f"Duplicate trigger for event '{t.event}'", slug=self.slug
                )
            seen_events.add(t.event)
        object.__setattr__(self, "triggers", triggers)

        jobs = tuple(self.jobs)
        seen_ids: set[str] = set()
        for j in jobs:
            if not isinstance(j, Job):
                raise MalformedWorkflow(
                    f"Expected a Job, got {type(j).__name__}", slug=self.slug
                )
            if j.id in seen_ids:
                raise MalformedWorkflow(f"Duplicate job id: {j.id}", slug=self.slug)
            seen_ids.add(j.id)
        object.__setattr__(self, "jobs", jobs)

        object.__setattr__(self, "env", _frozen_map(self.env))
        _check_scalars(self.env, f"Workflow '{self.slug}' env")

    @property
    def filename(self) -> str:
        return f"{self.slug}.yml"

    def add_jobs(self, *jobs: Union[Job, Iterable[Job]]) -> "Workflow":
        """Return a copy of this workflow with `jobs` appended in order."""
        return replace(self, jobs=self.jobs + tuple(_flatten(jobs)))

    def job(self, job_id: str) -> Job:
        for j in self.jobs:
            if j.id == job_id:
                return j
        raise KeyError(job_id)
