# render.py
from __future__ import annotations

from typing import Any, Dict

import yaml

from .dag import validate_needs
from .errors import MalformedWorkflow
from .model import Job, Step, Trigger, Workflow


class _Literal(str):
    """Multi-line strings rendered as `|` block scalars."""


class _WorkflowDumper(yaml.SafeDumper):
    pass


def _literal_representer(dumper: yaml.SafeDumper, data: _Literal) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style="|")


_WorkflowDumper.add_representer(_Literal, _literal_representer)


def _text(value: str) -> str:
    # block scalars cannot carry trailing spaces on a line; leave those quoted
    if "\n" in value and not any(line != line.rstrip() for line in value.split("\n")):
        return _Literal(value)
    return value


def _trigger_to_dict(trigger: Trigger) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if trigger.branches:
        out["branches"] = list(trigger.branches)
    if trigger.tags:
        out["tags"] = list(trigger.tags)
    if trigger.paths:
        out["paths"] = list(trigger.paths)
    return out


def step_to_dict(step: Step) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if step.id is not None:
        out["id"] = step.id
    if step.name is not None:
        out["name"] = step.name
    if step.if_ is not None:
        out["if"] = step.if_
    if step.uses is not None:
        out["uses"] = step.uses
        if step.with_:
            out["with"] = dict(step.with_)
    else:
        out["run"] = _text(step.command)
        if step.shell is not None:
            out["shell"] = step.shell
    if step.working_directory is not None:
        out["working-directory"] = step.working_directory
    if step.env:
        out["env"] = dict(step.env)
    if step.continue_on_error is not None:
        out["continue-on-error"] = step.continue_on_error
    return out


def job_to_dict(job: Job, slug: str | None = None) -> Dict[str, Any]:
    if not job.steps:
        raise MalformedWorkflow(f"Job '{job.id}' has no steps", slug=slug)

    out: Dict[str, Any] = {}
    if job.name is not None:
        out["name"] = job.name
    out["runs-on"] = job.runs_on if isinstance(job.runs_on, str) else list(job.runs_on)
    if job.needs:
        out["needs"] = list(job.needs)
    if job.if_ is not None:
        out["if"] = job.if_
    if job.timeout_minutes is not None:
        out["timeout-minutes"] = job.timeout_minutes
    if job.env:
        out["env"] = dict(job.env)
    out["steps"] = [step_to_dict(s) for s in job.steps]
    return out


def workflow_to_dict(workflow: Workflow) -> Dict[str, Any]:
    """
    Translate a workflow into the plain dict/list structure of a GitHub
    Actions file. Key order here is the key order of the rendered YAML.
    """
    if not workflow.jobs:
        raise MalformedWorkflow("Workflow has no jobs", slug=workflow.slug)
    if not workflow.triggers:
        raise MalformedWorkflow("Workflow has no triggers", slug=workflow.slug)
    validate_needs(workflow)

    out: Dict[str, Any] = {}
    if workflow.display_name is not None:
        out["name"] = workflow.display_name
    out["on"] = {t.event: _trigger_to_dict(t) for t in workflow.triggers}
    if workflow.env:
        out["env"] = dict(workflow.env)

    jobs: Dict[str, Any] = {}
    for j in workflow.jobs:
        jobs[j.id] = job_to_dict(j, slug=workflow.slug)
    out["jobs"] = jobs
    return out


def render(workflow: Workflow) -> str:
    """Render `workflow` to canonical YAML text (newline-terminated)."""
    text = yaml.dump(
        workflow_to_dict(workflow),
        Dumper=_WorkflowDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=4096,
    )
    return text.rstrip("\n") + "\n"
