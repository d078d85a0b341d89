from .dsl import job, sh, uses, matrix, wf, on, on_push, on_pull_request, on_dispatch, JobBuilder, build
from .model import Job, Step, Trigger, Workflow
from .render import render
from .sync import generate, check, run_all
from .errors import MalformedWorkflow, MissingArtifact, DriftDetected, IOFailure, UsageError, WacgenError

__all__ = [
    "job", "sh", "uses", "matrix", "wf", "on", "on_push", "on_pull_request", "on_dispatch",
    "JobBuilder", "build", "Job", "Step", "Trigger", "Workflow", "render", "generate", "check",
    "run_all", "MalformedWorkflow", "MissingArtifact", "DriftDetected", "IOFailure", "UsageError",
    "WacgenError",
]
