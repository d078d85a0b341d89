# dag.py
from __future__ import annotations

from collections import deque
from typing import Dict, List, Set, Tuple

from .errors import MalformedWorkflow
from .model import Workflow


def build_dag(workflow: Workflow) -> Tuple[Dict[str, Set[str]], Dict[str, int]]:
    """
    Build the `needs` graph of a workflow.

    Edges run need -> dependent. Raises MalformedWorkflow when a job
    needs a job id that is not defined in the same workflow.
    """
    ids = [j.id for j in workflow.jobs]
    id_set = set(ids)
    adj: Dict[str, Set[str]] = {i: set() for i in ids}
    indeg: Dict[str, int] = {i: 0 for i in ids}

    for job in workflow.jobs:
        for need in job.needs:
            if need not in id_set:
                raise MalformedWorkflow(
                    f"Job '{job.id}' needs missing job '{need}'. Known jobs: {sorted(id_set)}",
                    slug=workflow.slug,
                )
            if job.id not in adj[need]:
                adj[need].add(job.id)
                indeg[job.id] += 1

    return adj, indeg


def topo_levels(workflow: Workflow) -> List[List[str]]:
    """
    Group job ids into stages; every job only needs jobs from earlier stages.
    """
    adj, indeg = build_dag(workflow)
    indeg = dict(indeg)
    q = deque(sorted(n for n, d in indeg.items() if d == 0))

    levels: List[List[str]] = []
    processed = 0

    while q:
        level: List[str] = []
        for _ in range(len(q)):
            node = q.popleft()
            level.append(node)
            processed += 1
            for child in sorted(adj[node]):
                indeg[child] -= 1
                if indeg[child] == 0:
                    q.append(child)
        levels.append(level)

    if processed != len(indeg):
        stuck = sorted(n for n, d in indeg.items() if d > 0)
        raise MalformedWorkflow(f"Job needs form a cycle. Stuck jobs: {stuck}", slug=workflow.slug)

    return levels


def validate_needs(workflow: Workflow) -> None:
    topo_levels(workflow)
