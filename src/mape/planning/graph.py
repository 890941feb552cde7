"""Dependency-graph analysis over a plan's task breakdown.

Edges point from a task to each of its prerequisites (``Task.dependencies``).
Every function here is a pure function of its arguments: nothing is cached
between calls and the task records are never mutated, so callers may invoke
them concurrently as long as each passes a consistent snapshot.

Traversals use explicit ``(task_id, dependency_index)`` frames instead of
recursion so very deep dependency chains do not hit the interpreter's
recursion limit.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from ..plan.schema import DependencyEdge, Task

LOGGER = logging.getLogger(__name__)

DEFAULT_TASK_TIMEOUT_SECONDS = 300
CYCLE_SEPARATOR = " → "

__all__ = [
    "CYCLE_SEPARATOR",
    "DEFAULT_TASK_TIMEOUT_SECONDS",
    "CriticalPath",
    "WavePlan",
    "calculate_critical_path",
    "derive_dependency_edges",
    "detect_circular_dependencies",
    "find_dependency_cycles",
    "get_executable_tasks",
    "plan_execution_waves",
    "task_duration",
    "topological_order",
]


@dataclass(slots=True)
class CriticalPath:
    """Longest duration-weighted dependency chain through a task graph."""

    path: list[str] = field(default_factory=list)
    duration_seconds: int = 0


@dataclass(slots=True)
class WavePlan:
    """Rounds of tasks an executor could dispatch together."""

    waves: list[list[str]] = field(default_factory=list)
    blocked: list[str] = field(default_factory=list)


def _dependency_graph(tasks: Iterable[Task]) -> dict[str, list[str]]:
    """Map each task id to its dependency ids; the first task wins on duplicate ids."""
    graph: dict[str, list[str]] = {}
    for task in tasks:
        if task.id in graph:
            continue
        graph[task.id] = list(task.dependencies)
    return graph


def find_dependency_cycles(tasks: Sequence[Task]) -> list[list[str]]:
    """Return every dependency cycle as a chain that starts and ends on the same id.

    A dependency already on the current DFS path closes a cycle: the path slice
    from its first occurrence plus the dependency itself is recorded and the
    search moves on to the next dependency without descending. Finished tasks
    are never explored again and unknown ids are treated as leaves.
    """
    graph = _dependency_graph(tasks)
    cycles: list[list[str]] = []
    finished: set[str] = set()
    on_path: set[str] = set()
    path: list[str] = []

    for root in graph:
        if root in finished:
            continue
        stack: list[tuple[str, int]] = [(root, 0)]
        on_path.add(root)
        path.append(root)
        while stack:
            node, index = stack[-1]
            dependencies = graph.get(node, ())
            if index < len(dependencies):
                stack[-1] = (node, index + 1)
                dependency = dependencies[index]
                if dependency in on_path:
                    cycle = path[path.index(dependency):] + [dependency]
                    if cycle not in cycles:
                        cycles.append(cycle)
                    continue
                if dependency in finished:
                    continue
                on_path.add(dependency)
                path.append(dependency)
                stack.append((dependency, 0))
                continue
            stack.pop()
            path.pop()
            on_path.discard(node)
            finished.add(node)

    if cycles:
        LOGGER.debug("Detected %d dependency cycle(s) across %d task(s)", len(cycles), len(graph))
    return cycles


def detect_circular_dependencies(tasks: Sequence[Task]) -> list[str]:
    """Render each dependency cycle as a readable chain such as ``A → B → A``."""
    return [CYCLE_SEPARATOR.join(cycle) for cycle in find_dependency_cycles(tasks)]


def get_executable_tasks(tasks: Sequence[Task], completed_task_ids: Collection[str]) -> list[Task]:
    """Return the ready frontier: unfinished tasks whose dependencies are all complete."""
    completed = completed_task_ids if isinstance(completed_task_ids, (set, frozenset)) else set(completed_task_ids)
    ready = [
        task
        for task in tasks
        if task.id not in completed and all(dependency in completed for dependency in task.dependencies)
    ]
    LOGGER.debug("Ready frontier has %d task(s) with %d completed", len(ready), len(completed))
    return ready


def plan_execution_waves(tasks: Sequence[Task], max_concurrency: int | None = None) -> WavePlan:
    """Simulate an executor that finishes each ready frontier before asking again.

    Every round takes the current frontier, splits it into chunks of at most
    ``max_concurrency`` tasks, and treats the whole frontier as completed.
    Tasks that never become ready (cycles, unknown dependencies) are returned
    in ``blocked`` in input order.
    """
    limit = None if max_concurrency is None else max(1, max_concurrency)
    completed: set[str] = set()
    plan = WavePlan()

    while True:
        frontier = list(dict.fromkeys(task.id for task in get_executable_tasks(tasks, completed)))
        if not frontier:
            break
        if limit is None:
            plan.waves.append(frontier)
        else:
            for start in range(0, len(frontier), limit):
                plan.waves.append(frontier[start : start + limit])
        completed.update(frontier)

    plan.blocked = list(dict.fromkeys(task.id for task in tasks if task.id not in completed))
    if plan.blocked:
        LOGGER.debug("%d task(s) can never become ready: %s", len(plan.blocked), ", ".join(plan.blocked))
    return plan


def topological_order(tasks: Sequence[Task]) -> list[str]:
    """Return task ids with every dependency ahead of its dependents.

    Post-order DFS over the prerequisite edges. Unknown dependency ids are
    skipped; inside a cycle the order is whatever the traversal reaches first.
    """
    graph = _dependency_graph(tasks)
    visited: set[str] = set()
    order: list[str] = []

    for root in graph:
        if root in visited:
            continue
        visited.add(root)
        stack: list[tuple[str, int]] = [(root, 0)]
        while stack:
            node, index = stack[-1]
            dependencies = graph[node]
            if index < len(dependencies):
                stack[-1] = (node, index + 1)
                dependency = dependencies[index]
                if dependency in visited or dependency not in graph:
                    continue
                visited.add(dependency)
                stack.append((dependency, 0))
                continue
            stack.pop()
            order.append(node)
    return order


def task_duration(task: Task, default_timeout: int = DEFAULT_TASK_TIMEOUT_SECONDS) -> int:
    """Duration a task contributes to a chain: its timeout, or the default when unset."""
    if task.timeout_seconds is None:
        return default_timeout
    return task.timeout_seconds


def _prefer(candidate: str, incumbent: str | None, durations: Mapping[str, int]) -> bool:
    """Longer duration wins; equal durations fall back to the smaller task id."""
    if incumbent is None:
        return True
    if durations[candidate] != durations[incumbent]:
        return durations[candidate] > durations[incumbent]
    return candidate < incumbent


def calculate_critical_path(
    tasks: Sequence[Task],
    *,
    default_timeout: int = DEFAULT_TASK_TIMEOUT_SECONDS,
) -> CriticalPath:
    """Compute the longest timeout-weighted dependency chain.

    ``duration(t) = max(duration(d) for d in deps(t)) + timeout(t)``. Ties are
    resolved by the lexicographically smallest task id, both when choosing a
    predecessor and when choosing where the path ends, so the answer does not
    depend on input order. An empty task list yields an empty path of zero
    seconds.
    """
    by_id: dict[str, Task] = {}
    for task in tasks:
        by_id.setdefault(task.id, task)

    durations: dict[str, int] = {}
    paths: dict[str, list[str]] = {}
    for task_id in topological_order(tasks):
        task = by_id[task_id]
        predecessor: str | None = None
        for dependency in task.dependencies:
            # Unknown ids and back edges of a cycle have no duration yet.
            if dependency not in durations:
                continue
            if _prefer(dependency, predecessor, durations):
                predecessor = dependency
        base = durations[predecessor] if predecessor is not None else 0
        durations[task_id] = base + task_duration(task, default_timeout)
        paths[task_id] = (paths[predecessor] if predecessor is not None else []) + [task_id]

    end: str | None = None
    for task_id in durations:
        if _prefer(task_id, end, durations):
            end = task_id

    if end is None:
        return CriticalPath()
    result = CriticalPath(path=list(paths[end]), duration_seconds=durations[end])
    LOGGER.debug(
        "Critical path spans %d task(s) for %d second(s)",
        len(result.path),
        result.duration_seconds,
    )
    return result


def derive_dependency_edges(tasks: Sequence[Task]) -> list[DependencyEdge]:
    """Describe which artifact flows along each dependency.

    Inputs whose ``source`` names another task become one edge per input.
    Declared dependencies with no matching input still get an edge with an
    empty artifact name so the graph is complete.
    """
    task_ids = {task.id for task in tasks}
    edges: list[DependencyEdge] = []
    for task in tasks:
        covered: set[str] = set()
        for task_input in task.inputs:
            source = task_input.source
            if source == task.id or source not in task_ids:
                continue
            edges.append(DependencyEdge(from_task=source, to_task=task.id, artifact=task_input.name))
            covered.add(source)
        for dependency in task.dependencies:
            if dependency in covered or dependency not in task_ids:
                continue
            edges.append(DependencyEdge(from_task=dependency, to_task=task.id, artifact=""))
            covered.add(dependency)
    return edges
