"""Task group lookup for a task that is about to run."""

from __future__ import annotations

from cigraph.context import TaskConfig
from cigraph.errors import InconsistentContextError, NotFoundError, ProjectLoadError
from cigraph.project.loader import ConfigLoader, load_project
from cigraph.project.model import TaskGroup


def get_task_group(
    task_group: str,
    tc: TaskConfig | None,
    loader: ConfigLoader = load_project,
) -> TaskGroup:
    """Return the group *task_group* from the project stored on the task's version.

    With an empty *task_group* the project's pre/post/timeout hooks stand in
    as a synthetic group. Missing context raises
    :class:`InconsistentContextError`; an unknown group raises
    :class:`NotFoundError`.
    """
    if tc is None:
        raise InconsistentContextError("unable to get task group: TaskConfig is nil")
    if tc.task is None:
        raise InconsistentContextError("unable to get task group: task is nil")
    if not tc.task.version:
        raise InconsistentContextError("task has no version")
    if tc.version is None:
        raise InconsistentContextError("version is nil")

    try:
        project = loader(tc.version.config, tc.task.project)
    except ProjectLoadError as e:
        raise ProjectLoadError(f"error retrieving project for task group: {e}") from e

    if not task_group:
        return TaskGroup(
            name="",
            setup_task=project.pre,
            teardown_task=project.post,
            timeout=project.timeout,
        )

    tg = project.find_task_group(task_group)
    if tg is None:
        raise NotFoundError(f"couldn't find task group {task_group}")
    return tg
