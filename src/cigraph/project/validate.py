"""Reference checks the resolver depends on.

Only structural consistency is checked here: names that must resolve, and
display tasks that must not nest. Everything else about a project document
is the loader's caller's business.
"""

from __future__ import annotations

from cigraph.project.model import Project


def validate(project: Project) -> list[str]:
    """Return a list of problems. Empty means valid."""
    problems: list[str] = []
    problems.extend(_duplicate_tasks(project))
    problems.extend(_unresolved_units(project))
    problems.extend(_bad_group_members(project))
    problems.extend(_nested_display_tasks(project))
    problems.extend(_unresolved_display_members(project))
    return problems


def _duplicate_tasks(project: Project) -> list[str]:
    seen: set[str] = set()
    reported: set[str] = set()
    out: list[str] = []
    for t in project.tasks:
        if t.name in seen and t.name not in reported:
            out.append(f"task '{t.name}' is defined more than once")
            reported.add(t.name)
        seen.add(t.name)
    return out


def _unresolved_units(project: Project) -> list[str]:
    task_names = {t.name for t in project.tasks}
    group_names = {tg.name for tg in project.task_groups}
    out: list[str] = []
    for bv in project.build_variants:
        for unit in bv.tasks:
            if unit.name not in task_names and unit.name not in group_names:
                out.append(
                    f"build variant '{bv.name}' references undefined task or task group '{unit.name}'"
                )
    return out


def _bad_group_members(project: Project) -> list[str]:
    task_names = {t.name for t in project.tasks}
    out: list[str] = []
    for tg in project.task_groups:
        for member in tg.tasks:
            if member not in task_names:
                out.append(f"task group '{tg.name}' lists undefined task '{member}'")
    return out


def _nested_display_tasks(project: Project) -> list[str]:
    out: list[str] = []
    for bv in project.build_variants:
        display_names = {dt.name for dt in bv.display_tasks}
        for dt in bv.display_tasks:
            for member in dt.execution_tasks:
                if member in display_names:
                    out.append(
                        f"display task '{dt.name}' on build variant '{bv.name}' "
                        f"contains display task '{member}'"
                    )
    return out


def _unresolved_display_members(project: Project) -> list[str]:
    groups = project.task_group_map()
    out: list[str] = []
    for bv in project.build_variants:
        runnable: set[str] = set()
        for unit in bv.tasks:
            tg = groups.get(unit.name)
            runnable.update(tg.tasks if tg is not None else [unit.name])
        display_names = {dt.name for dt in bv.display_tasks}
        for dt in bv.display_tasks:
            for member in dt.execution_tasks:
                # nested display tasks are reported above
                if member in runnable or member in display_names:
                    continue
                out.append(
                    f"display task '{dt.name}' on build variant '{bv.name}' "
                    f"lists task '{member}' that the variant does not run"
                )
    return out
