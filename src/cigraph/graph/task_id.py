"""Deterministic task id generation for a version.

An id is ``<project>_<variant>_<task>_<revision>_<created>``, with every
character outside ``[A-Za-z0-9_.]`` replaced by ``_``. For patch requesters
the revision part becomes ``patch_<revision>_<versionId>`` so two patches on
the same base revision never share ids.
"""

from __future__ import annotations

import re

from cigraph import log
from cigraph.config import Config
from cigraph.context import VersionContext
from cigraph.graph.pairs import TaskIdConfig, TaskIdTable, TaskVariantPairs, TVPair, TVPairSet
from cigraph.project.model import BuildVariant, Project

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_.]")


def clean_name(name: str) -> str:
    return _UNSAFE_ID_CHARS.sub("_", name)


def revision_component(version: VersionContext, cfg: Config | None = None) -> str:
    if version.is_patch(cfg):
        return f"patch_{version.revision}_{version.id}"
    return version.revision


def generate_id(
    name: str,
    project: Project,
    bv: BuildVariant,
    version: VersionContext,
    cfg: Config | None = None,
) -> str:
    """Sanitized id of task (or prefixed display task) *name* on *bv*."""
    cfg = cfg or Config()
    raw = "_".join(
        [
            project.identifier,
            bv.name,
            name,
            revision_component(version, cfg),
            version.create_time.strftime(cfg.id_time_layout),
        ]
    )
    return clean_name(raw)


def new_task_id_table(
    project: Project, version: VersionContext, cfg: Config | None = None
) -> TaskIdConfig:
    """Ids for every task and display task on every variant, disabled ones included."""
    cfg = cfg or Config()
    groups = project.task_group_map()
    execution = TaskIdTable()
    display = TaskIdTable()

    for bv in project.build_variants.sorted_by_display_name():
        for unit in bv.tasks:
            tg = groups.get(unit.name)
            members = tg.tasks if tg is not None else [unit.name]
            for name in members:
                execution.add_id(bv.name, name, generate_id(name, project, bv, version, cfg))
        for dt in bv.display_tasks:
            prefixed = f"{cfg.display_task_prefix}{dt.name}"
            display.add_id(bv.name, dt.name, generate_id(prefixed, project, bv, version, cfg))

    log.debug(
        f"Generated {len(execution)} task id(s) and {len(display)} display id(s) "
        f"for version {version.id}"
    )
    return TaskIdConfig(execution_tasks=execution, display_tasks=display)


def expand_task_groups(project: Project, pairs: TVPairSet) -> TVPairSet:
    """Replace every pair naming a task group with one pair per member."""
    groups = project.task_group_map()
    out = TVPairSet()
    for pair in pairs:
        tg = groups.get(pair.task_name)
        if tg is None:
            out.append(pair)
            continue
        out.extend(TVPair(pair.variant, member) for member in tg.tasks)
    return out


def _ids_for_variant(
    variant: str,
    project: Project,
    version: VersionContext,
    requested: TVPairSet,
    table: TaskIdTable,
    cfg: Config,
) -> None:
    bv = project.find_build_variant(variant)
    if bv is None:
        log.debug(f"Variant {variant} is not defined; no ids generated for it")
        return
    groups = project.task_group_map()
    wanted = set(requested.task_names(variant))

    for unit in bv.tasks:
        tg = groups.get(unit.name)
        names = tg.tasks if tg is not None else [unit.name]
        for name in names:
            if name in wanted:
                table.add_id(variant, name, generate_id(name, project, bv, version, cfg))


def _display_ids_for_variant(
    variant: str,
    project: Project,
    version: VersionContext,
    requested: TVPairSet,
    table: TaskIdTable,
    cfg: Config,
) -> None:
    bv = project.find_build_variant(variant)
    if bv is None:
        return
    wanted = set(requested.task_names(variant))
    for dt in bv.display_tasks:
        if dt.name in wanted:
            prefixed = f"{cfg.display_task_prefix}{dt.name}"
            table.add_id(variant, dt.name, generate_id(prefixed, project, bv, version, cfg))


def new_patch_task_id_table(
    project: Project,
    version: VersionContext,
    tasks: TaskVariantPairs,
    cfg: Config | None = None,
) -> TaskIdConfig:
    """Ids only for the requested pairs that the project actually defines.

    Task-group pairs are first replaced by their members. Pairs naming an
    unknown variant or task are left out of the table.
    """
    cfg = cfg or Config()
    exec_pairs = expand_task_groups(project, tasks.exec_tasks)

    execution = TaskIdTable()
    for variant in exec_pairs.variants():
        _ids_for_variant(variant, project, version, exec_pairs, execution, cfg)

    display = TaskIdTable()
    for variant in tasks.display_tasks.variants():
        _display_ids_for_variant(variant, project, version, tasks.display_tasks, display, cfg)

    return TaskIdConfig(execution_tasks=execution, display_tasks=display)
