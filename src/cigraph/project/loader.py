"""Turn a YAML project document into a :class:`Project`.

Task references and dependencies may be written as plain strings
(``- compile``) or as mappings (``- name: compile``). Fields a variant does
not set stay ``None`` so the override merge can tell them apart from
explicit values.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from cigraph.errors import ProjectLoadError, ProjectValidationError
from cigraph.io_utils import read_text
from cigraph.project.model import (
    BuildVariant,
    BuildVariants,
    BuildVariantTaskUnit,
    CommandSet,
    DisplayTask,
    Module,
    PluginCommand,
    Project,
    ProjectTask,
    TaskGroup,
    TaskUnitDependency,
    TaskUnitRequirement,
)
from cigraph.project.validate import validate

# (document, project identifier) -> Project
ConfigLoader = Callable[[str | bytes, str], Project]


def _mapping(raw: Any, what: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ProjectLoadError(f"{what} must be a mapping, got {type(raw).__name__}")
    return raw


def _sequence(raw: Any, what: str) -> list[Any]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ProjectLoadError(f"{what} must be a list, got {type(raw).__name__}")
    return raw


def _strings(raw: Any, what: str) -> list[str]:
    return [str(item) for item in _sequence(raw, what)]


def _optional_bool(raw: dict[str, Any], key: str) -> bool | None:
    if key not in raw or raw[key] is None:
        return None
    return bool(raw[key])


def _optional_int(raw: dict[str, Any], key: str) -> int | None:
    if key not in raw or raw[key] is None:
        return None
    return int(raw[key])


# ── commands ─────────────────────────────────────────────────────────


def _command(raw: Any) -> PluginCommand:
    d = _mapping(raw, "command")
    return PluginCommand(
        function=d.get("func", "") or "",
        type=d.get("type", "") or "",
        display_name=d.get("display_name", "") or "",
        command=d.get("command", "") or "",
        variants=_strings(d.get("variants"), "command variants"),
        timeout_secs=int(d.get("timeout_secs", 0) or 0),
        params=_mapping(d.get("params"), "command params"),
        vars={str(k): str(v) for k, v in _mapping(d.get("vars"), "command vars").items()},
    )


def _command_set(raw: Any) -> CommandSet | None:
    if raw is None:
        return None
    if isinstance(raw, list):
        return CommandSet(multi=[_command(c) for c in raw])
    return CommandSet(single=_command(raw))


# ── tasks ────────────────────────────────────────────────────────────


def _dependency(raw: Any) -> TaskUnitDependency:
    if isinstance(raw, str):
        return TaskUnitDependency(name=raw)
    d = _mapping(raw, "depends_on entry")
    return TaskUnitDependency(
        name=d.get("name", "") or "",
        variant=d.get("variant", "") or "",
        status=d.get("status", "") or "",
        patch_optional=bool(d.get("patch_optional", False)),
    )


def _requirement(raw: Any) -> TaskUnitRequirement:
    if isinstance(raw, str):
        return TaskUnitRequirement(name=raw)
    d = _mapping(raw, "requires entry")
    return TaskUnitRequirement(name=d.get("name", "") or "", variant=d.get("variant", "") or "")


def _project_task(raw: Any) -> ProjectTask:
    d = _mapping(raw, "task")
    if not d.get("name"):
        raise ProjectLoadError("every task needs a name")
    return ProjectTask(
        name=str(d["name"]),
        priority=int(d.get("priority", 0) or 0),
        exec_timeout_secs=int(d.get("exec_timeout_secs", 0) or 0),
        depends_on=[_dependency(x) for x in _sequence(d.get("depends_on"), "depends_on")],
        requires=[_requirement(x) for x in _sequence(d.get("requires"), "requires")],
        commands=[_command(c) for c in _sequence(d.get("commands"), "commands")],
        tags=_strings(d.get("tags"), "tags"),
        patchable=_optional_bool(d, "patchable"),
        stepback=_optional_bool(d, "stepback"),
    )


def _task_unit(raw: Any, group_names: set[str]) -> BuildVariantTaskUnit:
    if isinstance(raw, str):
        unit = BuildVariantTaskUnit(name=raw)
    else:
        d = _mapping(raw, "build variant task")
        depends_on = None
        if "depends_on" in d and d["depends_on"] is not None:
            depends_on = [_dependency(x) for x in _sequence(d["depends_on"], "depends_on")]
        requires = None
        if "requires" in d and d["requires"] is not None:
            requires = [_requirement(x) for x in _sequence(d["requires"], "requires")]
        unit = BuildVariantTaskUnit(
            name=str(d.get("name", "") or ""),
            patchable=_optional_bool(d, "patchable"),
            priority=_optional_int(d, "priority"),
            depends_on=depends_on,
            requires=requires,
            distros=_strings(d.get("distros"), "distros"),
            exec_timeout_secs=_optional_int(d, "exec_timeout_secs"),
            stepback=_optional_bool(d, "stepback"),
        )
    if unit.name in group_names:
        unit.is_group = True
        unit.group_name = unit.name
    return unit


def _task_group(raw: Any) -> TaskGroup:
    d = _mapping(raw, "task group")
    if not d.get("name"):
        raise ProjectLoadError("every task group needs a name")
    return TaskGroup(
        name=str(d["name"]),
        max_hosts=int(d.get("max_hosts", 0) or 0),
        setup_group=_command_set(d.get("setup_group")),
        teardown_group=_command_set(d.get("teardown_group")),
        setup_task=_command_set(d.get("setup_task")),
        teardown_task=_command_set(d.get("teardown_task")),
        timeout=_command_set(d.get("timeout")),
        tasks=_strings(d.get("tasks"), "task group tasks"),
        tags=_strings(d.get("tags"), "task group tags"),
        share_processes=bool(d.get("share_processes", False)),
    )


# ── variants and modules ─────────────────────────────────────────────


def _display_task(raw: Any) -> DisplayTask:
    d = _mapping(raw, "display task")
    return DisplayTask(
        name=str(d.get("name", "") or ""),
        execution_tasks=_strings(d.get("execution_tasks"), "execution_tasks"),
    )


def _build_variant(raw: Any, group_names: set[str]) -> BuildVariant:
    d = _mapping(raw, "build variant")
    if not d.get("name"):
        raise ProjectLoadError("every build variant needs a name")
    name = str(d["name"])
    return BuildVariant(
        name=name,
        display_name=str(d.get("display_name") or name),
        expansions={
            str(k): str(v) for k, v in _mapping(d.get("expansions"), "expansions").items()
        },
        modules=_strings(d.get("modules"), "modules"),
        disabled=bool(d.get("disabled", False)),
        tags=_strings(d.get("tags"), "tags"),
        push=bool(d.get("push", False)),
        batch_time=_optional_int(d, "batchtime"),
        stepback=_optional_bool(d, "stepback"),
        run_on=_strings(d.get("run_on"), "run_on"),
        tasks=[_task_unit(x, group_names) for x in _sequence(d.get("tasks"), "tasks")],
        display_tasks=[_display_task(x) for x in _sequence(d.get("display_tasks"), "display_tasks")],
    )


def _module(raw: Any) -> Module:
    d = _mapping(raw, "module")
    return Module(
        name=str(d.get("name", "") or ""),
        branch=str(d.get("branch", "") or ""),
        repo=str(d.get("repo", "") or ""),
        prefix=str(d.get("prefix", "") or ""),
        ref=str(d.get("ref", "") or ""),
    )


# ── entry points ─────────────────────────────────────────────────────


def parse_project(data: dict[str, Any], identifier: str = "") -> Project:
    """Build a :class:`Project` from an already-parsed document mapping."""
    data = _mapping(data, "project document")
    task_groups = [_task_group(x) for x in _sequence(data.get("task_groups"), "task_groups")]
    group_names = {tg.name for tg in task_groups}

    functions: dict[str, CommandSet] = {}
    for fname, body in _mapping(data.get("functions"), "functions").items():
        cs = _command_set(body)
        if cs is not None:
            functions[str(fname)] = cs

    return Project(
        identifier=identifier or str(data.get("identifier", "") or ""),
        enabled=bool(data.get("enabled", False)),
        stepback=bool(data.get("stepback", False)),
        batch_time=int(data.get("batchtime", 0) or 0),
        owner=str(data.get("owner", "") or ""),
        repo=str(data.get("repo", "") or ""),
        remote_path=str(data.get("remote_path", "") or ""),
        repo_kind=str(data.get("repokind", "") or ""),
        branch=str(data.get("branch", "") or ""),
        display_name=str(data.get("display_name", "") or ""),
        command_type=str(data.get("command_type", "") or ""),
        ignore=_strings(data.get("ignore"), "ignore"),
        pre=_command_set(data.get("pre")),
        post=_command_set(data.get("post")),
        timeout=_command_set(data.get("timeout")),
        callback_timeout=int(data.get("callback_timeout_secs", 0) or 0),
        modules=[_module(x) for x in _sequence(data.get("modules"), "modules")],
        build_variants=BuildVariants(
            _build_variant(x, group_names)
            for x in _sequence(data.get("buildvariants"), "buildvariants")
        ),
        functions=functions,
        task_groups=task_groups,
        tasks=[_project_task(x) for x in _sequence(data.get("tasks"), "tasks")],
        exec_timeout_secs=int(data.get("exec_timeout_secs", 0) or 0),
        private=bool(data.get("private", False)),
    )


def load_project(document: str | bytes, identifier: str = "") -> Project:
    """Parse and validate a YAML project document.

    Raises :class:`ProjectLoadError` when the document is not valid YAML or
    has the wrong shape, and :class:`ProjectValidationError` when names do
    not resolve.
    """
    try:
        data = yaml.safe_load(document)
    except yaml.YAMLError as e:
        raise ProjectLoadError(f"invalid project YAML: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProjectLoadError(f"project document root must be a mapping, got {type(data).__name__}")

    try:
        project = parse_project(data, identifier)
    except (TypeError, ValueError) as e:
        raise ProjectLoadError(f"malformed project document: {e}") from e

    problems = validate(project)
    if problems:
        raise ProjectValidationError(problems)
    return project


def load_project_file(path: Path | str, identifier: str = "") -> Project:
    """Read *path* and load it; the file stem is the fallback identifier."""
    p = path if isinstance(path, Path) else Path(path)
    project = load_project(read_text(p), identifier)
    if not project.identifier:
        project.identifier = p.stem
    return project
