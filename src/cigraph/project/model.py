"""Project, build variant, task and task group data models.

A :class:`Project` is one resolved configuration snapshot. Build variants
reference canonical :class:`ProjectTask` definitions (or task groups) by
name through :class:`BuildVariantTaskUnit` entries that may override a few
settings for that variant only.

Overridable settings use ``None`` for "not set on the variant". An explicit
``False``, ``0`` or empty list is a real override and always wins over the
canonical task.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from cigraph.config import GENERATE_TASKS_COMMAND
from cigraph.context import TaskRecord
from cigraph.errors import NotFoundError

TEST_COMMAND_TYPE = "test"
SYSTEM_COMMAND_TYPE = "system"
SETUP_COMMAND_TYPE = "setup"

DEFAULT_COMMAND_TYPE = TEST_COMMAND_TYPE


# ── Commands ─────────────────────────────────────────────────────────


@dataclass
class PluginCommand:
    """One command (or function call) in a task, hook or function body."""

    function: str = ""
    type: str = ""
    display_name: str = ""
    command: str = ""
    # Empty means every variant.
    variants: list[str] = field(default_factory=list)
    timeout_secs: int = 0
    params: dict[str, Any] = field(default_factory=dict)
    vars: dict[str, str] = field(default_factory=dict)

    def run_on_variant(self, variant: str) -> bool:
        return not self.variants or variant in self.variants

    def get_display_name(self) -> str:
        return self.display_name or self.command

    def get_type(self, project: Project) -> str:
        """Explicit type, else the project's default, else ``"test"``."""
        if self.type:
            return self.type
        if project.command_type:
            return project.command_type
        return DEFAULT_COMMAND_TYPE


@dataclass
class CommandSet:
    """A hook or function body written either as one command or as a list."""

    single: PluginCommand | None = None
    multi: list[PluginCommand] = field(default_factory=list)

    def list(self) -> list[PluginCommand]:
        if self.multi:
            return list(self.multi)
        if self.single is not None and (self.single.command or self.single.function):
            return [self.single]
        return []


# ── Task references ──────────────────────────────────────────────────


@dataclass
class TaskUnitDependency:
    """A task or group that must finish before the holder can run."""

    name: str
    variant: str = ""
    status: str = ""
    patch_optional: bool = False


@dataclass
class TaskUnitRequirement:
    """A task or group that must be scheduled alongside the holder in patches."""

    name: str
    variant: str = ""


@dataclass
class ProjectTask:
    """Canonical task definition from the project's ``tasks`` list."""

    name: str
    priority: int = 0
    exec_timeout_secs: int = 0
    depends_on: list[TaskUnitDependency] = field(default_factory=list)
    requires: list[TaskUnitRequirement] = field(default_factory=list)
    commands: list[PluginCommand] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    patchable: bool | None = None
    stepback: bool | None = None


@dataclass
class BuildVariantTaskUnit:
    """A variant's reference to a task or task group, with optional overrides."""

    name: str
    is_group: bool = False
    group_name: str = ""

    patchable: bool | None = None
    priority: int | None = None
    depends_on: list[TaskUnitDependency] | None = None
    requires: list[TaskUnitRequirement] | None = None
    distros: list[str] = field(default_factory=list)
    exec_timeout_secs: int | None = None
    stepback: bool | None = None

    def populate(self, pt: ProjectTask) -> None:
        """Fill every unset override from *pt*, in place.

        ``name`` and commands are never touched. Running it again with the
        same task changes nothing.
        """
        if self.depends_on is None:
            self.depends_on = list(pt.depends_on)
        if self.requires is None:
            self.requires = list(pt.requires)
        if self.priority is None:
            self.priority = pt.priority
        if self.patchable is None:
            self.patchable = pt.patchable
        if self.exec_timeout_secs is None:
            self.exec_timeout_secs = pt.exec_timeout_secs
        if self.stepback is None:
            self.stepback = pt.stepback


@dataclass
class DisplayTask:
    """Reporting-only aggregate over execution tasks of one variant."""

    name: str
    execution_tasks: list[str] = field(default_factory=list)


@dataclass
class TaskGroup:
    """Tasks that share a host and its setup/teardown lifecycle."""

    name: str
    max_hosts: int = 0
    setup_group: CommandSet | None = None
    teardown_group: CommandSet | None = None
    setup_task: CommandSet | None = None
    teardown_task: CommandSet | None = None
    timeout: CommandSet | None = None
    tasks: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    # Keep OS processes alive between member tasks.
    share_processes: bool = False


# ── Variants ─────────────────────────────────────────────────────────


@dataclass
class BuildVariant:
    name: str
    display_name: str = ""
    expansions: dict[str, str] = field(default_factory=dict)
    modules: list[str] = field(default_factory=list)
    disabled: bool = False
    tags: list[str] = field(default_factory=list)
    push: bool = False
    batch_time: int | None = None
    stepback: bool | None = None
    # Default distros for tasks that name none of their own.
    run_on: list[str] = field(default_factory=list)
    tasks: list[BuildVariantTaskUnit] = field(default_factory=list)
    display_tasks: list[DisplayTask] = field(default_factory=list)

    def get(self, name: str) -> BuildVariantTaskUnit:
        for unit in self.tasks:
            if unit.name == name:
                return unit
        raise NotFoundError(f"could not find task {name} in build variant {self.name}")

    def get_display_task_name(self, exec_task: str) -> str | None:
        """Name of the display task that lists *exec_task*, if any."""
        for dt in self.display_tasks:
            if exec_task in dt.execution_tasks:
                return dt.name
        return None

    def find_display_task(self, name: str) -> DisplayTask | None:
        for dt in self.display_tasks:
            if dt.name == name:
                return dt
        return None


class BuildVariants(list[BuildVariant]):
    """Ordered variant list; sorting is by display name."""

    def get(self, name: str) -> BuildVariant:
        for bv in self:
            if bv.name == name:
                return bv
        raise NotFoundError(f"could not find build variant named {name}")

    def sorted_by_display_name(self) -> list[BuildVariant]:
        """Stable sort by display name; the list itself is left alone."""
        return sorted(self, key=lambda bv: bv.display_name)


@dataclass
class Module:
    name: str
    branch: str = ""
    repo: str = ""
    prefix: str = ""
    ref: str = ""

    def get_repo_owner_and_name(self) -> tuple[str, str]:
        """Parse ``git@github.com:owner/name.git`` into ``(owner, name)``."""
        basename = self.repo.split(":")[-1]
        if basename.endswith(".git"):
            basename = basename[: -len(".git")]
        parts = basename.split("/")
        if len(parts) != 2:
            return "", ""
        return parts[0], parts[1]


# ── Project ──────────────────────────────────────────────────────────


@dataclass
class Project:
    identifier: str = ""
    enabled: bool = False
    stepback: bool = False
    batch_time: int = 0
    owner: str = ""
    repo: str = ""
    remote_path: str = ""
    repo_kind: str = ""
    branch: str = ""
    display_name: str = ""
    command_type: str = ""
    ignore: list[str] = field(default_factory=list)
    pre: CommandSet | None = None
    post: CommandSet | None = None
    timeout: CommandSet | None = None
    callback_timeout: int = 0
    modules: list[Module] = field(default_factory=list)
    build_variants: BuildVariants = field(default_factory=BuildVariants)
    functions: dict[str, CommandSet] = field(default_factory=dict)
    task_groups: list[TaskGroup] = field(default_factory=list)
    tasks: list[ProjectTask] = field(default_factory=list)
    exec_timeout_secs: int = 0
    private: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.build_variants, BuildVariants):
            self.build_variants = BuildVariants(self.build_variants)

    # ── name lookups ─────────────────────────────────────────────

    def find_build_variant(self, name: str) -> BuildVariant | None:
        for bv in self.build_variants:
            if bv.name == name:
                return bv
        return None

    def find_project_task(self, name: str) -> ProjectTask | None:
        for t in self.tasks:
            if t.name == name:
                return t
        return None

    def find_task_group(self, name: str) -> TaskGroup | None:
        for tg in self.task_groups:
            if tg.name == name:
                return tg
        return None

    def get_module_by_name(self, name: str) -> Module:
        for m in self.modules:
            if m.name == name:
                return m
        raise NotFoundError(f"no module named {name} on project {self.identifier}")

    def get_spec_for_task(self, name: str) -> ProjectTask:
        """Canonical task *name*, or an empty ``ProjectTask`` if undefined."""
        return self.find_project_task(name) or ProjectTask(name="")

    def task_group_map(self) -> dict[str, TaskGroup]:
        return {tg.name: tg for tg in self.task_groups}

    # ── variant/task resolution ──────────────────────────────────

    def find_task_for_variant(self, task: str, variant: str) -> BuildVariantTaskUnit | None:
        """Resolve *task* on *variant* into a populated copy of its unit.

        The task may be referenced directly or through a task group the
        variant lists. Returns ``None`` when the variant does not exist, does
        not carry the task, or the task has no canonical definition.
        """
        bv = self.find_build_variant(variant)
        if bv is None:
            return None
        pt = self.find_project_task(task)
        if pt is None:
            return None

        groups = self.task_group_map()
        for unit in bv.tasks:
            if unit.name == task:
                resolved = replace(unit)
                resolved.populate(pt)
                return resolved
            tg = groups.get(unit.name)
            if tg is not None and task in tg.tasks:
                resolved = replace(unit, name=task, is_group=True, group_name=tg.name)
                resolved.populate(pt)
                return resolved
        return None

    def find_tasks_for_variant(self, variant: str) -> list[str] | None:
        """Names listed on *variant* (groups unexpanded), or ``None``."""
        bv = self.find_build_variant(variant)
        if bv is None:
            return None
        return [unit.name for unit in bv.tasks]

    def find_all_variants(self) -> list[str]:
        return [bv.name for bv in self.build_variants]

    def find_all_build_variant_tasks(self) -> list[BuildVariantTaskUnit]:
        """Every directly referenced task unit of every variant, populated."""
        by_name = {t.name: t for t in self.tasks}
        units: list[BuildVariantTaskUnit] = []
        for bv in self.build_variants:
            for unit in bv.tasks:
                pt = by_name.get(unit.name)
                if pt is None:
                    continue
                resolved = replace(unit)
                resolved.populate(pt)
                units.append(resolved)
        return units

    def find_variants_with_task(self, task: str) -> list[str]:
        """Variants that reference *task* directly (no groups, no display tasks)."""
        return [
            bv.name
            for bv in self.build_variants
            if any(unit.name == task for unit in bv.tasks)
        ]

    def get_variants_with_task(self, task: str) -> list[str]:
        """Variants that carry *task* in any form, sorted by name.

        Looks at direct references, task-group membership, display task
        names, and display task members.
        """
        groups = self.task_group_map()
        found: set[str] = set()
        for bv in self.build_variants:
            if self._variant_mentions(bv, task, groups):
                found.add(bv.name)
        return sorted(found)

    @staticmethod
    def _variant_mentions(bv: BuildVariant, task: str, groups: dict[str, TaskGroup]) -> bool:
        for unit in bv.tasks:
            if unit.name == task:
                return True
            tg = groups.get(unit.name)
            if tg is not None and task in tg.tasks:
                return True
        for dt in bv.display_tasks:
            if dt.name == task or task in dt.execution_tasks:
                return True
        return False

    def get_variant_mappings(self) -> dict[str, str]:
        return {bv.name: bv.display_name for bv in self.build_variants}

    def find_distro_name_for_task(self, t: TaskRecord) -> str:
        """First distro for *t*: the unit's own distros, then the variant's ``run_on``."""
        try:
            bv = self.build_variants.get(t.build_variant)
        except NotFoundError as e:
            raise NotFoundError(f"problem finding buildvariant for task '{t.id}': {e}") from e
        try:
            unit = bv.get(t.display_name)
        except NotFoundError as e:
            raise NotFoundError(f"problem finding buildvarianttask for task '{t.id}': {e}") from e

        if unit.distros:
            return unit.distros[0]
        if bv.run_on:
            return bv.run_on[0]
        raise NotFoundError(f"cannot find the distro for {t.id}")

    # ── commands ─────────────────────────────────────────────────

    def tasks_that_call_command(self, find: str) -> dict[str, int]:
        """Map task name -> number of calls to *find*, direct or via functions."""
        per_function: dict[str, int] = {}
        for fname, body in self.functions.items():
            for cmd in body.list():
                if cmd.command == find:
                    per_function[fname] = per_function.get(fname, 0) + 1

        per_task: dict[str, int] = {}
        for t in self.tasks:
            for cmd in t.commands:
                if cmd.function and cmd.function in per_function:
                    per_task[t.name] = per_task.get(t.name, 0) + per_function[cmd.function]
                if cmd.command == find:
                    per_task[t.name] = per_task.get(t.name, 0) + 1
        return per_task

    def is_generate_task(self, task: str) -> bool:
        return task in self.tasks_that_call_command(GENERATE_TASKS_COMMAND)
