"""Read-only records describing the version, patch and task a resolution runs for."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from cigraph.config import Config, is_patch_requester


def _epoch() -> datetime:
    return datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class VersionContext:
    """The persisted version a task graph is generated for.

    ``create_time`` is read from the stored version, never regenerated, so
    ids derived from it stay stable across re-runs.
    """

    id: str
    revision: str
    requester: str = ""
    create_time: datetime = field(default_factory=_epoch)
    identifier: str = ""
    author: str = ""
    branch: str = ""
    revision_order_number: int = 0
    config: str = ""

    def is_patch(self, cfg: Config | None = None) -> bool:
        return is_patch_requester(self.requester, cfg)


@dataclass(frozen=True)
class GithubPatchData:
    pr_number: int = 0
    base_owner: str = ""
    base_repo: str = ""
    author: str = ""


@dataclass(frozen=True)
class DisplayTaskRef:
    name: str
    exec_tasks: tuple[str, ...] = ()


@dataclass(frozen=True)
class VariantTasks:
    """Everything selected on one variant, regrouped from a pair set."""

    variant: str
    tasks: tuple[str, ...] = ()
    display_tasks: tuple[DisplayTaskRef, ...] = ()


@dataclass(frozen=True)
class PatchContext:
    """What an on-demand build asked for."""

    build_variants: tuple[str, ...] = ()
    tasks: tuple[str, ...] = ()
    alias: str = ""
    variants_tasks: tuple[VariantTasks, ...] = ()
    github_patch_data: GithubPatchData = field(default_factory=GithubPatchData)

    def with_variants_tasks(self, variants_tasks: list[VariantTasks]) -> PatchContext:
        """Return a copy whose requested variants/tasks match a resolution."""
        variants: list[str] = []
        tasks: list[str] = []
        for vt in variants_tasks:
            if vt.variant not in variants:
                variants.append(vt.variant)
            for name in vt.tasks:
                if name not in tasks:
                    tasks.append(name)
            for dt in vt.display_tasks:
                if dt.name not in tasks:
                    tasks.append(dt.name)
        return replace(
            self,
            build_variants=tuple(variants),
            tasks=tuple(tasks),
            variants_tasks=tuple(variants_tasks),
        )


@dataclass(frozen=True)
class Distro:
    id: str
    work_dir: str = ""
    expansions: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class TaskRecord:
    """A scheduled task instance, as the executor sees it."""

    id: str
    display_name: str
    build_variant: str
    project: str = ""
    version: str = ""
    revision: str = ""
    build_id: str = ""
    execution: int = 0
    task_group: str = ""


@dataclass(frozen=True)
class TaskConfig:
    """Context handed to a running task. Any member may be missing."""

    task: TaskRecord | None = None
    version: VersionContext | None = None
