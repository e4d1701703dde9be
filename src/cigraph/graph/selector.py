"""Turn a selection request into the task/variant graph a scheduler consumes.

Flow for an on-demand build::

    requested variants x requested tasks   (wildcards expanded)
        + alias pairs                       (optional)
        -> display task expansion
        -> dependency closer
        -> TaskVariantPairs
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from cigraph import log
from cigraph.config import Config
from cigraph.context import PatchContext
from cigraph.errors import CigraphError
from cigraph.graph.alias import AliasStore, build_pairs_with_alias
from cigraph.graph.dependencies import DependencyCloser, include_direct_dependencies
from cigraph.graph.display import extract_display_tasks
from cigraph.graph.pairs import TaskVariantPairs, TVPair, TVPairSet
from cigraph.project.model import Project


@dataclass
class Resolution:
    """Result of :func:`build_project_tv_pairs`."""

    pairs: TaskVariantPairs
    patch: PatchContext


def _is_wildcard(names: Sequence[str], cfg: Config) -> bool:
    return len(names) == 1 and names[0] == cfg.all_keyword


def expand_variants(project: Project, names: Sequence[str], cfg: Config | None = None) -> list[str]:
    """``["all"]`` -> every enabled variant in project order; anything else as given."""
    cfg = cfg or Config()
    if not _is_wildcard(names, cfg):
        return list(names)
    return [bv.name for bv in project.build_variants if not bv.disabled]


def expand_tasks(project: Project, names: Sequence[str], cfg: Config | None = None) -> list[str]:
    """``["all"]`` -> every task not explicitly marked ``patchable: false``."""
    cfg = cfg or Config()
    if not _is_wildcard(names, cfg):
        return list(names)
    return [t.name for t in project.tasks if t.patchable is not False]


def select_pairs(
    project: Project,
    variants: Sequence[str],
    tasks: Sequence[str],
    *,
    is_patch: bool = True,
    cfg: Config | None = None,
) -> TVPairSet:
    """Cross product of *variants* and *tasks*, kept only where the task resolves.

    Unknown names contribute nothing. For patches, pairs whose resolved
    ``patchable`` is ``False`` are dropped too.
    """
    cfg = cfg or Config()
    pairs = TVPairSet()
    for variant in expand_variants(project, variants, cfg):
        for task in expand_tasks(project, tasks, cfg):
            unit = project.find_task_for_variant(task, variant)
            if unit is None:
                continue
            if is_patch and unit.patchable is False:
                log.debug(f"Skipping {variant}/{task}: not patchable")
                continue
            pairs.append(TVPair(variant, task))
    return pairs


def _runnable_in_patch(project: Project, pairs: TVPairSet) -> TVPairSet:
    """Drop pairs that do not resolve on their variant or are not patchable there."""
    kept = TVPairSet()
    for pair in pairs:
        unit = project.find_task_for_variant(pair.task_name, pair.variant)
        if unit is None or unit.patchable is False:
            log.debug(f"Dropping display member {pair}: not runnable in a patch")
            continue
        kept.append(pair)
    return kept


def build_project_tv_pairs(
    project: Project,
    patch: PatchContext,
    *,
    alias_store: AliasStore | None = None,
    dependency_closer: DependencyCloser = include_direct_dependencies,
    cfg: Config | None = None,
) -> Resolution:
    """Resolve *patch* against *project*.

    Alias failures are logged and the alias is ignored, unless
    ``cfg.strict_aliases`` is set, in which case they propagate. An empty
    result is not an error.
    """
    cfg = cfg or Config()
    variants = expand_variants(project, patch.build_variants, cfg)
    tasks = expand_tasks(project, patch.tasks, cfg)

    pairs = select_pairs(project, variants, tasks, is_patch=True, cfg=cfg)
    log.debug(f"Selected {len(pairs)} pair(s) from {len(variants)} variant(s) x {len(tasks)} task(s)")

    if patch.alias:
        if alias_store is None:
            log.warn(f"Alias {patch.alias!r} requested but no alias store configured")
        else:
            try:
                alias_pairs, alias_display = build_pairs_with_alias(project, patch.alias, alias_store)
            except CigraphError as e:
                if cfg.strict_aliases:
                    raise
                log.error(f"failed to get task/variant pairs for alias {patch.alias!r}: {e}")
            else:
                pairs.extend(alias_pairs)
                for pair in alias_display:
                    if pair.variant not in variants:
                        variants.append(pair.variant)
                    if pair.task_name not in tasks:
                        tasks.append(pair.task_name)

    resolved = extract_display_tasks(pairs, tasks, variants, project)
    resolved.exec_tasks = _runnable_in_patch(project, resolved.exec_tasks)
    resolved.exec_tasks = dependency_closer(project, resolved.exec_tasks)
    resolved.display_tasks = resolved.display_tasks.deduped()

    log.debug(
        f"Resolved {len(resolved.exec_tasks)} task pair(s) and "
        f"{len(resolved.display_tasks)} display pair(s)"
    )
    return Resolution(
        pairs=resolved,
        patch=patch.with_variants_tasks(resolved.to_variant_tasks()),
    )
