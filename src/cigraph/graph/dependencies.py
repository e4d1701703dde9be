"""Dependency expansion of a selected pair set over direct ``depends_on`` edges.

The resolver takes any callable with the :data:`DependencyCloser` shape; the
default here follows each selected pair's own dependencies one level deep.
Full transitive closure belongs to the caller's closer.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from cigraph import log
from cigraph.graph.pairs import TVPair, TVPairSet
from cigraph.project.model import Project, TaskUnitDependency

# Matches every variant (as ``variant``) or every task (as ``name``).
ALL_DEPENDENCIES = "*"

DependencyCloser = Callable[[Project, TVPairSet], TVPairSet]


def _targets(project: Project, pair: TVPair, dep: TaskUnitDependency) -> list[TVPair]:
    if dep.variant == ALL_DEPENDENCIES:
        variants = project.find_all_variants()
    else:
        variants = [dep.variant or pair.variant]

    out: list[TVPair] = []
    for variant in variants:
        if dep.name == ALL_DEPENDENCIES:
            bv = project.find_build_variant(variant)
            names = [t.name for t in project.tasks] if bv is not None else []
        else:
            names = [dep.name]
        for name in names:
            target = TVPair(variant, name)
            if target == pair:
                continue
            if project.find_task_for_variant(name, variant) is None:
                continue
            out.append(target)
    return out


def include_direct_dependencies(project: Project, pairs: Iterable[TVPair]) -> TVPairSet:
    """Return *pairs* plus their direct dependencies, deduplicated in first-seen order.

    ``patch_optional`` dependencies are left out, as are dependencies that
    do not resolve on their variant.
    """
    selected = TVPairSet(pairs)
    result = TVPairSet()
    seen: set[TVPair] = set()

    def _add(p: TVPair) -> None:
        if p not in seen:
            seen.add(p)
            result.append(p)

    for pair in selected:
        _add(pair)
        unit = project.find_task_for_variant(pair.task_name, pair.variant)
        if unit is None:
            continue
        for dep in unit.depends_on or []:
            if dep.patch_optional:
                log.debug(f"Skipping patch-optional dependency {dep.name} of {pair}")
                continue
            for target in _targets(project, pair, dep):
                _add(target)
    return result
