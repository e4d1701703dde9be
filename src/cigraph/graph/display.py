"""Expansion between execution tasks and the display tasks that aggregate them."""

from __future__ import annotations

from collections.abc import Iterable

from cigraph.graph.pairs import TaskVariantPairs, TVPair, TVPairSet
from cigraph.project.model import Project


def extract_display_tasks(
    pairs: Iterable[TVPair],
    tasks: Iterable[str],
    variants: Iterable[str],
    project: Project,
) -> TaskVariantPairs:
    """Close *pairs* over display tasks on every requested variant.

    One pass per variant, in project order:

    1. a requested execution task pulls in the display task that lists it;
    2. every requested display task yields a display pair and an exec pair
       for each of its members.

    Display tasks nested inside other display tasks are not followed; the
    loader rejects such projects. Inputs are not modified.
    """
    exec_pairs = TVPairSet(pairs)
    requested = list(tasks)
    wanted_variants = set(variants)
    display_pairs = TVPairSet()
    added: set[str] = set()

    for bv in project.build_variants:
        if bv.name not in wanted_variants:
            continue
        for name in list(requested):
            parent = bv.get_display_task_name(name)
            if parent is not None and parent not in added:
                added.add(parent)
                if parent not in requested:
                    requested.append(parent)
        for dt in bv.display_tasks:
            if dt.name not in requested:
                continue
            display_pairs.append(TVPair(bv.name, dt.name))
            for member in dt.execution_tasks:
                exec_pairs.append(TVPair(bv.name, member))

    return TaskVariantPairs(exec_tasks=exec_pairs, display_tasks=display_pairs)
