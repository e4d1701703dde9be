"""Patch alias resolution: stored variant/task/tag patterns -> task/variant pairs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from cigraph import log
from cigraph.errors import InvalidPatternError, ProjectLoadError
from cigraph.graph.pairs import TVPair, TVPairSet
from cigraph.io_utils import read_yaml
from cigraph.project.model import Project


@dataclass(frozen=True)
class AliasRule:
    """One stored rule of a named alias.

    ``variant`` and ``task`` are regular expressions matched against the
    whole name. A task also matches when it carries any of ``tags``.
    """

    alias: str
    variant: str
    task: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)


class AliasStore(Protocol):
    def find(self, project_identifier: str, alias: str) -> list[AliasRule]:
        """Rules for *alias* on the project. An unknown alias yields ``[]``."""
        ...


class InMemoryAliasStore:
    """Alias rules keyed by ``(project identifier, alias name)``."""

    def __init__(self) -> None:
        self._rules: dict[tuple[str, str], list[AliasRule]] = {}

    def add(self, project_identifier: str, rule: AliasRule) -> None:
        self._rules.setdefault((project_identifier, rule.alias), []).append(rule)

    def find(self, project_identifier: str, alias: str) -> list[AliasRule]:
        return list(self._rules.get((project_identifier, alias), []))


def load_alias_store(path: Path | str, project_identifier: str) -> InMemoryAliasStore:
    """Load ``{alias: [{variant, task, tags}, ...]}`` YAML for one project."""
    data = read_yaml(path) or {}
    if not isinstance(data, dict):
        raise ProjectLoadError(f"alias file {path} must map alias names to rule lists")

    store = InMemoryAliasStore()
    for alias, rules in data.items():
        if not isinstance(rules, list):
            raise ProjectLoadError(f"alias '{alias}' must be a list of rules")
        for raw in rules:
            if not isinstance(raw, dict):
                raise ProjectLoadError(f"alias '{alias}' has a rule that is not a mapping")
            store.add(
                project_identifier,
                AliasRule(
                    alias=str(alias),
                    variant=str(raw.get("variant", "") or ""),
                    task=str(raw.get("task", "") or ""),
                    tags=tuple(str(t) for t in raw.get("tags", None) or ()),
                ),
            )
    return store


def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e)) from e


def build_pairs_with_alias(
    project: Project, alias: str, store: AliasStore
) -> tuple[TVPairSet, TVPairSet]:
    """Resolve *alias* into ``(exec pairs, display pairs)``.

    Every rule's patterns are compiled before any matching starts, so a bad
    pattern anywhere aborts with :class:`InvalidPatternError` and no partial
    result.
    """
    rules = store.find(project.identifier, alias)
    if not rules:
        log.debug(f"Alias {alias!r} has no rules on project {project.identifier!r}")
        return TVPairSet(), TVPairSet()

    compiled = [(rule, _compile(rule.variant), _compile(rule.task)) for rule in rules]

    pairs = TVPairSet()
    display_pairs = TVPairSet()
    for rule, variant_re, task_re in compiled:
        wanted_tags = set(rule.tags)
        for bv in project.build_variants:
            if not variant_re.fullmatch(bv.name):
                continue
            for pt in project.tasks:
                name_hit = bool(rule.task) and task_re.fullmatch(pt.name) is not None
                tag_hit = bool(wanted_tags.intersection(pt.tags))
                if not (name_hit or tag_hit):
                    continue
                unit = project.find_task_for_variant(pt.name, bv.name)
                if unit is None or unit.patchable is False:
                    continue
                pairs.append(TVPair(bv.name, pt.name))

            if not rule.task:
                continue
            for dt in bv.display_tasks:
                if task_re.fullmatch(dt.name):
                    display_pairs.append(TVPair(bv.name, dt.name))

    log.debug(
        f"Alias {alias!r}: {len(pairs)} task pair(s), {len(display_pairs)} display pair(s)"
    )
    return pairs, display_pairs
