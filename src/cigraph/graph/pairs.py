"""Task/variant pairs, the identity keys of a selected task graph, and id tables."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple

from cigraph.context import DisplayTaskRef, VariantTasks


class TVPair(NamedTuple):
    """``(variant, task_name)``; equality is exact and case-sensitive."""

    variant: str
    task_name: str

    def __str__(self) -> str:
        return f"{self.variant}/{self.task_name}"


class TVPairSet(list[TVPair]):
    """Ordered pairs. Duplicates are allowed; see :meth:`deduped`."""

    def by_variant(self, variant: str) -> TVPairSet:
        return TVPairSet(p for p in self if p.variant == variant)

    def task_names(self, variant: str) -> list[str]:
        """Unique task names on *variant*, first-seen order."""
        names: list[str] = []
        seen: set[str] = set()
        for p in self:
            if p.variant != variant or p.task_name in seen:
                continue
            seen.add(p.task_name)
            names.append(p.task_name)
        return names

    def variants(self) -> list[str]:
        """Unique variants, first-seen order."""
        out: list[str] = []
        seen: set[str] = set()
        for p in self:
            if p.variant in seen:
                continue
            seen.add(p.variant)
            out.append(p.variant)
        return out

    def deduped(self) -> TVPairSet:
        return TVPairSet(dict.fromkeys(self))


@dataclass
class TaskVariantPairs:
    """A complete resolution: pairs to schedule plus display pairs for reporting."""

    exec_tasks: TVPairSet = field(default_factory=TVPairSet)
    display_tasks: TVPairSet = field(default_factory=TVPairSet)

    def to_variant_tasks(self) -> list[VariantTasks]:
        """Regroup the pairs per variant, variants in first-seen order."""
        tasks: dict[str, list[str]] = {}
        displays: dict[str, list[DisplayTaskRef]] = {}
        for p in self.exec_tasks:
            names = tasks.setdefault(p.variant, [])
            if p.task_name not in names:
                names.append(p.task_name)
        for p in self.display_tasks:
            refs = displays.setdefault(p.variant, [])
            tasks.setdefault(p.variant, [])
            if all(ref.name != p.task_name for ref in refs):
                refs.append(DisplayTaskRef(name=p.task_name))
        return [
            VariantTasks(
                variant=variant,
                tasks=tuple(names),
                display_tasks=tuple(displays.get(variant, ())),
            )
            for variant, names in tasks.items()
        ]


class TaskIdTable(dict[TVPair, str]):
    """``TVPair -> task id``. Missing pairs look up as ``None``, never a made-up id."""

    def add_id(self, variant: str, task_name: str, task_id: str) -> None:
        self[TVPair(variant, task_name)] = task_id

    def get_id(self, variant: str, task_name: str) -> str | None:
        return self.get(TVPair(variant, task_name))

    def _ordered(self) -> Iterable[tuple[TVPair, str]]:
        return sorted(self.items(), key=lambda item: item[0])

    def get_ids_for_all_variants(self, task_name: str) -> list[str]:
        """Ids of *task_name* on every variant, ordered by variant."""
        return self.get_ids_for_all_variants_excluding(task_name, None)

    def get_ids_for_all_variants_excluding(
        self, task_name: str, exclude: TVPair | None
    ) -> list[str]:
        return [
            task_id
            for pair, task_id in self._ordered()
            if pair.task_name == task_name and pair != exclude and task_id
        ]

    def get_ids_for_all_tasks(self, current_variant: str, task_name: str) -> list[str]:
        """Every id except the current task's own, so dependencies never loop back."""
        current = TVPair(current_variant, task_name)
        return [task_id for pair, task_id in self._ordered() if pair != current and task_id]


@dataclass
class TaskIdConfig:
    execution_tasks: TaskIdTable = field(default_factory=TaskIdTable)
    display_tasks: TaskIdTable = field(default_factory=TaskIdTable)
