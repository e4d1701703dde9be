"""Tests for cigraph.graph.dependencies.include_direct_dependencies."""

from __future__ import annotations

from cigraph.graph.dependencies import include_direct_dependencies
from cigraph.graph.pairs import TVPair
from cigraph.project.model import (
    BuildVariant,
    BuildVariantTaskUnit,
    Project,
    ProjectTask,
    TaskUnitDependency,
)


def _project(*deps: TaskUnitDependency) -> Project:
    return Project(
        tasks=[
            ProjectTask(name="compile"),
            ProjectTask(name="test", depends_on=list(deps)),
            ProjectTask(name="package"),
        ],
        build_variants=[
            BuildVariant(
                name="v1",
                tasks=[
                    BuildVariantTaskUnit(name="compile"),
                    BuildVariantTaskUnit(name="test"),
                    BuildVariantTaskUnit(name="package"),
                ],
            ),
            BuildVariant(name="v2", tasks=[BuildVariantTaskUnit(name="compile")]),
        ],
    )


class TestIncludeDirectDependencies:
    def test_same_variant_default(self):
        p = _project(TaskUnitDependency(name="compile"))
        assert include_direct_dependencies(p, [TVPair("v1", "test")]) == [
            TVPair("v1", "test"),
            TVPair("v1", "compile"),
        ]

    def test_explicit_variant(self):
        p = _project(TaskUnitDependency(name="compile", variant="v2"))
        assert include_direct_dependencies(p, [TVPair("v1", "test")]) == [
            TVPair("v1", "test"),
            TVPair("v2", "compile"),
        ]

    def test_all_variants(self):
        p = _project(TaskUnitDependency(name="compile", variant="*"))
        out = include_direct_dependencies(p, [TVPair("v1", "test")])
        assert set(out) == {TVPair("v1", "test"), TVPair("v1", "compile"), TVPair("v2", "compile")}

    def test_all_tasks_skips_self(self):
        p = _project(TaskUnitDependency(name="*"))
        out = include_direct_dependencies(p, [TVPair("v1", "test")])
        assert out == [TVPair("v1", "test"), TVPair("v1", "compile"), TVPair("v1", "package")]

    def test_patch_optional_skipped(self):
        p = _project(TaskUnitDependency(name="compile", patch_optional=True))
        assert include_direct_dependencies(p, [TVPair("v1", "test")]) == [TVPair("v1", "test")]

    def test_unresolvable_target_skipped(self):
        p = _project(TaskUnitDependency(name="package", variant="v2"))
        assert include_direct_dependencies(p, [TVPair("v1", "test")]) == [TVPair("v1", "test")]

    def test_dedup_first_seen(self):
        p = _project(TaskUnitDependency(name="compile"))
        out = include_direct_dependencies(
            p, [TVPair("v1", "compile"), TVPair("v1", "test"), TVPair("v1", "test")]
        )
        assert out == [TVPair("v1", "compile"), TVPair("v1", "test")]

    def test_only_one_level(self):
        p = Project(
            tasks=[
                ProjectTask(name="a", depends_on=[TaskUnitDependency(name="b")]),
                ProjectTask(name="b", depends_on=[TaskUnitDependency(name="c")]),
                ProjectTask(name="c"),
            ],
            build_variants=[
                BuildVariant(
                    name="v",
                    tasks=[BuildVariantTaskUnit(name=n) for n in ("a", "b", "c")],
                )
            ],
        )
        assert include_direct_dependencies(p, [TVPair("v", "a")]) == [TVPair("v", "a"), TVPair("v", "b")]

    def test_unknown_pair_passes_through(self):
        p = _project()
        assert include_direct_dependencies(p, [TVPair("zzz", "test")]) == [TVPair("zzz", "test")]
