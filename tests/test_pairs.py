"""Tests for cigraph.graph.pairs: pair sets, regrouping and id tables."""

from __future__ import annotations

from cigraph.graph.pairs import TaskIdTable, TaskVariantPairs, TVPair, TVPairSet


class TestTVPair:
    def test_str(self):
        assert str(TVPair("ubuntu1604", "compile")) == "ubuntu1604/compile"

    def test_equality_is_case_sensitive(self):
        assert TVPair("V", "t") == TVPair("V", "t")
        assert TVPair("V", "t") != TVPair("v", "t")


class TestTVPairSet:
    def _pairs(self) -> TVPairSet:
        return TVPairSet(
            [
                TVPair("a", "t1"),
                TVPair("b", "t1"),
                TVPair("a", "t2"),
                TVPair("a", "t1"),
            ]
        )

    def test_by_variant(self):
        assert self._pairs().by_variant("a") == [TVPair("a", "t1"), TVPair("a", "t2"), TVPair("a", "t1")]

    def test_task_names_unique(self):
        assert self._pairs().task_names("a") == ["t1", "t2"]
        assert self._pairs().task_names("zzz") == []

    def test_variants_first_seen(self):
        assert self._pairs().variants() == ["a", "b"]

    def test_variants_large_set(self):
        pairs = TVPairSet(TVPair(f"v{i % 50}", f"t{i}") for i in range(5000))
        assert pairs.variants() == [f"v{i}" for i in range(50)]

    def test_deduped_keeps_order(self):
        out = self._pairs().deduped()
        assert isinstance(out, TVPairSet)
        assert out == [TVPair("a", "t1"), TVPair("b", "t1"), TVPair("a", "t2")]


class TestToVariantTasks:
    def test_regroups_by_variant(self):
        tvp = TaskVariantPairs(
            exec_tasks=TVPairSet([TVPair("a", "t1"), TVPair("b", "t2"), TVPair("a", "t1")]),
            display_tasks=TVPairSet([TVPair("c", "D"), TVPair("c", "D")]),
        )
        out = tvp.to_variant_tasks()
        assert [vt.variant for vt in out] == ["a", "b", "c"]
        assert out[0].tasks == ("t1",)
        assert out[2].tasks == ()
        assert [d.name for d in out[2].display_tasks] == ["D"]

    def test_empty(self):
        assert TaskVariantPairs().to_variant_tasks() == []


class TestTaskIdTable:
    """Lookups never invent ids and list helpers are ordered."""

    def _table(self) -> TaskIdTable:
        table = TaskIdTable()
        table.add_id("b", "compile", "id-b-compile")
        table.add_id("a", "compile", "id-a-compile")
        table.add_id("a", "test", "id-a-test")
        return table

    def test_get_id(self):
        assert self._table().get_id("a", "test") == "id-a-test"

    def test_missing_is_none(self):
        assert self._table().get_id("a", "lint") is None

    def test_ids_for_all_variants(self):
        assert self._table().get_ids_for_all_variants("compile") == ["id-a-compile", "id-b-compile"]

    def test_ids_for_all_variants_excluding(self):
        table = self._table()
        assert table.get_ids_for_all_variants_excluding("compile", TVPair("a", "compile")) == [
            "id-b-compile"
        ]

    def test_ids_for_all_tasks_skips_current(self):
        assert self._table().get_ids_for_all_tasks("a", "compile") == ["id-a-test", "id-b-compile"]

    def test_add_id_overwrites(self):
        table = self._table()
        table.add_id("a", "test", "new")
        assert table.get_id("a", "test") == "new"
        assert len(table) == 3
