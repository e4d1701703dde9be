"""Task/variant graph construction: selection, aliases, display tasks, ids."""

from cigraph.graph.pairs import TaskIdConfig, TaskIdTable, TaskVariantPairs, TVPair, TVPairSet
from cigraph.graph.selector import Resolution, build_project_tv_pairs, select_pairs
from cigraph.graph.task_id import generate_id, new_patch_task_id_table, new_task_id_table

__all__ = [
    "Resolution",
    "TaskIdConfig",
    "TaskIdTable",
    "TaskVariantPairs",
    "TVPair",
    "TVPairSet",
    "build_project_tv_pairs",
    "generate_id",
    "new_patch_task_id_table",
    "new_task_id_table",
    "select_pairs",
]
