"""Resolve many patch requests against one project without letting one bad request stop the rest."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from cigraph import log
from cigraph.config import Config
from cigraph.context import PatchContext, VersionContext
from cigraph.errors import CigraphError, ErrorCollector
from cigraph.graph.alias import AliasStore
from cigraph.graph.dependencies import DependencyCloser, include_direct_dependencies
from cigraph.graph.pairs import TaskIdConfig
from cigraph.graph.selector import Resolution, build_project_tv_pairs
from cigraph.graph.task_id import new_patch_task_id_table
from cigraph.project.model import Project


@dataclass
class BatchItem:
    """One request's outcome. Exactly one of ``resolution``/``error`` is set."""

    version: VersionContext
    resolution: Resolution | None = None
    ids: TaskIdConfig | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _resolve_one(
    project: Project,
    version: VersionContext,
    patch: PatchContext,
    alias_store: AliasStore | None,
    dependency_closer: DependencyCloser,
    cfg: Config,
) -> BatchItem:
    """Resolve one request into a :class:`BatchItem`.

    Any exception becomes the request's error. Ones that are not a
    :class:`CigraphError` are wrapped in one, with the original as ``__cause__``.
    """
    try:
        resolution = build_project_tv_pairs(
            project,
            patch,
            alias_store=alias_store,
            dependency_closer=dependency_closer,
            cfg=cfg,
        )
        ids = new_patch_task_id_table(project, version, resolution.pairs, cfg)
    except CigraphError as e:
        log.error(f"Resolution failed for version {version.id}: {e}")
        return BatchItem(version=version, error=e)
    except Exception as e:
        wrapped = CigraphError(f"unexpected failure while resolving version {version.id}: {e!r}")
        wrapped.__cause__ = e
        log.error(str(wrapped))
        return BatchItem(version=version, error=wrapped)
    return BatchItem(version=version, resolution=resolution, ids=ids)


def resolve_batch(
    project: Project,
    requests: Sequence[tuple[VersionContext, PatchContext]],
    *,
    alias_store: AliasStore | None = None,
    dependency_closer: DependencyCloser = include_direct_dependencies,
    cfg: Config | None = None,
) -> tuple[list[BatchItem], ErrorCollector]:
    """Resolve every ``(version, patch)`` request in order.

    Returns one :class:`BatchItem` per request and a collector holding every
    per-request error; call ``collector.resolve()`` to turn them into a
    single :class:`~cigraph.errors.BatchError`.
    """
    cfg = cfg or Config()
    collector = ErrorCollector()
    items: list[BatchItem] = []
    for version, patch in requests:
        item = _resolve_one(project, version, patch, alias_store, dependency_closer, cfg)
        collector.add(item.error)
        items.append(item)

    failed = len(collector)
    if failed:
        log.warn(f"{failed} of {len(items)} request(s) failed to resolve")
    else:
        log.debug(f"Resolved {len(items)} request(s)")
    return items, collector
