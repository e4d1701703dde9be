"""Build the ``${expansion}`` map a task's commands see at run time."""

from __future__ import annotations

from cigraph.config import GITHUB_PR_REQUESTER, ID_TIME_LAYOUT, Config
from cigraph.context import Distro, PatchContext, TaskRecord, VersionContext
from cigraph.project.model import BuildVariant


def populate_expansions(
    distro: Distro,
    version: VersionContext,
    bv: BuildVariant,
    t: TaskRecord,
    patch: PatchContext | None = None,
    cfg: Config | None = None,
) -> dict[str, str]:
    """Expansions for *t*; distro expansions override the defaults, variant expansions override both."""
    expansions: dict[str, str] = {
        "execution": str(t.execution),
        "version_id": t.version,
        "task_id": t.id,
        "task_name": t.display_name,
        "build_id": t.build_id,
        "build_variant": t.build_variant,
        "workdir": distro.work_dir,
        "revision": t.revision,
        "project": t.project,
        "branch_name": version.branch,
        "author": version.author,
        "distro_id": distro.id,
        "created_at": version.create_time.strftime(cfg.id_time_layout if cfg else ID_TIME_LAYOUT),
    }

    if version.is_patch(cfg):
        expansions["is_patch"] = "true"
        expansions["revision_order_id"] = f"{version.author}_{version.revision_order_number}"
        if version.requester == GITHUB_PR_REQUESTER and patch is not None:
            gh = patch.github_patch_data
            expansions["github_pr_number"] = str(gh.pr_number)
            expansions["github_org"] = gh.base_owner
            expansions["github_repo"] = gh.base_repo
            expansions["github_author"] = gh.author
    else:
        expansions["revision_order_id"] = str(version.revision_order_number)

    for key, value in distro.expansions:
        expansions[key] = value
    expansions.update(bv.expansions)
    return expansions
