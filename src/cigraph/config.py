"""Configuration defaults, env vars, and resolution options for cigraph."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


VERSION = "0.3.0"

# Requester values recorded on versions.
PATCH_REQUESTER = "patch_request"
GITHUB_PR_REQUESTER = "github_pull_request"
REPOTRACKER_REQUESTER = "gitter_request"
TRIGGER_REQUESTER = "trigger_request"
AD_HOC_REQUESTER = "ad_hoc"

DEFAULT_PATCH_REQUESTERS = (PATCH_REQUESTER, GITHUB_PR_REQUESTER)

# Go-style "06_01_02_15_04_05" layout used in task ids.
ID_TIME_LAYOUT = "%y_%m_%d_%H_%M_%S"

GENERATE_TASKS_COMMAND = "generate.tasks"


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Config:
    """Options consumed by the resolution entry points.

    Passed explicitly into selection and id generation; nothing in the core
    reads the environment on its own except this constructor.
    """

    # Selection
    all_keyword: str = "all"
    # None means "not set": CIGRAPH_STRICT_ALIASES decides.
    strict_aliases: bool | None = None

    # Id generation
    display_task_prefix: str = "display_"
    id_time_layout: str = ID_TIME_LAYOUT
    patch_requesters: list[str] = field(default_factory=list)

    # Misc
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.patch_requesters:
            raw = os.environ.get("CIGRAPH_PATCH_REQUESTERS", "")
            configured = [item.strip() for item in raw.split(",") if item.strip()]
            self.patch_requesters = configured or list(DEFAULT_PATCH_REQUESTERS)
        if self.strict_aliases is None:
            self.strict_aliases = _env_flag("CIGRAPH_STRICT_ALIASES")

    def is_patch_requester(self, requester: str) -> bool:
        return requester in self.patch_requesters


def is_patch_requester(requester: str, cfg: Config | None = None) -> bool:
    """Return ``True`` when *requester* denotes an on-demand (patch) build."""
    if cfg is None:
        return requester in DEFAULT_PATCH_REQUESTERS
    return cfg.is_patch_requester(requester)
