"""cigraph CLI: inspect how a project document resolves.

Installed as the ``cigraph`` console_script; ``python -m cigraph`` works too.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import click

from cigraph import __version__
from cigraph import log as glog
from cigraph.config import PATCH_REQUESTER, REPOTRACKER_REQUESTER, Config
from cigraph.context import PatchContext, VersionContext
from cigraph.errors import CigraphError
from cigraph.graph.alias import load_alias_store
from cigraph.graph.pairs import TaskIdTable, TaskVariantPairs, TVPair
from cigraph.graph.selector import build_project_tv_pairs
from cigraph.graph.task_id import new_patch_task_id_table, new_task_id_table
from cigraph.project.loader import load_project_file
from cigraph.project.model import Project

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

_DATE_FORMATS = ["%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d"]


def _load(path: Path, identifier: str) -> Project:
    try:
        return load_project_file(path, identifier)
    except CigraphError as e:
        raise click.ClickException(str(e)) from e


def _resolve(
    project: Project,
    cfg: Config,
    variants: tuple[str, ...],
    tasks: tuple[str, ...],
    alias: str,
    aliases_file: Path | None,
) -> TaskVariantPairs:
    if alias and aliases_file is None:
        raise click.UsageError("--alias needs --aliases FILE.")
    patch = PatchContext(build_variants=variants, tasks=tasks, alias=alias)
    try:
        store = load_alias_store(aliases_file, project.identifier) if aliases_file else None
        return build_project_tv_pairs(project, patch, alias_store=store, cfg=cfg).pairs
    except CigraphError as e:
        raise click.ClickException(str(e)) from e


def _emit_pairs(title: str, pairs: list[TVPair], as_table: bool) -> None:
    if as_table:
        glog.table(title, ["Variant", "Task"], pairs)
        return
    for pair in pairs:
        click.echo(str(pair))


def _emit_ids(title: str, table: TaskIdTable, as_table: bool) -> None:
    rows = [(pair.variant, pair.task_name, task_id) for pair, task_id in sorted(table.items())]
    if as_table:
        glog.table(title, ["Variant", "Task", "Id"], rows)
        return
    for variant, task, task_id in rows:
        click.echo(f"{variant}/{task}\t{task_id}")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.option("--strict-aliases", is_flag=True, help="Fail when an alias cannot be resolved")
@click.version_option(__version__, prog_name="cigraph")
@click.pass_context
def main(ctx: click.Context, verbose: bool, strict_aliases: bool) -> None:
    """cigraph: resolve CI project definitions into task graphs.

    \b
    EXAMPLES:
      cigraph pairs project.yml -b all -t all
      cigraph pairs project.yml --alias required --aliases aliases.yml
      cigraph ids project.yml --revision abc123 --version-id v1 --created-at 2024-01-02
      cigraph variants-with-task project.yml compile
    """
    glog.set_verbose(verbose)
    ctx.obj = Config(verbose=verbose, strict_aliases=strict_aliases or None)


@main.command()
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-b", "--variant", "variants", multiple=True, help="Build variant (or 'all')")
@click.option("-t", "--task", "tasks", multiple=True, help="Task name (or 'all')")
@click.option("--alias", default="", help="Patch alias to apply")
@click.option(
    "--aliases",
    "aliases_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with alias rules",
)
@click.option("--identifier", default="", help="Project identifier override")
@click.option("--table", "as_table", is_flag=True, help="Render as tables")
@click.pass_obj
def pairs(
    cfg: Config,
    project_file: Path,
    variants: tuple[str, ...],
    tasks: tuple[str, ...],
    alias: str,
    aliases_file: Path | None,
    identifier: str,
    as_table: bool,
) -> None:
    """Print the task/variant pairs a patch request resolves to."""
    project = _load(project_file, identifier)
    resolved = _resolve(project, cfg, variants, tasks, alias, aliases_file)

    if not resolved.exec_tasks:
        glog.warn("Nothing to run: the request matched no tasks.")
    _emit_pairs("Execution tasks", list(resolved.exec_tasks), as_table)
    if resolved.display_tasks:
        if not as_table:
            click.echo("# display tasks")
        _emit_pairs("Display tasks", list(resolved.display_tasks), as_table)
    if as_table and resolved.exec_tasks:
        glog.success(
            f"Resolved {len(resolved.exec_tasks)} task pair(s) and "
            f"{len(resolved.display_tasks)} display pair(s)"
        )


@main.command()
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--revision", required=True, help="Revision the version was built from")
@click.option("--version-id", required=True, help="Version id")
@click.option("--created-at", type=click.DateTime(formats=_DATE_FORMATS), required=True, help="Version creation time")
@click.option("--requester", default="", help=f"Version requester (e.g. {REPOTRACKER_REQUESTER}, {PATCH_REQUESTER})")
@click.option("-b", "--variant", "variants", multiple=True, help="Restrict to these variants")
@click.option("-t", "--task", "tasks", multiple=True, help="Restrict to these tasks")
@click.option("--identifier", default="", help="Project identifier override")
@click.option("--table", "as_table", is_flag=True, help="Render as tables")
@click.pass_obj
def ids(
    cfg: Config,
    project_file: Path,
    revision: str,
    version_id: str,
    created_at: datetime,
    requester: str,
    variants: tuple[str, ...],
    tasks: tuple[str, ...],
    identifier: str,
    as_table: bool,
) -> None:
    """Print generated task ids.

    Without -b/-t every task on every variant gets an id; with them, only
    the resolved request does.
    """
    project = _load(project_file, identifier)
    version = VersionContext(
        id=version_id,
        revision=revision,
        requester=requester or REPOTRACKER_REQUESTER,
        create_time=created_at,
        identifier=project.identifier,
    )
    if as_table:
        glog.info(f"Task ids for version {version.id} (requester {version.requester})")
    if variants or tasks:
        resolved = _resolve(project, cfg, variants or (cfg.all_keyword,), tasks or (cfg.all_keyword,), "", None)
        config = new_patch_task_id_table(project, version, resolved, cfg)
    else:
        config = new_task_id_table(project, version, cfg)

    _emit_ids("Task ids", config.execution_tasks, as_table)
    if config.display_tasks:
        if not as_table:
            click.echo("# display tasks")
        _emit_ids("Display task ids", config.display_tasks, as_table)


@main.command("variants-with-task")
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("task")
def variants_with_task(project_file: Path, task: str) -> None:
    """List variants that carry TASK directly, via a task group, or via a display task."""
    project = _load(project_file, "")
    found = project.get_variants_with_task(task)
    if not found:
        raise click.ClickException(f"No build variant carries task '{task}'.")
    for name in found:
        click.echo(name)
