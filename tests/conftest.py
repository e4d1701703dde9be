"""Shared fixtures for cigraph tests.

File handling in tests:
- Use tmp_path for any project or alias document so tests stay isolated.
- Use cigraph.io_utils write_text for consistent UTF-8 I/O.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from cigraph import log
from cigraph.config import PATCH_REQUESTER, REPOTRACKER_REQUESTER
from cigraph.context import VersionContext
from cigraph.io_utils import write_text
from cigraph.project.loader import load_project
from cigraph.project.model import (
    BuildVariant,
    BuildVariantTaskUnit,
    DisplayTask,
    Project,
    ProjectTask,
    TaskGroup,
)

SAMPLE_PROJECT_YAML = """\
identifier: proj
command_type: system
pre:
  command: shell.exec
  params:
    script: echo pre
post:
  - command: shell.exec
    params:
      script: echo post
timeout:
  - command: shell.exec
functions:
  gen:
    - command: generate.tasks
      params:
        files: [gen.json]
  fetch:
    command: git.get_project
modules:
  - name: enterprise
    repo: git@github.com:acme/enterprise.git
    branch: main
tasks:
  - name: compile
    commands:
      - func: fetch
      - command: shell.exec
  - name: test
    priority: 10
    depends_on: [compile]
    tags: [unit]
  - name: lint
    patchable: false
    tags: [unit]
  - name: integration
    depends_on:
      - name: compile
        patch_optional: true
    tags: [slow]
  - name: generator
    commands:
      - func: gen
  - name: tg_one
    tags: [unit]
  - name: tg_two
task_groups:
  - name: tg
    max_hosts: 2
    share_processes: true
    setup_group:
      command: shell.exec
    tasks: [tg_one, tg_two]
buildvariants:
  - name: ubuntu1604
    display_name: Ubuntu 16.04
    run_on: [ubuntu1604-test]
    expansions:
      python: /opt/python3
    tasks:
      - compile
      - name: test
        distros: [ubuntu1604-large]
      - lint
      - integration
      - tg
    display_tasks:
      - name: checks
        execution_tasks: [test, lint]
  - name: windows
    display_name: Windows
    run_on: [windows-64]
    tasks:
      - compile
      - name: test
        patchable: false
      - name: lint
        patchable: true
  - name: legacy
    display_name: Legacy
    disabled: true
    tasks: [compile]
"""


@pytest.fixture(autouse=True)
def _quiet_logs():
    """Keep debug output off unless a test turns it on."""
    log.set_verbose(False)
    yield
    log.set_verbose(False)


@pytest.fixture
def sample_yaml() -> str:
    return SAMPLE_PROJECT_YAML


@pytest.fixture
def sample_project() -> Project:
    """The sample document above, loaded through the YAML loader."""
    return load_project(SAMPLE_PROJECT_YAML)


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    """The sample document written to disk."""
    path = tmp_path / "proj.yml"
    write_text(path, SAMPLE_PROJECT_YAML)
    return path


CREATED = datetime(2024, 1, 2, 3, 4, 5)


@pytest.fixture
def mainline_version() -> VersionContext:
    return VersionContext(
        id="v1",
        revision="abc123",
        requester=REPOTRACKER_REQUESTER,
        create_time=CREATED,
        identifier="proj",
    )


@pytest.fixture
def patch_version() -> VersionContext:
    return VersionContext(
        id="p1",
        revision="abc123",
        requester=PATCH_REQUESTER,
        create_time=CREATED,
        identifier="proj",
    )


def _make_display_project() -> Project:
    """Variant V with display task D -> [e1, e2] plus an unrelated task."""
    return Project(
        identifier="proj",
        tasks=[ProjectTask(name="e1"), ProjectTask(name="e2"), ProjectTask(name="other")],
        build_variants=[
            BuildVariant(
                name="V",
                display_name="V",
                tasks=[
                    BuildVariantTaskUnit(name="e1"),
                    BuildVariantTaskUnit(name="e2"),
                    BuildVariantTaskUnit(name="other"),
                ],
                display_tasks=[DisplayTask(name="D", execution_tasks=["e1", "e2"])],
            ),
        ],
    )


@pytest.fixture
def make_display_project():
    """Factory fixture for the small display-task project."""
    return _make_display_project


def _make_group_project() -> Project:
    """Variant v1 carries task group g -> [a, b] and a standalone task c."""
    return Project(
        identifier="proj",
        tasks=[ProjectTask(name="a"), ProjectTask(name="b"), ProjectTask(name="c")],
        task_groups=[TaskGroup(name="g", tasks=["a", "b"])],
        build_variants=[
            BuildVariant(
                name="v1",
                display_name="v1",
                tasks=[
                    BuildVariantTaskUnit(name="g", is_group=True, group_name="g"),
                    BuildVariantTaskUnit(name="c"),
                ],
            ),
        ],
    )


@pytest.fixture
def make_group_project():
    """Factory fixture for the small task-group project."""
    return _make_group_project
