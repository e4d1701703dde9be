"""Project data model, document loading and validation."""

from cigraph.project.model import (
    BuildVariant,
    BuildVariants,
    BuildVariantTaskUnit,
    CommandSet,
    DisplayTask,
    Module,
    PluginCommand,
    Project,
    ProjectTask,
    TaskGroup,
    TaskUnitDependency,
    TaskUnitRequirement,
)

__all__ = [
    "BuildVariant",
    "BuildVariants",
    "BuildVariantTaskUnit",
    "CommandSet",
    "DisplayTask",
    "Module",
    "PluginCommand",
    "Project",
    "ProjectTask",
    "TaskGroup",
    "TaskUnitDependency",
    "TaskUnitRequirement",
]
