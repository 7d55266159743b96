"""Loaders for the planner's file inputs: the runmode mapping and the dependency lists."""

from aggregate_planner.inputs.dependencies import (
    DEFAULT_DEPENDENCIES_FILE,
    DependencyFileError,
    load_dependencies,
    parse_dependencies,
)
from aggregate_planner.inputs.runmode_mapping import (
    DEFAULT_MAPPING_FILE,
    MappingNotFoundError,
    RunmodeMappingError,
    load_properties,
    load_runmode_mapping,
    parse_properties,
)

__all__ = [
    "DEFAULT_DEPENDENCIES_FILE",
    "DEFAULT_MAPPING_FILE",
    "DependencyFileError",
    "MappingNotFoundError",
    "RunmodeMappingError",
    "load_dependencies",
    "load_properties",
    "load_runmode_mapping",
    "parse_dependencies",
    "parse_properties",
]
