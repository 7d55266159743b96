"""Small shared helpers with no planner semantics."""

from aggregate_planner.utils.fs import atomic_write

__all__ = ["atomic_write"]
