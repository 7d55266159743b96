"""
aggregate-planner - AEM runmode feature-model aggregate planning.

File: src/aggregate_planner/__init__.py

Purpose
- Package root. Turns the content-package converter's runmode mapping into the
  ordered user, product and final aggregate batches handed to a feature-model
  aggregator.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
