"""
buildtask package.

Public API surface:
  - compile_unit: programmatic entrypoint that compiles one unit if stale
  - load_unit: validates a unit description (dict) into a CompilationUnit
"""

from .build import compile_unit
from .core.domain.models import CompilationUnit, load_unit

__all__ = ["compile_unit", "load_unit", "CompilationUnit"]
