# buildtask/build.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from buildtask.core.domain.exceptions import ConfigurationError
from buildtask.core.domain.models import CompilationUnit, load_unit


def read_unit_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Reads a JSON unit description. Relative base_dir values are anchored at the file."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Unit description not found: {p}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Corrupt unit description {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Unit description {p} is not a JSON object.")

    base_dir = Path(data.get("base_dir") or ".")
    if not base_dir.is_absolute():
        data["base_dir"] = str((p.resolve().parent / base_dir).resolve())
    return data


def compile_unit(
    unit: Union[CompilationUnit, Dict[str, Any]],
    *,
    language: Optional[str] = None,
    verbose: bool = False,
    container=None,
) -> bool:
    """
    Programmatic entrypoint (usable without spawning another process).
    Returns True when the compiler ran, False when the output was up to date.
    """
    if not isinstance(unit, CompilationUnit):
        unit = load_unit(unit)
    if language:
        unit.language = language
    if verbose:
        unit.verbose = True

    if container is None:
        from buildtask.shared.container import container

    use_case = container.compile_unit_use_case()
    return use_case.execute(unit)
