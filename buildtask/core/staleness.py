# buildtask/core/staleness.py
from __future__ import annotations

import os
import re
from typing import Iterable, List, Optional

import structlog

from buildtask.core.domain.filesets import find_more_recent
from buildtask.core.domain.models import CompilationUnit, ExtraArgument, StalenessVerdict

logger = structlog.get_logger()

# /res:path[,name] or /resource:path[,name]; the path stops at the first comma.
_RESOURCE_ARG_RE = re.compile(r"^/(?:res|resource):(?P<path>[^,]*)")


def resource_paths_from_arguments(arguments: Iterable[ExtraArgument]) -> List[str]:
    """
    Extract literal resource paths from raw compiler arguments.
    Anything that does not look like a resource option is ignored.
    """
    paths: List[str] = []
    for argument in arguments:
        if not argument.enabled or not argument.value:
            continue
        m = _RESOURCE_ARG_RE.match(argument.value)
        if m and m.group("path"):
            paths.append(m.group("path"))
    return paths


class StalenessEvaluator:
    """Decides whether the output of a compilation unit must be rebuilt."""

    def __init__(self, log=None):
        self.log = log or logger

    def needs_compile(self, unit: CompilationUnit) -> StalenessVerdict:
        # verbose units report the trigger at info level
        report = self.log.info if unit.verbose else self.log.debug

        # return as soon as we know we need to compile
        try:
            output_mtime = os.stat(unit.output).st_mtime
        except FileNotFoundError:
            report("output_missing", output=unit.output)
            return StalenessVerdict(True, unit.output)

        candidates = [
            unit.sources.file_names,
            unit.references.file_names,
            unit.modules.file_names,
            *(group.file_names for group in unit.resources),
            [unit.full_path(p) for p in resource_paths_from_arguments(unit.arguments)],
        ]
        for file_names in candidates:
            trigger: Optional[str] = find_more_recent(file_names, output_mtime)
            if trigger is not None:
                report("input_out_of_date", path=trigger, output=unit.output)
                return StalenessVerdict(True, trigger)

        return StalenessVerdict(False)
