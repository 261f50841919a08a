# buildtask/adapters/toolchain/linker.py
from __future__ import annotations

import os
from typing import List, Optional

import structlog

from buildtask.adapters.toolchain.process import _run, check
from buildtask.core.ports import ResourceLinker

logger = structlog.get_logger()


class AssemblyLinker(ResourceLinker):
    """
    Bundles compiled resources into a satellite library with the
    assembly linker (`al /target:lib /culture:<c> /out:<o> /embed:<r>...`).
    """

    def __init__(self, executable: str = "al", timeout: Optional[int] = None):
        self.executable = executable
        self.timeout = timeout

    def build_command(self, resources: List[str], output_path: str, culture: str) -> List[str]:
        cmd = [self.executable, "/nologo", "/target:lib", f"/culture:{culture}", f"/out:{output_path}"]
        cmd.extend(f"/embed:{r}" for r in resources)
        return cmd

    def link(self, resources: List[str], output_path: str, culture: str) -> None:
        if not resources:
            return
        cmd = self.build_command(resources, output_path, culture)
        logger.debug("linker_invoked", culture=culture, output=output_path, resources=len(resources))
        check(_run(cmd, cwd=os.path.dirname(output_path) or None, timeout=self.timeout), self.executable)
