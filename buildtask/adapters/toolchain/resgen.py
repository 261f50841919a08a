# buildtask/adapters/toolchain/resgen.py
from __future__ import annotations

import os
from typing import Optional

import structlog

from buildtask.adapters.toolchain.process import _run, check
from buildtask.core.ports import ResourceCompiler

logger = structlog.get_logger()


class ResgenResourceCompiler(ResourceCompiler):
    """Compiles resource definitions with `resgen <input> <output>`."""

    def __init__(self, executable: str = "resgen", timeout: Optional[int] = None):
        self.executable = executable
        self.timeout = timeout

    def compile(self, input_path: str, output_path: str, output_dir: str, base_dir: str) -> str:
        target = os.path.join(output_dir, output_path)
        os.makedirs(output_dir, exist_ok=True)

        logger.info("compiling_resource", input=input_path, output=target)
        check(_run([self.executable, input_path, target], cwd=base_dir, timeout=self.timeout), self.executable)
        return target
