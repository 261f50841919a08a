# buildtask/core/domain/exceptions.py
from typing import Optional


class BuildTaskError(Exception):
    """Base class for every failure raised by the compile task."""


class ConfigurationError(BuildTaskError):
    """The compilation unit description is missing or invalid."""


class ToolchainError(BuildTaskError):
    """An external tool (compiler, resource compiler, linker) failed."""

    def __init__(self, tool: str, message: str, exit_code: Optional[int] = None):
        self.tool = tool
        self.exit_code = exit_code
        detail = f" (exit code {exit_code})" if exit_code is not None else ""
        super().__init__(f"{tool} failed{detail}: {message}")
