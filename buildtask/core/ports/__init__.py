# buildtask/core/ports/__init__.py
"""
Core Ports (Interfaces).

This package defines the abstract base classes that the toolchain adapters
must implement. These interfaces let the compile use case drive the
resource compiler, the resource linker and the compiler process without
knowing how (or whether) they spawn external programs.
"""

from abc import ABC, abstractmethod
from typing import List


class ResourceCompiler(ABC):
    """
    Port for turning a resource definition file (e.g. .resx) into its
    compiled intermediate form (e.g. .resources).
    """

    @abstractmethod
    def compile(self, input_path: str, output_path: str, output_dir: str, base_dir: str) -> str:
        """
        Compile `input_path` into `output_dir/output_path`.
        Returns the full path of the intermediate file.
        Raises ToolchainError on failure.
        """
        pass


class ResourceLinker(ABC):
    """Port for bundling compiled resources into one satellite module per culture."""

    @abstractmethod
    def link(self, resources: List[str], output_path: str, culture: str) -> None:
        """Raises ToolchainError on failure."""
        pass


class CompilerProcess(ABC):
    """Port for running the external compiler."""

    @abstractmethod
    def run(self, executable: str, argument: str) -> int:
        """
        Run `executable` with exactly one command-line argument and return
        its exit status.
        """
        pass


__all__ = ["ResourceCompiler", "ResourceLinker", "CompilerProcess"]
