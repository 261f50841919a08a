"""Subprocess-backed implementations of the toolchain ports."""

from .linker import AssemblyLinker
from .process import SubprocessCompilerProcess
from .resgen import ResgenResourceCompiler

__all__ = ["AssemblyLinker", "ResgenResourceCompiler", "SubprocessCompilerProcess"]
