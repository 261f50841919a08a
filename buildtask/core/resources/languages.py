# buildtask/core/resources/languages.py
"""
Source-language strategies.

Each supported language contributes the source extension used to find the
file that goes with a resource definition, the patterns that capture its
namespace and class declarations, the default compiler binary, and any
compiler options only that language understands.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Pattern, TextIO

from buildtask.core.domain.exceptions import ConfigurationError
from buildtask.core.domain.models import CompilationUnit

OptionWriter = Callable[[TextIO, CompilationUnit], None]


def write_flag(writer: TextIO, name: str) -> None:
    writer.write(f"/{name}\n")


def write_option(writer: TextIO, name: str, value: str) -> None:
    # values are always quoted
    writer.write(f'"/{name}:{value}"\n')


def _no_options(writer: TextIO, unit: CompilationUnit) -> None:
    pass


def _csharp_options(writer: TextIO, unit: CompilationUnit) -> None:
    if unit.debug:
        write_flag(writer, "debug")
        write_option(writer, "define", "DEBUG;TRACE")


def _vb_options(writer: TextIO, unit: CompilationUnit) -> None:
    if unit.debug:
        write_flag(writer, "debug")
        write_option(writer, "define", "DEBUG=True,TRACE=True")


@dataclass(frozen=True)
class LanguageStrategy:
    key: str
    extension: str
    compiler: str
    namespace_pattern: Pattern[str]
    class_pattern: Pattern[str]
    write_options: OptionWriter = _no_options

    def namespaces(self, line: str) -> List[str]:
        """Namespace components declared on `line`, in order."""
        return [m.group("namespace") for m in self.namespace_pattern.finditer(line)]

    def class_name(self, line: str):
        m = self.class_pattern.search(line)
        return m.group("class") if m else None


_CS_MODIFIERS = r"(?:(?:public|internal|private|protected|sealed|abstract|static|partial|unsafe|new)\s+)*"
_VB_MODIFIERS = r"(?:(?:Public|Friend|Private|Protected|Partial|MustInherit|NotInheritable|Shadows)\s+)*"
_JSL_MODIFIERS = r"(?:(?:public|private|protected|final|abstract|static)\s+)*"

CSHARP = LanguageStrategy(
    key="csharp",
    extension=".cs",
    compiler="csc",
    namespace_pattern=re.compile(r"(?:^|[\s{;])namespace\s+(?P<namespace>\w+(?:\.\w+)*)"),
    class_pattern=re.compile(r"^\s*" + _CS_MODIFIERS + r"class\s+(?P<class>\w+)"),
    write_options=_csharp_options,
)

VB = LanguageStrategy(
    key="vb",
    extension=".vb",
    compiler="vbc",
    namespace_pattern=re.compile(r"^\s*Namespace\s+(?P<namespace>\w+(?:\.\w+)*)", re.IGNORECASE),
    class_pattern=re.compile(r"^\s*" + _VB_MODIFIERS + r"Class\s+(?P<class>\w+)", re.IGNORECASE),
    write_options=_vb_options,
)

JSHARP = LanguageStrategy(
    key="jsharp",
    extension=".jsl",
    compiler="vjc",
    namespace_pattern=re.compile(r"^\s*package\s+(?P<namespace>\w+(?:\.\w+)*)\s*;"),
    class_pattern=re.compile(r"^\s*" + _JSL_MODIFIERS + r"class\s+(?P<class>\w+)"),
    write_options=_csharp_options,
)

LANGUAGES: Dict[str, LanguageStrategy] = {s.key: s for s in (CSHARP, VB, JSHARP)}

# Common aliases accepted in unit descriptions and on the command line.
_ALIASES = {"cs": "csharp", "c#": "csharp", "csc": "csharp", "vbnet": "vb", "vbc": "vb", "vjc": "jsharp", "j#": "jsharp"}


def get_language(key: str) -> LanguageStrategy:
    norm = (key or "").strip().lower()
    norm = _ALIASES.get(norm, norm)
    try:
        return LANGUAGES[norm]
    except KeyError:
        raise ConfigurationError(f"Unsupported source language '{key}'. Known: {', '.join(sorted(LANGUAGES))}") from None
