# buildtask/core/domain/models.py
from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from buildtask.core.domain.exceptions import ConfigurationError
from buildtask.core.domain.filesets import FileSet, ResourceGroup

# --- Enums ---


class TargetKind(str, Enum):
    """Output file format requested from the compiler."""
    EXE = "exe"
    WINEXE = "winexe"
    LIBRARY = "library"
    MODULE = "module"


# --- Configuration entities ---


class ExtraArgument(BaseModel):
    """
    A raw compiler argument as bound from the build script.
    Only enabled arguments (if=true, unless=false) are used.
    """
    model_config = ConfigDict(populate_by_name=True)

    value: Optional[str] = None
    if_: bool = Field(True, alias="if")
    unless: bool = False

    @property
    def enabled(self) -> bool:
        return self.if_ and not self.unless


class CompilationUnit(BaseModel):
    """
    One compile task's full description of sources, references, modules,
    resources and output options.
    """

    output: str = Field(..., min_length=1)
    target: TargetKind
    debug: bool = False
    define: Optional[str] = None
    win32icon: Optional[str] = None
    main: Optional[str] = None
    warnaserror: bool = False

    sources: FileSet
    references: FileSet = Field(default_factory=FileSet)
    modules: FileSet = Field(default_factory=FileSet)
    resources: List[ResourceGroup] = Field(default_factory=list)
    arguments: List[ExtraArgument] = Field(default_factory=list)

    base_dir: str = Field(default_factory=os.getcwd)
    language: Optional[str] = None
    verbose: bool = False

    @field_validator("output", mode="before")
    @classmethod
    def _strip_output(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("sources")
    @classmethod
    def _sources_not_empty(cls, v: FileSet) -> FileSet:
        if not v.includes and not v.files:
            raise ValueError("sources must name at least one include pattern or file")
        return v

    @field_validator("define", "win32icon", "main", "language")
    @classmethod
    def _empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @model_validator(mode="after")
    def _resolve_paths(self) -> "CompilationUnit":
        self.base_dir = os.path.abspath(self.base_dir)
        self.output = self.full_path(self.output)
        if self.win32icon is not None:
            self.win32icon = self.full_path(self.win32icon)
        for fs in self.file_sets():
            if fs.base_dir is not None:
                fs.base_dir = self.full_path(fs.base_dir)
        return self

    def full_path(self, path: str) -> str:
        return os.path.normpath(os.path.join(self.base_dir, path))

    def file_sets(self) -> List[FileSet]:
        return [self.sources, self.references, self.modules, *self.resources]

    def default_base_dirs(self) -> None:
        """Give every collection without a base directory the unit's one."""
        for fs in self.file_sets():
            fs.default_base_dir(self.base_dir)

    @property
    def output_dir(self) -> str:
        return os.path.dirname(self.output)

    @property
    def output_base_name(self) -> str:
        return os.path.splitext(os.path.basename(self.output))[0]


def load_unit(data: Dict[str, Any]) -> CompilationUnit:
    """Validate a unit description, raising ConfigurationError on failure."""
    try:
        return CompilationUnit.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid compilation unit: {e}") from e


# --- Value objects ---


class ResourceLinkage:
    """
    Namespace/class pair discovered in the source file that goes with a
    resource definition file. Names are trimmed on assignment.
    """

    def __init__(self, namespace_name: Optional[str] = None, class_name: Optional[str] = None):
        self.namespace_name = namespace_name
        self.class_name = class_name

    @property
    def namespace_name(self) -> Optional[str]:
        return self._namespace_name

    @namespace_name.setter
    def namespace_name(self, value: Optional[str]) -> None:
        self._namespace_name = value.strip() if value is not None else None

    @property
    def class_name(self) -> Optional[str]:
        return self._class_name

    @class_name.setter
    def class_name(self, value: Optional[str]) -> None:
        self._class_name = value.strip() if value is not None else None

    @property
    def has_namespace_name(self) -> bool:
        return bool(self._namespace_name)

    @property
    def has_class_name(self) -> bool:
        return bool(self._class_name)

    @property
    def is_valid(self) -> bool:
        return self.has_namespace_name or self.has_class_name

    def __str__(self) -> str:
        if self.has_namespace_name and self.has_class_name:
            return f"{self._namespace_name}.{self._class_name}"
        if self.has_namespace_name:
            return self._namespace_name  # type: ignore[return-value]
        if self.has_class_name:
            return self._class_name  # type: ignore[return-value]
        return ""

    def __repr__(self) -> str:
        return f"ResourceLinkage(namespace_name={self._namespace_name!r}, class_name={self._class_name!r})"


@dataclass(frozen=True)
class StalenessVerdict:
    stale: bool
    trigger: Optional[str] = None

    def __bool__(self) -> bool:
        return self.stale
