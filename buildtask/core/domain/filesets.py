# buildtask/core/domain/filesets.py
from __future__ import annotations

import fnmatch
import glob
import os
from typing import List, Optional

from pydantic import BaseModel, Field, PrivateAttr, field_validator


def _dedupe_keep_order(items: List[str]) -> List[str]:
    seen: set[str] = set()
    out: List[str] = []
    for s in items:
        if s in seen:
            continue
        seen.add(s)
        out.append(s)
    return out


class FileSet(BaseModel):
    """
    Ordered set of files rooted at a base directory.

    Includes are glob patterns (``**`` recurses) resolved against
    ``base_dir``; ``files`` lists literal paths kept even when they do not
    exist yet. The scan result is deterministic: pattern order first, then
    sorted matches within a pattern, first occurrence wins.
    """

    base_dir: Optional[str] = None
    includes: List[str] = Field(default_factory=list)
    excludes: List[str] = Field(default_factory=list)
    files: List[str] = Field(default_factory=list)

    _file_names: Optional[List[str]] = PrivateAttr(default=None)

    @field_validator("base_dir")
    @classmethod
    def _empty_base_dir_is_unset(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def default_base_dir(self, base_dir: str) -> None:
        """Assign ``base_dir`` if none is set; a new base invalidates the scan."""
        if self.base_dir is None:
            self.base_dir = os.path.abspath(base_dir)
            self._file_names = None

    def _absolute(self, path: str) -> str:
        if os.path.isabs(path):
            return os.path.normpath(path)
        return os.path.normpath(os.path.join(self.base_dir or os.getcwd(), path))

    def _is_excluded(self, path: str) -> bool:
        return any(fnmatch.fnmatch(path, self._absolute(pat)) for pat in self.excludes)

    def scan(self) -> List[str]:
        found: List[str] = []
        for pattern in self.includes:
            matches = glob.glob(self._absolute(pattern), recursive=True)
            found.extend(sorted(m for m in matches if os.path.isfile(m)))
        found.extend(self._absolute(f) for f in self.files)
        self._file_names = _dedupe_keep_order(
            [os.path.normpath(p) for p in found if not self._is_excluded(p)]
        )
        return self._file_names

    @property
    def file_names(self) -> List[str]:
        if self._file_names is None:
            self.scan()
        return self._file_names  # type: ignore[return-value]

    def add(self, path: str) -> None:
        """Append an absolute path to the scanned members."""
        names = self.file_names
        path = self._absolute(path)
        if path not in names:
            names.append(path)


def find_more_recent(file_names: List[str], instant: float) -> Optional[str]:
    """
    Return the first file modified strictly after ``instant`` (epoch seconds).

    A file that does not exist counts as newer: a missing input can never
    be considered up to date.
    """
    for name in file_names:
        try:
            mtime = os.stat(name).st_mtime
        except FileNotFoundError:
            return name
        if mtime > instant:
            return name
    return None


class ResourceGroup(FileSet):
    """A file set of embeddable resources sharing one naming prefix policy."""

    prefix: Optional[str] = None
    dynamic_prefix: bool = False

    @field_validator("prefix")
    @classmethod
    def _empty_prefix_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def partition(self, is_definition) -> tuple[List[str], List[str]]:
        """Split members into (definition files, opaque files), order kept."""
        definitions: List[str] = []
        opaque: List[str] = []
        for name in self.file_names:
            (definitions if is_definition(name) else opaque).append(name)
        return definitions, opaque
