# buildtask/core/resources/linkage.py
from __future__ import annotations

import os
from typing import Iterator, List, Optional

import structlog

from buildtask.core.domain.cultures import detect_culture
from buildtask.core.domain.models import ResourceLinkage
from buildtask.core.resources.languages import LanguageStrategy

logger = structlog.get_logger()

# Resource kinds named after their class rather than their file
# ('Default.aspx.resx' belongs to the class in 'Default.aspx.cs').
CODEBEHIND_MARKERS = (".aspx", ".asax", ".ascx", ".asmx")


def strip_codebehind(name: str) -> str:
    """Remove the first code-behind marker found in `name`."""
    for marker in CODEBEHIND_MARKERS:
        if marker in name:
            return name.replace(marker, "")
    return name


def read_lines(path: str) -> Iterator[str]:
    """Lazily yield the lines of a text file; the file closes when exhausted or dropped."""
    with open(path, "r", encoding="utf-8-sig", errors="replace") as fh:
        for line in fh:
            yield line.rstrip("\r\n")


class ResourceLinkageScanner:
    """
    Finds the namespace/class a resource definition file belongs to by
    scanning the matching source file of the configured language.
    """

    def __init__(self, language: LanguageStrategy, log=None):
        self.language = language
        self.log = log or logger

    def candidate_sources(self, definition_file: str) -> List[str]:
        stem = os.path.splitext(definition_file)[0]

        # only the trailing culture segment is dropped
        culture = detect_culture(definition_file)
        if culture:
            stem = stem[: -(len(culture) + 1)]
        source = stem + self.language.extension

        candidates = [source]
        stripped = os.path.join(os.path.dirname(source), strip_codebehind(os.path.basename(source)))
        if stripped != source:
            candidates.append(stripped)
        return candidates

    def search(self, lines: Iterator[str]) -> ResourceLinkage:
        """Scan source lines until the first class declaration."""
        namespace_name = ""
        class_name = ""

        for line in lines:
            for component in self.language.namespaces(line):
                namespace_name += ("." if namespace_name else "") + component

            found = self.language.class_name(line)
            if found:
                class_name = found
                break

        return ResourceLinkage(namespace_name, class_name)

    def find_linkage(self, definition_file: str) -> Optional[ResourceLinkage]:
        source_file = next((c for c in self.candidate_sources(definition_file) if os.path.isfile(c)), None)
        if source_file is None:
            self.log.debug("linkage_source_not_found", resource=definition_file)
            return None

        lines = read_lines(source_file)
        try:
            linkage = self.search(lines)
        finally:
            lines.close()

        if linkage.is_valid:
            self.log.debug("linkage_found", linkage=str(linkage), resource=definition_file)
        else:
            self.log.debug("linkage_not_found_in_source", source=source_file, resource=definition_file)
        return linkage
