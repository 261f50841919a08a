# buildtask/core/resources/aggregator.py
from __future__ import annotations

import os
from typing import Dict, List, Optional

import structlog

from buildtask.core.domain.cultures import detect_culture
from buildtask.core.ports import ResourceLinker

logger = structlog.get_logger()


class CultureResourceAggregator:
    """
    Collects compiled localized resources per culture and links one
    satellite module per culture when flushed.
    """

    def __init__(self, linker: ResourceLinker, satellite_extension: str = "dll", log=None):
        self.linker = linker
        self.satellite_extension = satellite_extension.lstrip(".")
        self.log = log or logger
        self._by_culture: Dict[str, List[str]] = {}

    def add(self, cultured_file: str, intermediate_path: str) -> Optional[str]:
        """
        Queue `intermediate_path` under the culture of `cultured_file`.
        Returns the culture, or None when the file carries none (not queued).
        """
        culture = detect_culture(cultured_file)
        if culture is None:
            return None
        self._by_culture.setdefault(culture, []).append(intermediate_path)
        return culture

    @property
    def cultures(self) -> List[str]:
        return list(self._by_culture)

    def satellite_path(self, output_dir: str, output_base_name: str, culture: str) -> str:
        return os.path.join(output_dir, culture, f"{output_base_name}.resources.{self.satellite_extension}")

    def flush(self, output_dir: str, output_base_name: str) -> List[str]:
        """Link every queued culture and clear the queue. Returns the satellites written."""
        written: List[str] = []
        for culture, resources in self._by_culture.items():
            os.makedirs(os.path.join(output_dir, culture), exist_ok=True)
            target = self.satellite_path(output_dir, output_base_name, culture)
            self.log.info("linking_satellite", culture=culture, output=target, resources=len(resources))
            self.linker.link(list(resources), target, culture)
            written.append(target)
        self._by_culture.clear()
        return written
